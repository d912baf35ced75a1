"""Exceptions raised by the scanner.

Only bad input escalates to the caller. Dial failures and deadline expiry
are reported as data on the ScanReport, never as exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ScanError(Exception):
    """Base class for every error the scanner raises."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidSpec(ScanError, ValueError):
    """Malformed port specification."""


class ConfigError(ScanError, ValueError):
    """Invalid scan configuration. The scan never starts."""


class Cancelled(ScanError):
    """A limiter slot was not granted because the deadline fired first."""
