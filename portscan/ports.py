from __future__ import annotations

from typing import Tuple

from .errors import InvalidSpec
from .models import PortRange

MAX_PORT = 65535


def _parse_bound(text: str, spec: str) -> int:
    # isdigit() alone accepts things like superscripts
    if not text or not (text.isascii() and text.isdigit()):
        raise InvalidSpec(f"Invalid port number {text!r} in spec {spec!r}", {"spec": spec})
    port = int(text)
    if port < 1 or port > MAX_PORT:
        raise InvalidSpec(
            f"Port {port} out of range 1-{MAX_PORT} in spec {spec!r}",
            {"spec": spec, "port": port},
        )
    return port


def parse_ports(spec: str) -> PortRange:
    """
    Parses a port specification string into an ascending tuple of ports.
    Supports:
    - Single port: "80"
    - Inclusive range: "1-1024"
    """
    spec = (spec or "").strip()
    if not spec:
        raise InvalidSpec("Empty port spec", {"spec": spec})

    parts: Tuple[str, ...] = tuple(spec.split("-"))
    if len(parts) == 1:
        return (_parse_bound(parts[0], spec),)
    if len(parts) != 2:
        raise InvalidSpec(f"Unable to determine port(s) to scan from {spec!r}", {"spec": spec})

    start = _parse_bound(parts[0], spec)
    end = _parse_bound(parts[1], spec)
    if start > end:
        raise InvalidSpec(f"Invalid port range: {spec}", {"spec": spec})
    return tuple(range(start, end + 1))
