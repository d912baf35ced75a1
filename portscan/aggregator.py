from __future__ import annotations

import logging
import threading
from typing import Optional, Set

from .models import ProbeResult, ScanReport

log = logging.getLogger(__name__)


class ResultAggregator:
    """
    Collects probe results from many worker threads.
    The open-port set lives behind a lock and is only read by finalize().
    """

    def __init__(self, host: str, total: int = 0):
        self.host = host
        self.total = total
        self._lock = threading.Lock()
        self._open: Set[int] = set()
        self._scanned = 0
        self._report: Optional[ScanReport] = None

    @property
    def scanned(self) -> int:
        with self._lock:
            return self._scanned

    @property
    def open_count(self) -> int:
        with self._lock:
            return len(self._open)

    def add(self, result: ProbeResult) -> int:
        """Record one result; returns how many results have been recorded so far."""
        with self._lock:
            if self._report is not None:
                log.debug("Dropping late result for port %d", result.port)
                return self._scanned
            self._scanned += 1
            if result.open:
                self._open.add(result.port)
            return self._scanned

    def finalize(self, completed: bool, elapsed_s: float) -> ScanReport:
        with self._lock:
            if self._report is not None:
                raise RuntimeError("scan report already finalized")
            self._report = ScanReport(
                host=self.host,
                open_ports=tuple(sorted(self._open)),
                completed=completed,
                elapsed_s=round(elapsed_s, 4),
                scanned=self._scanned,
                total=self.total,
            )
            return self._report
