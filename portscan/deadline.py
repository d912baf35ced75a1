from __future__ import annotations

import threading
import time


class Deadline:
    """
    Shared cancellation token for one scan.
    Expires on its own after `timeout_s`, or early when cancel() is called.
    Every limiter acquire and every probe of a scan sees the same instance.
    """

    def __init__(self, timeout_s: float, clock=time.monotonic):
        self._clock = clock
        self._expires_at = clock() + timeout_s
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        if self._cancelled.is_set():
            return 0.0
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def cancel(self) -> None:
        self._cancelled.set()
