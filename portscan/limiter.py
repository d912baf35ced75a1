from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass

from .deadline import Deadline
from .errors import Cancelled, ConfigError

# Upper bound on how long a waiter sleeps before rechecking for cancel()
_WAKE_INTERVAL_S = 0.05


@dataclass(frozen=True)
class Slot:
    id: int


class ConcurrencyLimiter:
    """
    Counting gate: at most `limit` slots are held at any instant.
    Waiters give up with Cancelled once the scan's deadline fires.
    No ordering guarantee between waiters.
    """

    def __init__(self, limit: int):
        if limit < 1:
            raise ConfigError(f"concurrency limit must be >= 1, got {limit}", {"limit": limit})
        self.limit = limit
        self._cond = threading.Condition()
        self._held: set = set()
        self._ids = itertools.count(1)

    @property
    def in_use(self) -> int:
        with self._cond:
            return len(self._held)

    def acquire(self, deadline: Deadline) -> Slot:
        with self._cond:
            while len(self._held) >= self.limit:
                remaining = deadline.remaining()
                if remaining <= 0:
                    raise Cancelled("deadline expired while waiting for a probe slot")
                self._cond.wait(min(remaining, _WAKE_INTERVAL_S))
            # a free slot does not override an expired deadline
            if deadline.expired():
                raise Cancelled("deadline expired before a probe slot was granted")
            slot = Slot(next(self._ids))
            self._held.add(slot)
            return slot

    def release(self, slot: Slot) -> None:
        with self._cond:
            if slot not in self._held:
                raise RuntimeError(f"slot {slot.id} is not held")
            self._held.remove(slot)
            self._cond.notify()
