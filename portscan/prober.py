from __future__ import annotations

import logging
import socket
import time

from .deadline import Deadline
from .models import ProbeResult

log = logging.getLogger(__name__)


def probe(deadline: Deadline, host: str, port: int) -> ProbeResult:
    """
    One TCP connect attempt against host:port.
    The connect timeout is whatever is left of the scan's deadline when the
    probe starts. Every dial error is a closed port, never an exception.
    """
    start = time.perf_counter()
    budget = deadline.remaining()
    if budget <= 0:
        return ProbeResult(port=port, open=False, cause="deadline expired")

    try:
        sock = socket.create_connection((host, port), timeout=budget)
    except OSError as e:
        elapsed = round(time.perf_counter() - start, 4)
        cause = str(e) or type(e).__name__
        log.debug("%d CLOSED (%s)", port, cause)
        return ProbeResult(port=port, open=False, cause=cause, elapsed_s=elapsed)

    # no data is exchanged, just the handshake
    sock.close()
    elapsed = round(time.perf_counter() - start, 4)
    log.debug("%d OPEN (%.4fs)", port, elapsed)
    return ProbeResult(port=port, open=True, elapsed_s=elapsed)
