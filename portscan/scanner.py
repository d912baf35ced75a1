from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Set

from .aggregator import ResultAggregator
from .deadline import Deadline
from .errors import Cancelled, ConfigError
from .limiter import ConcurrencyLimiter, Slot
from .logger import log_event
from .models import ProbeResult, ScanReport, ScanRequest
from .prober import probe

log = logging.getLogger(__name__)

Prober = Callable[[Deadline, str, int], ProbeResult]

DEFAULT_DRAIN_TIMEOUT_S = 1.0


def validate_request(request: ScanRequest) -> None:
    if not request.host or not request.host.strip():
        raise ConfigError("host must not be empty")
    if not request.ports:
        raise ConfigError("no ports to scan", {"host": request.host})
    if request.concurrency_limit < 1:
        raise ConfigError(
            f"concurrency limit must be >= 1, got {request.concurrency_limit}",
            {"concurrency_limit": request.concurrency_limit},
        )
    if not request.overall_timeout > 0:
        raise ConfigError(
            f"overall timeout must be > 0, got {request.overall_timeout}",
            {"overall_timeout": request.overall_timeout},
        )


class _ScanRun:
    """Per-call state shared between the dispatch loop and the workers."""

    def __init__(self, request: ScanRequest):
        self.deadline = Deadline(request.overall_timeout)
        self.limiter = ConcurrencyLimiter(request.concurrency_limit)
        self.aggregator = ResultAggregator(request.host, total=len(request.ports))
        self.truncated = threading.Event()


class ScanCoordinator:
    """
    Fans one probe per port out over a bounded thread pool.

    A slot from the ConcurrencyLimiter is taken before each submit and given
    back when that probe returns, so the pool never holds more than
    `concurrency_limit` probes. When the overall deadline fires, dispatch
    stops, in-flight probes get `drain_timeout` seconds to report, and the
    report comes back with completed=False.
    """

    def __init__(
        self,
        request: ScanRequest,
        prober: Prober = probe,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT_S,
        progress_every: int = 0,
    ):
        validate_request(request)
        self.request = request
        self.prober = prober
        self.drain_timeout = drain_timeout
        self.progress_every = progress_every

    def scan(self) -> ScanReport:
        req = self.request
        run = _ScanRun(req)
        start = time.perf_counter()
        log_event(log, "scan_started", {
            "host": req.host,
            "ports": len(req.ports),
            "concurrency": req.concurrency_limit,
            "timeout_s": req.overall_timeout,
        })

        dispatched_all = True
        pending: Set[Future] = set()
        pool = ThreadPoolExecutor(max_workers=req.concurrency_limit, thread_name_prefix="probe")
        try:
            for port in req.ports:
                try:
                    slot = run.limiter.acquire(run.deadline)
                except Cancelled as e:
                    log.info("Stopping dispatch at port %d: %s", port, e)
                    dispatched_all = False
                    break
                pending.add(pool.submit(self._run_probe, run, port, slot))

            _, not_done = wait(pending, timeout=run.deadline.remaining())
            finished_in_time = not not_done
            if not_done:
                log.info("Deadline reached with %d probe(s) in flight", len(not_done))
                _, not_done = wait(not_done, timeout=self.drain_timeout)
                if not_done:
                    log.warning("%d probe(s) still running after drain, dropping them", len(not_done))
        finally:
            # probes that have not dialed yet see an expired deadline
            run.deadline.cancel()
            pool.shutdown(wait=False, cancel_futures=True)

        completed = dispatched_all and finished_in_time and not run.truncated.is_set()
        report = run.aggregator.finalize(completed, time.perf_counter() - start)
        log_event(log, "scan_finished", {
            "host": report.host,
            "open": len(report.open_ports),
            "scanned": report.scanned,
            "total": report.total,
            "completed": report.completed,
            "elapsed_s": report.elapsed_s,
        })
        return report

    def _run_probe(self, run: _ScanRun, port: int, slot: Slot) -> None:
        try:
            try:
                result = self.prober(run.deadline, self.request.host, port)
            except Exception as e:
                log.exception("Probe of port %d failed unexpectedly", port)
                result = ProbeResult(port=port, open=False, cause=repr(e))

            # a closed verdict reached after expiry may just be the deadline talking
            if not result.open and run.deadline.expired():
                run.truncated.set()
            scanned = run.aggregator.add(result)
            self._log_progress(run, scanned)
        finally:
            run.limiter.release(slot)

    def _log_progress(self, run: _ScanRun, scanned: int) -> None:
        total = len(self.request.ports)
        if self.progress_every <= 0:
            return
        if scanned % self.progress_every == 0 or scanned == total:
            log.info("Scanned %d/%d | open=%d", scanned, total, run.aggregator.open_count)


def scan(request: ScanRequest, prober: Prober = probe, **kwargs) -> ScanReport:
    return ScanCoordinator(request, prober=prober, **kwargs).scan()
