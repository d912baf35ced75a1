import os
from dataclasses import dataclass
from typing import Optional, Tuple

PortRange = Tuple[int, ...]


def default_concurrency() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class ScanRequest:
    host: str
    ports: PortRange
    concurrency_limit: int
    overall_timeout: float


@dataclass(frozen=True)
class ProbeResult:
    port: int
    open: bool
    cause: Optional[str] = None
    elapsed_s: float = 0.0


@dataclass(frozen=True)
class ScanReport:
    host: str
    open_ports: PortRange
    completed: bool
    elapsed_s: float
    scanned: int = 0
    total: int = 0
