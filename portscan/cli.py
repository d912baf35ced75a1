from __future__ import annotations

import argparse
import logging
import sys

from .errors import ScanError
from .logger import setup_logging
from .models import ScanRequest, default_concurrency
from .output import print_report, save_report
from .ports import parse_ports
from .scanner import ScanCoordinator

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORTS = "5000-5500"
DEFAULT_TIMEOUT_S = 5

log = logging.getLogger("portscan.cli")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portscan", description="Concurrent TCP connect port scanner")
    p.add_argument("--host", default=DEFAULT_HOST, help=f"Host to scan (default: {DEFAULT_HOST})")
    p.add_argument("--ports", default=DEFAULT_PORTS, help=f"Port(s), e.g. 80 or 22-100 (default: {DEFAULT_PORTS})")
    p.add_argument(
        "--workers",
        type=int,
        default=default_concurrency(),
        help="Max probes in flight (default: number of logical CPUs)",
    )
    p.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT_S,
        help=f"Overall scan timeout in seconds (default: {DEFAULT_TIMEOUT_S})",
    )
    p.add_argument("--format", choices=["txt", "csv", "json"], help="Save the report to a file")
    p.add_argument("--out-dir", default="SCANS", help="Output directory for saved reports")
    p.add_argument("--progress-every", type=int, default=0, help="Log progress every N probes (0 = off)")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log every probe outcome")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    setup_logging(level, args.log_file)

    try:
        request = ScanRequest(
            host=args.host,
            ports=parse_ports(args.ports),
            concurrency_limit=args.workers,
            overall_timeout=args.timeout,
        )
        coordinator = ScanCoordinator(request, progress_every=args.progress_every)
    except ScanError as e:
        log.error("%s", e.message)
        print(f"[!] {e.message}", file=sys.stderr)
        return 1

    try:
        report = coordinator.scan()
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user.", file=sys.stderr)
        return 130

    print_report(report)

    if args.format:
        path = save_report(report, fmt=args.format, out_dir=args.out_dir)
        print(f"Saved report to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
