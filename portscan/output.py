from __future__ import annotations

import csv
import json
import os
import sys
from datetime import datetime
from typing import Any, Dict, List

from .models import ScanReport


def format_report(report: ScanReport) -> List[str]:
    return [f"{p} - open" for p in report.open_ports]


def print_report(report: ScanReport) -> None:
    for line in format_report(report):
        print(line)

    if not report.completed:
        print(
            f"[!] Deadline reached: partial results ({report.scanned}/{report.total} ports probed)",
            file=sys.stderr,
        )


def report_to_dict(report: ScanReport) -> Dict[str, Any]:
    return {
        "host": report.host,
        "open_ports": list(report.open_ports),
        "completed": report.completed,
        "elapsed_s": report.elapsed_s,
        "scanned": report.scanned,
        "total": report.total,
    }


def save_report(report: ScanReport, fmt: str, out_dir: str = "SCANS") -> str:
    if fmt not in ("txt", "csv", "json"):
        raise ValueError(f"Unsupported format: {fmt}")

    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_scan.{fmt}")

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"Host: {report.host} | Found {len(report.open_ports)} open ports\n")
            for line in format_report(report):
                f.write(line + "\n")
            if not report.completed:
                f.write("(partial results)\n")

    elif fmt == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["port", "status"])
            for p in report.open_ports:
                w.writerow([p, "open"])

    else:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report_to_dict(report), f, indent=2)

    return path
