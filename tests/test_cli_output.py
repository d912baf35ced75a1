import csv
import json
import logging
import os

import pytest

from portscan.cli import build_parser, main
from portscan.models import ScanReport, default_concurrency
from portscan.output import format_report, print_report, report_to_dict, save_report


def make_report(completed=True):
    return ScanReport(host="127.0.0.1", open_ports=(22, 80), completed=completed, elapsed_s=0.12, scanned=5, total=5)


def test_defaults_match_original_command():
    args = build_parser().parse_args([])
    assert args.host == "127.0.0.1"
    assert args.ports == "5000-5500"
    assert args.timeout == 5
    assert args.workers == default_concurrency()


def test_format_report_lines():
    assert format_report(make_report()) == ["22 - open", "80 - open"]


def test_save_json(tmp_path):
    path = save_report(make_report(completed=False), fmt="json", out_dir=str(tmp_path))
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data == report_to_dict(make_report(completed=False))
    assert data["open_ports"] == [22, 80]
    assert data["completed"] is False


def test_save_csv(tmp_path):
    path = save_report(make_report(), fmt="csv", out_dir=str(tmp_path))
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [["port", "status"], ["22", "open"], ["80", "open"]]


def test_save_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        save_report(make_report(), fmt="html", out_dir=str(tmp_path))
    assert os.listdir(tmp_path) == []


def test_main_prints_open_ports(listen, capsys):
    port = listen()
    code = main(["--host", "127.0.0.1", "--ports", str(port), "--workers", "2", "--timeout", "3", "-q"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines() == [f"{port} - open"]


def test_main_no_open_ports_is_success(closed_port, capsys):
    code = main(["--ports", str(closed_port), "--timeout", "3", "-q"])
    assert code == 0
    assert capsys.readouterr().out == ""


def test_main_saves_report(listen, tmp_path, capsys):
    port = listen()
    code = main(["--ports", str(port), "--format", "txt", "--out-dir", str(tmp_path), "-q"])
    assert code == 0
    (saved,) = list(tmp_path.iterdir())
    assert f"{port} - open" in saved.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "argv",
    [
        ["--ports", "10-5"],
        ["--ports", "abc"],
        ["--ports", "80", "--workers", "0"],
        ["--ports", "80", "--timeout", "0"],
    ],
)
def test_main_rejects_bad_input(argv, capsys):
    assert main(argv + ["-q"]) == 1
    assert "[!]" in capsys.readouterr().err


def test_print_report_flags_partial_results(capsys):
    print_report(make_report(completed=False))
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["22 - open", "80 - open"]
    assert "partial results" in captured.err
    assert "5/5" in captured.err


def test_print_report_complete_is_quiet_on_stderr(capsys):
    print_report(make_report())
    assert capsys.readouterr().err == ""


def test_main_log_file_gets_scan_events(listen, tmp_path, capsys):
    port = listen()
    log_path = tmp_path / "scan.log"
    code = main(["--ports", str(port), "--timeout", "3", "--log-file", str(log_path)])
    assert code == 0

    text = log_path.read_text(encoding="utf-8")
    assert "scan_started" in text
    assert '"event": "scan_finished"' in text
    assert '"open": 1' in text
    assert "scan_finished" in capsys.readouterr().err


def test_main_verbose_logs_each_closed_port(closed_port, caplog):
    assert main(["--ports", str(closed_port), "--timeout", "3", "-v"]) == 0
    assert logging.getLogger("portscan").level == logging.DEBUG
    closed = [r for r in caplog.records if r.levelno == logging.DEBUG and "CLOSED" in r.getMessage()]
    assert closed and closed[0].getMessage().startswith(f"{closed_port} CLOSED")


def test_main_quiet_hides_scan_events(closed_port, capsys):
    main(["--ports", str(closed_port), "--timeout", "3", "-q"])
    assert "scan_started" not in capsys.readouterr().err
