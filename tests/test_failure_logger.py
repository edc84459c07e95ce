from __future__ import annotations

import time
from pathlib import Path

from engine_fakes import set_mtime
from ssa_benchmark.failures import FailureLogger

DAY = 86400


def test_scan_failure_report_has_header_and_output(tmp_path: Path) -> None:
    log = tmp_path / "scan.tmp.log"
    log.write_text("boom\n")
    result = tmp_path / "scan-1.json"
    result.write_text("partial")

    out = FailureLogger(tmp_path / "failures").record_scan_failure("my app", "2.0", log, result)

    assert out.name.startswith("my_app-scan-")
    assert out.suffix == ".log"
    body = out.read_text()
    assert "Project: my app" in body
    assert "Failure Type: Scan Failed" in body
    assert "=== Scan Output ===\nboom" in body
    assert not result.exists()


def test_scan_failure_without_log_uses_placeholder(tmp_path: Path) -> None:
    out = FailureLogger(tmp_path).record_scan_failure("app", "2.0", None)

    assert "(No scan log available)" in out.read_text()


def test_comparison_failure_embeds_report_or_placeholder(tmp_path: Path) -> None:
    failures = FailureLogger(tmp_path / "failures")
    report = tmp_path / "comparison.json"
    report.write_text('{"delta": 42}')

    with_report = failures.record_comparison_failure(
        "app", "2.0", None, tmp_path / "b.json", tmp_path / "c.json", report
    )
    without_report = failures.record_comparison_failure(
        "app", "2.0", None, tmp_path / "b.json", tmp_path / "c.json", tmp_path / "missing.json"
    )

    assert with_report != without_report
    assert '=== Comparison Report Content ===\n{"delta": 42}' in with_report.read_text()
    assert "(No comparison report available)" in without_report.read_text()
    assert "(No comparison log available)" in without_report.read_text()


def test_purge_removes_only_expired_reports(tmp_path: Path) -> None:
    now = time.time()
    failures = FailureLogger(tmp_path)
    old = tmp_path / "app-scan-20200101-000000.log"
    recent = tmp_path / "app-scan-20200201-000000.log"
    old.write_text("x")
    recent.write_text("y")
    set_mtime(old, 31 * DAY, now=now)
    set_mtime(recent, 29 * DAY, now=now)

    removed = failures.purge(days=30, now=now)

    assert removed == [old]
    assert not old.exists()
    assert recent.exists()


def test_list_reports_newest_first(tmp_path: Path) -> None:
    failures = FailureLogger(tmp_path)
    a = tmp_path / "a-scan-1.log"
    b = tmp_path / "b-scan-1.log"
    a.write_text("a")
    b.write_text("b")
    set_mtime(a, 10)
    set_mtime(b, 100)

    assert failures.list_reports() == [a, b]
    assert FailureLogger(tmp_path / "absent").list_reports() == []
