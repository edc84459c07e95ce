"""ssa_benchmark.failures

Failure reports: one human-readable file per scan or comparison failure.

Files live under the failure-log directory::

  <safe_project>-scan-<YYYYmmdd-HHMMSS>.log
  <safe_project>-compare-<YYYYmmdd-HHMMSS>.log

Each report starts with a fixed header block and then carries the captured
engine output; comparison reports also embed the comparison report body,
because a mismatch cannot be diagnosed from the log alone. Reports older than
the retention window are removed by :meth:`FailureLogger.purge`.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

from ssa_benchmark.io.fs import read_text_or_none, remove_if_exists, write_text_atomic
from ssa_benchmark.io.layout import file_timestamp, human_time, sanitize_project_name, unique_path

logger = logging.getLogger(__name__)

RULE = "=" * 42


class FailureLogger:
    def __init__(self, failure_log_dir: Path) -> None:
        self.failure_log_dir = Path(failure_log_dir)

    def _new_report_path(self, project: str, kind: str) -> Path:
        self.failure_log_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{sanitize_project_name(project)}-{kind}-{file_timestamp()}"
        return unique_path(self.failure_log_dir, stem, ".log")

    def record_scan_failure(
        self,
        project: str,
        version: str,
        log_path: Optional[Path],
        result_path: Optional[Path] = None,
    ) -> Path:
        """Write a scan failure report and drop the unusable scan result."""
        out = self._new_report_path(project, "scan")
        scan_output = read_text_or_none(log_path)

        lines = [
            RULE,
            "Scan Failure Report",
            RULE,
            f"Project: {project}",
            f"Engine Version: {version}",
            f"Time: {human_time()}",
            "Failure Type: Scan Failed",
            RULE,
            "",
            "=== Scan Output ===",
            scan_output if scan_output is not None else "(No scan log available)",
            "",
            RULE,
        ]
        write_text_atomic(out, "\n".join(lines) + "\n")
        logger.info("Failure log saved: %s", out)

        if remove_if_exists(result_path):
            logger.info("Removed failed scan result file: %s", result_path)
        return out

    def record_comparison_failure(
        self,
        project: str,
        version: str,
        log_path: Optional[Path],
        baseline_path: Path,
        result_path: Path,
        report_path: Path,
    ) -> Path:
        out = self._new_report_path(project, "compare")
        compare_output = read_text_or_none(log_path)
        report_body = read_text_or_none(report_path)

        lines = [
            RULE,
            "Comparison Failure Report",
            RULE,
            f"Project: {project}",
            f"Engine Version: {version}",
            f"Time: {human_time()}",
            "Failure Type: Baseline Comparison Failed",
            f"Baseline File: {baseline_path}",
            f"Scan Result: {result_path}",
            f"Comparison Report: {report_path}",
            RULE,
            "",
            "=== Comparison Output ===",
            compare_output if compare_output is not None else "(No comparison log available)",
            "",
            "=== Comparison Report Content ===",
            report_body if report_body is not None else "(No comparison report available)",
            "",
            RULE,
        ]
        write_text_atomic(out, "\n".join(lines) + "\n")
        logger.info("Failure log saved: %s", out)
        return out

    def list_reports(self) -> List[Path]:
        """Failure reports, newest first."""
        if not self.failure_log_dir.is_dir():
            return []
        reports = [p for p in self.failure_log_dir.glob("*.log") if p.is_file()]
        reports.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        return reports

    def purge(self, days: int = 30, *, now: Optional[float] = None) -> List[Path]:
        """Delete reports last modified more than *days* days ago."""
        cutoff = (now if now is not None else time.time()) - days * 86400
        removed: List[Path] = []
        for p in self.list_reports():
            if p.stat().st_mtime < cutoff:
                p.unlink(missing_ok=True)
                removed.append(p)
        if removed:
            logger.info("Cleaned up %d failure logs older than %d days", len(removed), days)
        return removed
