"""tools/engine/runner.py

Engine execution plumbing: scan mode and compare mode.

Command shapes::

  <engine> code-scan -c <config.json> --output <scan-ts.json>
  <engine> [compare_script] --baseline B --current C --output R --tolerance T

Both runners capture combined engine output in a transient log under the
service directory, append it to the main log and then delete it. On failure
the transient log is copied into a failure report first.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ssa_benchmark.domain import Project, Verdict
from ssa_benchmark.errors import CompareError, ScanError
from ssa_benchmark.failures import FailureLogger
from ssa_benchmark.io.fs import append_file, is_non_empty_file, remove_if_exists
from ssa_benchmark.io.layout import project_report_paths, transient_log_path
from ssa_benchmark.log import flush_file_handlers
from tools.core_cmd import CmdResult, run_cmd_logged

logger = logging.getLogger(__name__)

# Exit status reported when the engine could not be started at all.
EXEC_FAILURE_EXIT_CODE = 126


def _run_engine(
    cmd: List[str],
    *,
    log_path: Path,
    cwd: Path,
    timeout_seconds: int,
) -> CmdResult:
    try:
        return run_cmd_logged(cmd, log_path=log_path, cwd=cwd, timeout_seconds=timeout_seconds)
    except OSError as e:
        log_path.write_text(f"[exec] cannot run {' '.join(cmd)}: {e}\n", encoding="utf-8")
        return CmdResult(
            exit_code=EXEC_FAILURE_EXIT_CODE,
            elapsed_seconds=0.0,
            command_str=" ".join(cmd),
            log_path=log_path,
        )


def _append_to_main_log(log_path: Path, main_log: Optional[Path]) -> None:
    if main_log is None or not log_path.exists():
        return
    flush_file_handlers()
    append_file(log_path, main_log)


class ProjectRunner:
    """Run the engine's scan mode for one project."""

    def __init__(
        self,
        *,
        work_dir: Path,
        service_dir: Path,
        report_dir: Path,
        failure_logger: FailureLogger,
        main_log: Optional[Path] = None,
        timeout_seconds: int = 0,
    ) -> None:
        self.work_dir = Path(work_dir)
        self.service_dir = Path(service_dir)
        self.report_dir = Path(report_dir)
        self.failure_logger = failure_logger
        self.main_log = main_log
        self.timeout_seconds = timeout_seconds

    def scan(self, engine_path: Path, version: str, project: Project) -> Path:
        """Return the path of a non-empty scan result; raises ScanError."""
        paths = project_report_paths(self.report_dir, project.name)
        result = paths.new_scan_result()
        log_path = transient_log_path(self.service_dir, "scan", project.name)

        logger.info("Scanning project: %s", project.name)
        logger.info("Config: %s", project.config_file)
        logger.info("Executing scan for %s with engine %s...", project.name, version)

        cmd = [
            str(engine_path),
            "code-scan",
            "-c",
            str(project.config_file),
            "--output",
            str(result),
        ]
        res = _run_engine(cmd, log_path=log_path, cwd=self.work_dir, timeout_seconds=self.timeout_seconds)

        try:
            _append_to_main_log(log_path, self.main_log)

            if not res.ok:
                logger.error("Scan failed for %s (exit code: %d)", project.name, res.exit_code)
                message = f"Scan failed for {project.name} (exit code: {res.exit_code})"
            elif not result.exists():
                logger.error("Scan result file not found: %s", result)
                message = f"Scan result file not found: {result}"
            elif not is_non_empty_file(result):
                logger.error("Scan result file is empty: %s", result)
                message = f"Scan result file is empty: {result}"
            else:
                logger.info("Scan completed for %s, result: %s", project.name, result)
                return result

            report = self.failure_logger.record_scan_failure(project.name, version, log_path, result)
            # record_scan_failure drops the result; make sure nothing partial survives.
            remove_if_exists(result)
            raise ScanError(
                message,
                project=project.name,
                exit_code=res.exit_code,
                failure_log=report,
            )
        finally:
            remove_if_exists(log_path)


class ComparisonRunner:
    """Run the engine's baseline comparison for one project."""

    def __init__(
        self,
        *,
        work_dir: Path,
        service_dir: Path,
        failure_logger: FailureLogger,
        compare_script: Optional[Path] = None,
        tolerance: int = 10,
        main_log: Optional[Path] = None,
        timeout_seconds: int = 0,
    ) -> None:
        self.work_dir = Path(work_dir)
        self.service_dir = Path(service_dir)
        self.failure_logger = failure_logger
        self.compare_script = compare_script
        self.tolerance = tolerance
        self.main_log = main_log
        self.timeout_seconds = timeout_seconds

    def build_command(
        self,
        engine_path: Path,
        baseline_file: Path,
        current_file: Path,
        report_path: Path,
    ) -> List[str]:
        cmd = [str(engine_path)]
        if self.compare_script is not None:
            cmd.append(str(self.compare_script))
        cmd += [
            "--baseline",
            str(baseline_file),
            "--current",
            str(current_file),
            "--output",
            str(report_path),
            "--tolerance",
            str(self.tolerance),
        ]
        return cmd

    def compare(
        self,
        engine_path: Path,
        version: str,
        project: Project,
        baseline_file: Path,
        current_file: Path,
        report_path: Path,
    ) -> Verdict:
        """Return Verdict.MATCH when within tolerance; raises CompareError."""
        logger.info("Comparing with baseline for %s...", project.name)
        Path(report_path).parent.mkdir(parents=True, exist_ok=True)
        log_path = transient_log_path(self.service_dir, "compare", project.name)

        cmd = self.build_command(engine_path, baseline_file, current_file, report_path)
        res = _run_engine(cmd, log_path=log_path, cwd=self.work_dir, timeout_seconds=self.timeout_seconds)

        try:
            _append_to_main_log(log_path, self.main_log)
            if res.ok:
                logger.info("✓ %s: Baseline comparison PASSED", project.name)
                return Verdict.MATCH

            logger.error("✗ %s: Baseline comparison FAILED (exit code: %d)", project.name, res.exit_code)
            report = self.failure_logger.record_comparison_failure(
                project.name,
                version,
                log_path,
                baseline_file,
                current_file,
                report_path,
            )
            raise CompareError(
                f"Baseline comparison failed for {project.name} (exit code: {res.exit_code})",
                project=project.name,
                exit_code=res.exit_code,
                failure_log=report,
            )
        finally:
            remove_if_exists(log_path)
