"""pipeline.orchestrator

BenchmarkOrchestrator: the control loop for one tick.

  IDLE -> CHECKING_VERSION -> UP_TO_DATE                      (common, silent)
                           -> DOWNLOADING -> RUNNING -> ALL_PASSED
                                                     -> SOME_FAILED

Rules
-----
* ``current_version`` is written only when every project passed. An
  interrupted or partially failing run is therefore retried in full on the
  next tick.
* A project failure never aborts the batch.
* Every terminal state is a normal return. Failures are reported through the
  state file and failure logs, never through the exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ssa_benchmark.domain import Project, discover_projects
from ssa_benchmark.errors import (
    BaselineError,
    CompareError,
    ConfigsRootMissingError,
    DownloadError,
    NetworkError,
    ScanError,
)
from ssa_benchmark.failures import FailureLogger
from ssa_benchmark.io.layout import human_time, project_report_paths
from ssa_benchmark.log import NOTIFY
from ssa_benchmark.state import ConfigStore
from tools.engine.repository import EngineRepository
from tools.engine.runner import ComparisonRunner, ProjectRunner
from tools.engine.versions import VersionResolver

from .baseline import BaselineManager
from .models import ProjectOutcome, ProjectStatus, RunSummary, TickResult, TickState

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 42
THIN_SEPARATOR = "-" * 42


class BenchmarkOrchestrator:
    def __init__(
        self,
        *,
        state: ConfigStore,
        versions: VersionResolver,
        engines: EngineRepository,
        baselines: BaselineManager,
        scanner: ProjectRunner,
        comparer: ComparisonRunner,
        failures: FailureLogger,
        configs_dir: Path,
        report_dir: Path,
        keep_engines: int = 3,
        failure_log_retention_days: int = 30,
    ) -> None:
        self.state = state
        self.versions = versions
        self.engines = engines
        self.baselines = baselines
        self.scanner = scanner
        self.comparer = comparer
        self.failures = failures
        self.configs_dir = Path(configs_dir)
        self.report_dir = Path(report_dir)
        self.keep_engines = keep_engines
        self.failure_log_retention_days = failure_log_retention_days

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def run_once(self) -> TickResult:
        self.state.set("last_check_time", human_time())

        current = self.state.get("current_version")
        logger.info("Current engine version in config: %s", current or "(empty)")

        try:
            latest = self.versions.fetch_latest()
        except NetworkError as e:
            logger.error("%s", e)
            self.state.set("last_run_error", "Failed to fetch latest version")
            return TickResult(TickState.VERSION_CHECK_FAILED, error=str(e))

        if current == latest:
            logger.info("Version check OK: %s (up to date)", current)
            return TickResult(TickState.UP_TO_DATE, latest_version=latest)

        if not current:
            logger.info("New version detected: %s (first run)", latest, extra=NOTIFY)
        else:
            logger.info("New version detected: %s (current: %s)", latest, current, extra=NOTIFY)

        try:
            engine = self.engines.ensure(latest)
        except DownloadError as e:
            logger.error("%s", e)
            self.state.set("last_run_error", f"Failed to download engine version {latest}")
            return TickResult(TickState.DOWNLOAD_FAILED, latest_version=latest, error=str(e))

        # The version itself is recorded only after a fully successful run.
        self.state.set("engine_path", str(engine))

        logger.info("Starting benchmark with engine %s...", latest, extra=NOTIFY)
        try:
            summary = self.run_benchmark(engine, latest)
        except ConfigsRootMissingError as e:
            logger.error("%s", e)
            self.state.update(last_run_success=False, last_run_error=str(e))
            return TickResult(TickState.CONFIGS_MISSING, latest_version=latest, engine_path=engine, error=str(e))

        if summary.all_passed:
            total_runs = self.state.load().total_runs + 1
            self.state.update(
                last_run_time=summary.started,
                last_run_success=True,
                last_run_error="",
                total_runs=total_runs,
                current_version=latest,
            )
            self.cleanup()
            logger.info("Benchmark completed: all projects passed (total runs: %d)", total_runs, extra=NOTIFY)
            return TickResult(TickState.ALL_PASSED, latest_version=latest, engine_path=engine, summary=summary)

        error = summary.error_text()
        self.state.update(
            last_run_time=summary.started,
            last_run_success=False,
            last_run_error=error,
        )
        logger.error("Benchmark failed: %s", error)
        logger.error("Check failure logs: %s", self.failures.failure_log_dir)
        return TickResult(
            TickState.SOME_FAILED,
            latest_version=latest,
            engine_path=engine,
            summary=summary,
            error=error,
        )

    # ------------------------------------------------------------------
    # Benchmark
    # ------------------------------------------------------------------

    def run_benchmark(self, engine: Path, version: str) -> RunSummary:
        logger.info(SEPARATOR)
        logger.info("Starting benchmark test with engine %s", version)
        logger.info("Engine: %s", engine)
        logger.info("Configs Dir: %s", self.configs_dir)
        logger.info("Report Dir: %s", self.report_dir)
        logger.info(SEPARATOR)

        if not self.configs_dir.is_dir():
            raise ConfigsRootMissingError(f"Configs directory not found: {self.configs_dir}")

        summary = RunSummary(started=human_time())
        logger.info("Test started at: %s", summary.started)

        for project in discover_projects(self.configs_dir):
            if not project.has_config():
                logger.info("Config file not found for %s, skipping: %s", project.name, project.config_file)
                continue

            logger.info(THIN_SEPARATOR)
            logger.info("Processing project %d: %s", summary.total + 1, project.name)
            logger.info(THIN_SEPARATOR)
            summary.outcomes.append(self.run_project(engine, version, project))

        summary.finished = human_time()
        self._log_summary(summary)
        return summary

    def run_project(self, engine: Path, version: str, project: Project) -> ProjectOutcome:
        """Baseline, scan, compare. Any stage failure ends this project only."""
        try:
            baseline = self.baselines.ensure(project)
        except BaselineError as e:
            return ProjectOutcome(
                project.name,
                ProjectStatus.BASELINE_FAILED,
                failure_log=e.failure_log,
                error=str(e),
            )

        try:
            scan_result = self.scanner.scan(engine, version, project)
        except ScanError as e:
            return ProjectOutcome(
                project.name,
                ProjectStatus.SCAN_FAILED,
                failure_log=e.failure_log,
                error=str(e),
            )

        report = project_report_paths(self.report_dir, project.name).new_comparison_report()
        try:
            self.comparer.compare(engine, version, project, baseline, scan_result, report)
        except CompareError as e:
            return ProjectOutcome(
                project.name,
                ProjectStatus.MISMATCH,
                scan_result=scan_result,
                comparison_report=report,
                failure_log=e.failure_log,
                error=str(e),
            )

        return ProjectOutcome(
            project.name,
            ProjectStatus.PASSED,
            scan_result=scan_result,
            comparison_report=report,
        )

    def _log_summary(self, summary: RunSummary) -> None:
        logger.info(SEPARATOR)
        logger.info("Benchmark Summary")
        logger.info(SEPARATOR)
        logger.info("Test Duration: %s -> %s", summary.started, summary.finished)
        logger.info("Total Projects: %d", summary.total)
        logger.info("Successful: %d", len(summary.passed))
        logger.info("Failed: %d", len(summary.failed))
        if summary.failed:
            logger.info("Projects with issues:")
            for outcome in summary.failed:
                logger.info("  - %s", outcome.describe())

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def cleanup(self) -> None:
        """Retire old engines and purge expired failure logs.

        Runs after a successful benchmark only; an error here is logged and
        does not change the already-recorded outcome.
        """
        try:
            self.engines.retire_old(keep=self.keep_engines)
        except OSError as e:
            logger.warning("Engine cleanup failed: %s", e)
        try:
            self.failures.purge(days=self.failure_log_retention_days)
        except OSError as e:
            logger.warning("Failure log cleanup failed: %s", e)
