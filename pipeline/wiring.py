"""pipeline.wiring

This module is the **composition root** for the runner.

"Composition root" means: the single place where we *assemble* the running
application from its building blocks:

- take a resolved :class:`~ssa_benchmark.settings.BenchmarkSettings`
- build the HTTP session, engine cache, runners and state store
- hand them to :class:`~pipeline.orchestrator.BenchmarkOrchestrator`

Collaborators never look up paths on their own; everything they touch is
passed in from here, so tests can wire the same graph against temp dirs.
"""

from __future__ import annotations

from typing import Any, Optional

import requests

from ssa_benchmark.failures import FailureLogger
from ssa_benchmark.settings import BenchmarkSettings
from ssa_benchmark.state import ConfigStore
from tools.engine.repository import EngineRepository
from tools.engine.runner import ComparisonRunner, ProjectRunner
from tools.engine.versions import VersionResolver

from .baseline import BaselineManager
from .orchestrator import BenchmarkOrchestrator


def build_orchestrator(
    settings: BenchmarkSettings,
    *,
    session: Optional[Any] = None,
) -> BenchmarkOrchestrator:
    http = session if session is not None else requests.Session()

    failures = FailureLogger(settings.failure_log_dir)
    engines = EngineRepository(
        settings.engine_dir,
        settings.download_url,
        prefix=settings.engine_prefix,
        connect_timeout=settings.download_connect_timeout,
        total_timeout=settings.download_total_timeout,
        session=http,
    )
    scanner = ProjectRunner(
        work_dir=settings.work_dir,
        service_dir=settings.service_dir,
        report_dir=settings.report_dir,
        failure_logger=failures,
        main_log=settings.log_file,
        timeout_seconds=settings.scan_timeout_seconds,
    )
    comparer = ComparisonRunner(
        work_dir=settings.work_dir,
        service_dir=settings.service_dir,
        failure_logger=failures,
        compare_script=settings.compare_script,
        tolerance=settings.tolerance,
        main_log=settings.log_file,
        timeout_seconds=settings.compare_timeout_seconds,
    )

    return BenchmarkOrchestrator(
        state=ConfigStore(settings.state_file),
        versions=VersionResolver(
            settings.version_url,
            connect_timeout=settings.version_connect_timeout,
            total_timeout=settings.version_total_timeout,
            session=http,
        ),
        engines=engines,
        baselines=BaselineManager(
            engines=engines,
            runner=scanner,
            baseline_version=settings.baseline_version,
        ),
        scanner=scanner,
        comparer=comparer,
        failures=failures,
        configs_dir=settings.configs_dir,
        report_dir=settings.report_dir,
        keep_engines=settings.keep_engines,
        failure_log_retention_days=settings.failure_log_retention_days,
    )
