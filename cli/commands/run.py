from __future__ import annotations

import logging
from typing import Any, Optional

from pipeline.wiring import build_orchestrator
from ssa_benchmark.errors import AlreadyRunningError, BenchmarkError
from ssa_benchmark.lock import SingleInstanceGuard
from ssa_benchmark.log import configure_logging
from ssa_benchmark.settings import BenchmarkSettings, ensure_service_dirs

logger = logging.getLogger(__name__)


def run_tick(
    settings: BenchmarkSettings,
    *,
    verbose: bool = False,
    session: Optional[Any] = None,
) -> int:
    """One scheduled invocation. Always returns 0.

    Lock contention, network trouble and failed benchmarks are all reported
    through logs and the state file so the scheduler never sees a failure.
    """
    ensure_service_dirs(settings)
    configure_logging(settings.log_file, verbose=verbose)

    try:
        with SingleInstanceGuard(settings.lock_file):
            logger.info("Service directories initialized")
            result = build_orchestrator(settings, session=session).run_once()
    except AlreadyRunningError as e:
        logger.warning("Another instance is running (PID: %s), exiting", e.pid)
        return 0
    except BenchmarkError as e:
        logger.error("Benchmark runner error: %s", e)
        return 0
    except OSError as e:
        logger.error("Benchmark runner I/O error: %s", e)
        return 0

    logger.debug("Tick finished: %s", result.state.value)
    return result.exit_code
