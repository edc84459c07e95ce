"""pipeline.baseline

BaselineManager: make sure each project has exactly one baseline artifact.

A baseline is seeded once, on first encounter, by scanning the project with a
pinned engine version. The seeding scan is copied to ``baseline.json`` and
then removed from the project's scan history. Existing baselines are never
touched.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ssa_benchmark.domain import Project
from ssa_benchmark.errors import BaselineError, DownloadError, ScanError
from ssa_benchmark.io.fs import copy_file_atomic, remove_if_exists
from tools.engine.repository import EngineRepository
from tools.engine.runner import ProjectRunner

logger = logging.getLogger(__name__)


class BaselineManager:
    def __init__(
        self,
        *,
        engines: EngineRepository,
        runner: ProjectRunner,
        baseline_version: str,
    ) -> None:
        self.engines = engines
        self.runner = runner
        self.baseline_version = baseline_version

    def ensure(self, project: Project) -> Path:
        """Return the project's baseline file, generating it if missing.

        Raises BaselineError when the baseline engine cannot be obtained or
        the seeding scan fails.
        """
        baseline_file = project.baseline_file
        if baseline_file.exists():
            logger.info("Baseline file exists for %s: %s", project.name, baseline_file)
            return baseline_file

        logger.info(
            "No baseline found for %s, generating with version %s...",
            project.name,
            self.baseline_version,
        )

        try:
            engine = self.engines.ensure(self.baseline_version)
        except DownloadError as e:
            logger.error("Failed to download baseline engine version %s", self.baseline_version)
            raise BaselineError(
                f"Failed to download baseline engine version {self.baseline_version}: {e}",
                project=project.name,
            ) from e

        try:
            seed = self.runner.scan(engine, self.baseline_version, project)
        except ScanError as e:
            logger.error("Failed to generate baseline scan for %s", project.name)
            raise BaselineError(
                f"Failed to generate baseline scan for {project.name}: {e}",
                project=project.name,
                exit_code=e.exit_code,
                failure_log=e.failure_log,
            ) from e

        try:
            copy_file_atomic(seed, baseline_file)
        except OSError as e:
            raise BaselineError(
                f"Cannot write baseline file {baseline_file}: {e}",
                project=project.name,
            ) from e
        finally:
            # The seeding scan is not part of scan history.
            remove_if_exists(seed)

        logger.info("Baseline file generated for %s: %s", project.name, baseline_file)
        logger.info("Removed baseline scan file: %s", seed)
        return baseline_file
