"""ssa_benchmark.errors

Error types shared across the runner.

Every error derives from :class:`BenchmarkError` so the CLI can catch the
whole family in one place and still exit successfully.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class BenchmarkError(RuntimeError):
    """Base class for all benchmark runner errors."""


class ConfigIOError(BenchmarkError):
    """The persisted state file could not be read or written."""


class AlreadyRunningError(BenchmarkError):
    """Another runner instance holds a live lock."""

    def __init__(self, pid: int, lock_file: Path) -> None:
        self.pid = pid
        self.lock_file = lock_file
        super().__init__(f"Another instance is running (PID: {pid})")


class DownloadError(BenchmarkError):
    """Base class for failures while obtaining an engine binary."""


class NetworkError(DownloadError):
    """Version fetch or binary download failed at the transport level."""


class DownloadValidationError(DownloadError):
    """A downloaded engine was empty or not a recognized executable."""


class ConfigsRootMissingError(BenchmarkError):
    """The directory holding per-project configs does not exist."""


class ProjectError(BenchmarkError):
    """A failure scoped to one project."""

    def __init__(
        self,
        message: str,
        *,
        project: str,
        exit_code: Optional[int] = None,
        failure_log: Optional[Path] = None,
    ) -> None:
        self.project = project
        self.exit_code = exit_code
        self.failure_log = failure_log
        super().__init__(message)


class ScanError(ProjectError):
    """Engine scan exited non-zero or produced no usable output."""


class BaselineError(ProjectError):
    """Seeding a project's baseline failed."""


class CompareError(ProjectError):
    """Engine comparison exited non-zero (mismatch or comparison error)."""
