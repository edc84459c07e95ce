"""pipeline.models

Lightweight data structures for one orchestration pass (a "tick").

The per-project loop never aborts on a project failure. Each project instead
yields a :class:`ProjectOutcome`, and the list of outcomes is reduced to a
:class:`RunSummary` at the end. The tick as a whole ends in one
:class:`TickState`, reported through :class:`TickResult`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


class ProjectStatus(enum.Enum):
    PASSED = "passed"
    BASELINE_FAILED = "baseline generation failed"
    SCAN_FAILED = "scan failed"
    MISMATCH = "baseline mismatch"

    @property
    def failed(self) -> bool:
        return self is not ProjectStatus.PASSED


@dataclass(frozen=True)
class ProjectOutcome:
    project: str
    status: ProjectStatus
    scan_result: Optional[Path] = None
    comparison_report: Optional[Path] = None
    failure_log: Optional[Path] = None
    error: Optional[str] = None

    def describe(self) -> str:
        return f"{self.project} ({self.status.value})"


@dataclass
class RunSummary:
    started: str
    finished: str = ""
    outcomes: List[ProjectOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> List[ProjectOutcome]:
        return [o for o in self.outcomes if o.status.failed]

    @property
    def passed(self) -> List[ProjectOutcome]:
        return [o for o in self.outcomes if not o.status.failed]

    @property
    def all_passed(self) -> bool:
        return not self.failed

    def error_text(self) -> str:
        return f"{len(self.failed)}/{self.total} projects failed"


class TickState(enum.Enum):
    UP_TO_DATE = "up_to_date"
    VERSION_CHECK_FAILED = "version_check_failed"
    DOWNLOAD_FAILED = "download_failed"
    CONFIGS_MISSING = "configs_missing"
    ALL_PASSED = "all_passed"
    SOME_FAILED = "some_failed"


@dataclass(frozen=True)
class TickResult:
    state: TickState
    latest_version: Optional[str] = None
    engine_path: Optional[Path] = None
    summary: Optional[RunSummary] = None
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        # A failed benchmark is a reported result, never a process failure.
        return 0
