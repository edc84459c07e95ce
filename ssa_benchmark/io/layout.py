"""ssa_benchmark.io.layout

Canonical filesystem layout for reports, failure logs and transient logs.

The report directory is consumed by an external viewer, so its shape is a
public contract:

  <report_dir>/<safe_project>/scan/scan-<YYYYmmdd-HHMMSS>.json
  <report_dir>/<safe_project>/comparison/comparison-<YYYYmmdd-HHMMSS>.json

Runner code asks this module for paths instead of formatting them itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
HUMAN_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")


def sanitize_project_name(name: str) -> str:
    """Make a project directory name safe for report paths.

    Examples:
      "my project (v2)" -> "my_project_v2"
      "__weird..name__" -> "weird_name"
    """
    safe = _UNSAFE_CHARS_RE.sub("_", name)
    safe = _UNDERSCORE_RUN_RE.sub("_", safe)
    return safe.strip("_")


def file_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def human_time(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(HUMAN_TIME_FORMAT)


def unique_path(directory: Path, stem: str, suffix: str) -> Path:
    """Return directory/<stem><suffix>, adding -1, -2, ... if already taken."""
    candidate = directory / f"{stem}{suffix}"
    n = 1
    while candidate.exists():
        candidate = directory / f"{stem}-{n}{suffix}"
        n += 1
    return candidate


@dataclass(frozen=True)
class ProjectReportPaths:
    """Report locations for one project."""

    project_dir: Path
    scan_dir: Path
    comparison_dir: Path

    def new_scan_result(self) -> Path:
        self.scan_dir.mkdir(parents=True, exist_ok=True)
        return unique_path(self.scan_dir, f"scan-{file_timestamp()}", ".json")

    def new_comparison_report(self) -> Path:
        self.comparison_dir.mkdir(parents=True, exist_ok=True)
        # The viewer discovers reports by the "comparison-" prefix.
        return unique_path(self.comparison_dir, f"comparison-{file_timestamp()}", ".json")


def project_report_paths(report_dir: Path, project_name: str) -> ProjectReportPaths:
    base = Path(report_dir) / sanitize_project_name(project_name)
    return ProjectReportPaths(
        project_dir=base,
        scan_dir=base / "scan",
        comparison_dir=base / "comparison",
    )


def transient_log_path(service_dir: Path, kind: str, project_name: str) -> Path:
    """Per-invocation subprocess log, e.g. scan-<project>-<ts>.tmp.log."""
    safe = sanitize_project_name(project_name)
    return unique_path(Path(service_dir), f"{kind}-{safe}-{file_timestamp()}", ".tmp.log")
