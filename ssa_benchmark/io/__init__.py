"""ssa_benchmark.io

Filesystem contracts and IO helpers.

The report layout and the failure-log layout are read by other programs. This
package keeps the "where do files go" rules in one place so the runner
modules never format paths on their own.
"""

from __future__ import annotations

from .fs import (
    append_file,
    copy_file_atomic,
    is_non_empty_file,
    read_text_or_none,
    remove_if_exists,
    write_text_atomic,
)
from .layout import (
    ProjectReportPaths,
    file_timestamp,
    human_time,
    project_report_paths,
    sanitize_project_name,
    transient_log_path,
    unique_path,
)

__all__ = [
    "ProjectReportPaths",
    "append_file",
    "copy_file_atomic",
    "file_timestamp",
    "human_time",
    "is_non_empty_file",
    "project_report_paths",
    "read_text_or_none",
    "remove_if_exists",
    "sanitize_project_name",
    "transient_log_path",
    "unique_path",
    "write_text_atomic",
]
