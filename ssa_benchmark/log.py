"""ssa_benchmark.log

Logging setup for the auto runner.

Two destinations:

* the main log file receives everything (it is also where raw engine output
  is appended);
* stderr (journal, when run from a systemd timer) only receives warnings,
  errors, and records explicitly flagged for the operator with
  ``extra=NOTIFY``.

A tick that finds no new version therefore writes only to the file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Pass as ``logger.info(..., extra=NOTIFY)`` to mirror a record to stderr.
NOTIFY = {"notify": True}


class OperatorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING or bool(getattr(record, "notify", False))


def configure_logging(log_file: Optional[Path], *, verbose: bool = False) -> logging.Logger:
    """Attach file + stderr handlers to the root logger (idempotent)."""
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_ssa_benchmark", False):
            root.removeHandler(h)
            h.close()

    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        fh._ssa_benchmark = True  # type: ignore[attr-defined]
        root.addHandler(fh)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(formatter)
    sh.addFilter(OperatorFilter())
    sh._ssa_benchmark = True  # type: ignore[attr-defined]
    root.addHandler(sh)

    return root


def flush_file_handlers() -> None:
    """Flush file handlers before raw text is appended to the same file."""
    for h in logging.getLogger().handlers:
        if isinstance(h, logging.FileHandler):
            h.flush()
