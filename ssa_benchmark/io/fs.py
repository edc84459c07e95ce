"""ssa_benchmark.io.fs

Atomic filesystem writers and small file helpers.

The state file and failure reports are read by other processes (the next
tick, the report viewer, a human tailing the directory). A half-written file
is worse than a missing one, so every writer here goes through a temp file
and ``os.replace``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO


def _atomic_write_text(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write a file atomically by writing to a temp file and os.replace()."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{p.name}.", suffix=".tmp", dir=str(p.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, p)
    finally:
        # Only reached with a leftover temp file when os.replace failed.
        if tmp_path.exists():
            tmp_path.unlink()


def write_text_atomic(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write UTF-8 text atomically."""

    def _write(f: TextIO) -> None:
        f.write(text)

    _atomic_write_text(Path(path), _write, encoding=encoding)


def copy_file_atomic(src: Path, dst: Path) -> None:
    """Copy *src* to *dst* so readers never observe a partial *dst*."""

    dst = Path(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{dst.name}.", suffix=".tmp", dir=str(dst.parent))
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copyfile(src, tmp_path)
        os.replace(tmp_path, dst)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def append_file(src: Path, dst: Path) -> None:
    """Append the raw bytes of *src* to *dst* (created if missing)."""

    dst = Path(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    with Path(src).open("rb") as fin, dst.open("ab") as fout:
        shutil.copyfileobj(fin, fout)


def read_text_or_none(path: Optional[Path], *, encoding: str = "utf-8") -> Optional[str]:
    """Return file text, or None when the path is unset or not a readable file."""

    if path is None:
        return None
    p = Path(path)
    if not p.is_file():
        return None
    try:
        return p.read_text(encoding=encoding, errors="replace")
    except OSError:
        return None


def is_non_empty_file(path: Path) -> bool:
    p = Path(path)
    return p.is_file() and p.stat().st_size > 0


def remove_if_exists(path: Optional[Path]) -> bool:
    """Delete a file if present. Returns True when something was removed."""

    if path is None:
        return False
    try:
        Path(path).unlink()
        return True
    except FileNotFoundError:
        return False
