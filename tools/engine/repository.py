"""tools/engine/repository.py

Local cache of engine binaries, keyed by version.

Layout::

  <engine_dir>/<prefix>-<version>        immutable once executable
  <engine_dir>/<prefix>-<version>.tmp    in-flight download

A binary that exists and is executable is never downloaded again. New
downloads land in a temp file, are validated, renamed into place, marked
executable and checked for a known executable format. Anything that fails
validation is deleted before the error is raised.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Any, Callable, List, Optional

from ssa_benchmark.errors import DownloadValidationError, NetworkError

from .client import download_file

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"

# Leading bytes of formats we accept as "executable".
EXECUTABLE_MAGIC = (
    b"\x7fELF",  # ELF
    b"\xfe\xed\xfa\xce",  # Mach-O 32
    b"\xfe\xed\xfa\xcf",  # Mach-O 64
    b"\xce\xfa\xed\xfe",  # Mach-O 32, little endian
    b"\xcf\xfa\xed\xfe",  # Mach-O 64, little endian
    b"\xca\xfe\xba\xbe",  # Mach-O universal
    b"MZ",  # PE
    b"#!",  # script with interpreter line
)


def is_executable_format(path: Path) -> bool:
    try:
        with Path(path).open("rb") as f:
            head = f.read(4)
    except OSError:
        return False
    return any(head.startswith(m) for m in EXECUTABLE_MAGIC)


def is_executable_file(path: Path) -> bool:
    p = Path(path)
    return p.is_file() and os.access(str(p), os.X_OK)


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _discard(path: Path) -> None:
    """Remove a failed download artifact, whatever is occupying its path."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Cannot remove %s: %s", path, e)


class EngineRepository:
    def __init__(
        self,
        engine_dir: Path,
        url_for_version: Callable[[str], str],
        *,
        prefix: str = "yak",
        connect_timeout: float = 30,
        total_timeout: float = 300,
        session: Optional[Any] = None,
    ) -> None:
        self.engine_dir = Path(engine_dir)
        self.url_for_version = url_for_version
        self.prefix = prefix
        self.connect_timeout = connect_timeout
        self.total_timeout = total_timeout
        self.session = session

    def path_for(self, version: str) -> Path:
        safe_version = version.replace("/", "_").replace(os.sep, "_")
        return self.engine_dir / f"{self.prefix}-{safe_version}"

    def ensure(self, version: str) -> Path:
        """Return the binary for *version*, downloading it on a cache miss.

        Raises NetworkError or DownloadValidationError.
        """
        target = self.path_for(version)
        if is_executable_file(target):
            logger.info("Engine already exists and is executable: %s", target)
            return target

        url = self.url_for_version(version)
        tmp = target.with_name(target.name + TMP_SUFFIX)
        logger.info("Downloading engine version %s...", version)
        logger.info("URL: %s", url)
        logger.info("Target: %s", target)

        try:
            size = download_file(
                url,
                tmp,
                connect_timeout=self.connect_timeout,
                total_timeout=self.total_timeout,
                session=self.session,
            )
        except NetworkError:
            logger.error("Failed to download engine %s: network error", version)
            _discard(tmp)
            raise

        if size <= 0 or not tmp.is_file() or tmp.stat().st_size == 0:
            _discard(tmp)
            logger.error("Failed to download engine %s: file is empty or missing", version)
            raise DownloadValidationError(f"Downloaded engine {version} is empty")

        try:
            os.replace(tmp, target)
            _make_executable(target)
        except OSError as e:
            _discard(tmp)
            _discard(target)
            logger.error("Failed to install engine %s: %s", version, e)
            raise DownloadValidationError(f"Cannot install downloaded engine {version} at {target}: {e}") from e

        if not is_executable_format(target):
            _discard(target)
            logger.error("Failed to download engine %s: not a valid executable", version)
            raise DownloadValidationError(f"Downloaded engine {version} is not a valid executable")

        logger.info("Engine downloaded successfully: %s", target)
        return target

    def list_cached(self) -> List[Path]:
        """Cached binaries, most recently modified first."""
        if not self.engine_dir.is_dir():
            return []
        engines = [
            p
            for p in self.engine_dir.glob(f"{self.prefix}-*")
            if p.is_file() and not p.name.endswith(TMP_SUFFIX)
        ]
        engines.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        return engines

    def retire_old(self, keep: int = 3) -> List[Path]:
        """Delete all but the *keep* most recently modified binaries."""
        logger.info("Cleaning up old engine versions...")
        engines = self.list_cached()
        if len(engines) <= keep:
            logger.info("No old engines to clean up (total: %d)", len(engines))
            return []

        logger.info("Found %d engine versions, keeping latest %d", len(engines), keep)
        removed: List[Path] = []
        for p in engines[keep:]:
            logger.info("Removing old engine: %s", p)
            p.unlink(missing_ok=True)
            removed.append(p)
        return removed
