"""ssa_benchmark.lock

Process-level mutual exclusion through a PID lock file.

Usage::

    with SingleInstanceGuard(settings.lock_file):
        ...  # only one runner gets here at a time

``acquire`` raises :class:`AlreadyRunningError` when the lock names a live
process. A lock naming a dead (or unparsable) PID is stale and is replaced.
While held, SIGTERM and SIGHUP are turned into ``SystemExit`` so the
``with`` block unwinds and the lock file is removed on those paths too.
"""

from __future__ import annotations

import errno
import logging
import os
import signal
from pathlib import Path
from types import FrameType
from typing import Any, Dict, Optional

from ssa_benchmark.errors import AlreadyRunningError

logger = logging.getLogger(__name__)

_HANDLED_SIGNALS = tuple(
    s for s in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if s is not None
)


def pid_is_alive(pid: int) -> bool:
    """Signal-0 liveness probe."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else.
        return True
    return True


def read_lock_pid(lock_file: Path) -> Optional[int]:
    try:
        raw = Path(lock_file).read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Cannot read lock file %s: %s", lock_file, e)
        return None
    return int(raw) if raw.isdigit() else None


def _raise_system_exit(signum: int, frame: Optional[FrameType]) -> None:
    raise SystemExit(128 + signum)


class SingleInstanceGuard:
    def __init__(self, lock_file: Path, *, pid: Optional[int] = None) -> None:
        self.lock_file = Path(lock_file)
        self.pid = pid if pid is not None else os.getpid()
        self._held = False
        self._previous_handlers: Dict[int, Any] = {}

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> "SingleInstanceGuard":
        if self._held:
            return self

        if self.lock_file.exists():
            other = read_lock_pid(self.lock_file)
            if other is not None and other != self.pid and pid_is_alive(other):
                raise AlreadyRunningError(other, self.lock_file)
            logger.info("Stale lock file found (PID: %s), removing", other)
            try:
                self.lock_file.unlink()
            except FileNotFoundError:
                pass

        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(self.lock_file), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except OSError as e:
            if e.errno != errno.EEXIST:
                raise
            # Lost a race with another instance between the check and create.
            other = read_lock_pid(self.lock_file) or 0
            raise AlreadyRunningError(other, self.lock_file) from e
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{self.pid}\n")

        self._held = True
        self._install_signal_handlers()
        logger.debug("Lock acquired: %s (PID: %s)", self.lock_file, self.pid)
        return self

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        self._restore_signal_handlers()
        # Never delete a lock that has since been taken over.
        if read_lock_pid(self.lock_file) == self.pid:
            try:
                self.lock_file.unlink()
            except FileNotFoundError:
                pass
        logger.debug("Lock released: %s", self.lock_file)

    def _install_signal_handlers(self) -> None:
        for signum in _HANDLED_SIGNALS:
            try:
                self._previous_handlers[signum] = signal.signal(signum, _raise_system_exit)
            except ValueError:
                # signal.signal only works from the main thread.
                pass

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def __enter__(self) -> "SingleInstanceGuard":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
