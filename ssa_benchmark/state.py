"""ssa_benchmark.state

Durable run state: a flat ``key=value`` text file plus a typed view of it.

File format
-----------

  # SSA Benchmark Auto Runner Configuration
  # Last updated: 2024-01-01 12:00:00

  current_version=1.4.5
  last_run_time=2024-01-01 12:00:00
  ...

Comment lines, blank lines and keys we do not know about are preserved on
rewrite. Every write rewrites the whole file atomically; updates replace the
existing ``key=`` line in place or append a new one.

There is no locking here. Callers must hold
:class:`ssa_benchmark.lock.SingleInstanceGuard` before mutating state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ssa_benchmark.errors import ConfigIOError
from ssa_benchmark.io.fs import write_text_atomic
from ssa_benchmark.io.layout import human_time

logger = logging.getLogger(__name__)

HEADER_TITLE = "# SSA Benchmark Auto Runner Configuration"


@dataclass
class RunConfig:
    """Typed view over the persisted state."""

    # Last version whose benchmark passed for every project. Not the latest
    # downloaded version; see engine_path for that.
    current_version: str = ""
    last_run_time: str = ""
    last_check_time: str = ""
    engine_path: str = ""
    total_runs: int = 0
    last_run_success: bool = False
    last_run_error: str = ""

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "RunConfig":
        raw_runs = (values.get("total_runs") or "").strip()
        return cls(
            current_version=values.get("current_version", ""),
            last_run_time=values.get("last_run_time", ""),
            last_check_time=values.get("last_check_time", ""),
            engine_path=values.get("engine_path", ""),
            total_runs=int(raw_runs) if raw_runs.isdigit() else 0,
            last_run_success=(values.get("last_run_success") or "").strip().lower() == "true",
            last_run_error=values.get("last_run_error", ""),
        )

    def to_mapping(self) -> Dict[str, str]:
        return {f.name: format_value(getattr(self, f.name)) for f in fields(self)}


STATE_KEYS = tuple(f.name for f in fields(RunConfig))


def format_value(value: Any) -> str:
    """Render a value as a single state-file line value."""
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = ""
    else:
        text = str(value)
    # One record per line; embedded newlines would split the record.
    return " ".join(text.splitlines())


def _parse_line(line: str):
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    return key.strip(), value


class ConfigStore:
    """Key/value persistence of run state backed by one text file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # -------------------------
    # Raw file access
    # -------------------------

    def _default_text(self) -> str:
        defaults = RunConfig().to_mapping()
        lines = [
            HEADER_TITLE,
            f"# Last updated: {human_time()}",
            "",
        ]
        lines += [f"{k}={defaults[k]}" for k in STATE_KEYS]
        return "\n".join(lines) + "\n"

    def initialize(self) -> None:
        """Create the state file with a header and empty values."""
        logger.info("Creating initial config file: %s", self.path)
        self._write_text(self._default_text())

    def _write_text(self, text: str) -> None:
        try:
            write_text_atomic(self.path, text)
        except OSError as e:
            raise ConfigIOError(f"Cannot write state file {self.path}: {e}") from e

    def _read_lines(self, *, reinitialize: bool = True) -> List[str]:
        """Return the file's lines, (re)initializing it when missing or unreadable.

        With ``reinitialize=False`` the file is never written: a missing or
        unreadable file reads as no lines.
        """
        if not reinitialize:
            try:
                return self.path.read_text(encoding="utf-8").splitlines()
            except FileNotFoundError:
                return []
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("State file %s unreadable (%s)", self.path, e)
                return []

        if not self.path.exists():
            self.initialize()
        try:
            return self.path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("State file %s unreadable (%s); re-initializing", self.path, e)
            self.initialize()
            try:
                return self.path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e2:
                raise ConfigIOError(f"Cannot read state file {self.path}: {e2}") from e2

    def read_all(self, *, reinitialize: bool = True) -> Dict[str, str]:
        """Return every key/value pair. Later duplicates win.

        Pass ``reinitialize=False`` from callers that do not hold the lock;
        an unreadable file then reads as empty and is left untouched.
        """
        if not self.path.exists():
            return {}
        values: Dict[str, str] = {}
        for line in self._read_lines(reinitialize=reinitialize):
            parsed = _parse_line(line)
            if parsed:
                values[parsed[0]] = parsed[1]
        return values

    # -------------------------
    # Public contract
    # -------------------------

    def get(self, key: str) -> str:
        """Return the stored value, or "" when unset or the file is absent."""
        return self.read_all().get(key, "")

    def set(self, key: str, value: Any) -> None:
        """Upsert a single key."""
        self.update(**{key: value})

    def update(self, **values: Any) -> None:
        """Upsert several keys in one atomic rewrite."""
        pending = {k: format_value(v) for k, v in values.items()}
        out: List[str] = []
        written = set()
        for line in self._read_lines():
            parsed = _parse_line(line)
            if parsed and parsed[0] in pending:
                key = parsed[0]
                if key in written:
                    continue
                out.append(f"{key}={pending[key]}")
                written.add(key)
            else:
                out.append(line)
        for key, value in pending.items():
            if key not in written:
                out.append(f"{key}={value}")
        self._write_text("\n".join(out) + "\n")

    def load(self) -> RunConfig:
        return RunConfig.from_mapping(self.read_all())

    def save(self, config: RunConfig) -> None:
        self.update(**config.to_mapping())
