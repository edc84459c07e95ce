"""tools/core_cmd.py

Command-execution helper shared by the engine scan and compare runners.

This module has no engine-specific knowledge. It provides
:func:`run_cmd_logged`, which runs a subprocess (no ``shell=True``), sends
combined stdout/stderr to a log file and enforces a timeout.

Rule
----
Only this module should touch ``subprocess`` for engine invocations.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

# Conventional exit status for a command killed by a timeout (GNU timeout(1)).
TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    log_path: Path
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def output(self) -> str:
        try:
            return self.log_path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return ""


def run_cmd_logged(
    cmd: List[str],
    *,
    log_path: Path,
    cwd: Optional[Path] = None,
    timeout_seconds: int = 0,
) -> CmdResult:
    """Run *cmd* with stdout and stderr both written to *log_path*.

    Never raises on non-zero exit codes or timeouts; a timeout is reported as
    exit code 124 with a note appended to the log. Only raises on execution
    errors (e.g. binary not found or not executable).
    """
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    command_str = " ".join(cmd)

    t0 = time.time()
    with log_path.open("w", encoding="utf-8") as log_file:
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                timeout=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
            )
        except subprocess.TimeoutExpired:
            elapsed = time.time() - t0
            log_file.write(f"\n[timeout] command exceeded {timeout_seconds}s and was killed: {command_str}\n")
            return CmdResult(
                exit_code=TIMEOUT_EXIT_CODE,
                elapsed_seconds=elapsed,
                command_str=command_str,
                log_path=log_path,
                timed_out=True,
            )

    return CmdResult(
        exit_code=int(proc.returncode),
        elapsed_seconds=time.time() - t0,
        command_str=command_str,
        log_path=log_path,
    )
