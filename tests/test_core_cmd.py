import sys
from pathlib import Path

import pytest

from tools.core_cmd import TIMEOUT_EXIT_CODE, run_cmd_logged


def test_combined_output_and_exit_code(tmp_path: Path) -> None:
    code = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(5)"
    res = run_cmd_logged([sys.executable, "-c", code], log_path=tmp_path / "logs" / "cmd.log")

    assert res.exit_code == 5
    assert not res.ok
    assert "out" in res.output() and "err" in res.output()


def test_timeout_is_reported_as_exit_124(tmp_path: Path) -> None:
    res = run_cmd_logged(
        [sys.executable, "-c", "import time; time.sleep(30)"],
        log_path=tmp_path / "cmd.log",
        timeout_seconds=1,
    )

    assert res.timed_out
    assert res.exit_code == TIMEOUT_EXIT_CODE
    assert "[timeout]" in res.output()


def test_missing_binary_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        run_cmd_logged([str(tmp_path / "nope")], log_path=tmp_path / "cmd.log")
