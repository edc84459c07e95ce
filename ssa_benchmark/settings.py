"""ssa_benchmark.settings

Runtime configuration for the auto runner.

Values come from (highest priority first):

1. explicit overrides (CLI flags)
2. process environment
3. ``.env`` at the project root (loaded with python-dotenv, never overriding
   variables that are already exported)
4. built-in defaults

Every path the runner touches is derived here and handed to collaborators,
so tests can point the whole runner at a temp directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# Repo root = parent of ssa_benchmark/
ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"

ENV_PREFIX = "SSA_BENCH_"

DEFAULT_VERSION_URL = "https://yaklang.oss-accelerate.aliyuncs.com/yak/latest/version.txt"
DEFAULT_DOWNLOAD_URL_TEMPLATE = "https://yaklang.oss-accelerate.aliyuncs.com/yak/{version}/yak_linux_amd64"
DEFAULT_BASELINE_VERSION = "1.4.5-beta2"
DEFAULT_ENGINE_PREFIX = "yak"


def _anchor_under_root(path: Path) -> Path:
    return path if path.is_absolute() else (ROOT_DIR / path)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(ENV_PREFIX + name, default)


def _env_path(name: str, default: Path) -> Path:
    raw = _env(name)
    return _anchor_under_root(Path(raw).expanduser()) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = (_env(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"ERROR: {ENV_PREFIX}{name} must be an integer (got {raw!r}).")


@dataclass(frozen=True)
class BenchmarkSettings:
    service_dir: Path
    work_dir: Path
    configs_dir: Path
    report_dir: Path

    version_url: str = DEFAULT_VERSION_URL
    download_url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE
    baseline_version: str = DEFAULT_BASELINE_VERSION
    engine_prefix: str = DEFAULT_ENGINE_PREFIX

    # Script handed to the engine in comparison mode; None runs the engine
    # with the comparison flags only.
    compare_script: Optional[Path] = None
    tolerance: int = 10

    keep_engines: int = 3
    failure_log_retention_days: int = 30

    version_connect_timeout: float = 10
    version_total_timeout: float = 30
    download_connect_timeout: float = 30
    download_total_timeout: float = 300
    scan_timeout_seconds: int = 3600
    compare_timeout_seconds: int = 600

    @property
    def engine_dir(self) -> Path:
        return self.service_dir / "yak-engine"

    @property
    def log_file(self) -> Path:
        return self.service_dir / "auto-benchmark.log"

    @property
    def lock_file(self) -> Path:
        return self.service_dir / "benchmark.lock"

    @property
    def state_file(self) -> Path:
        # Historical name; the content is key=value text, not JSON.
        return self.service_dir / "config.json"

    @property
    def failure_log_dir(self) -> Path:
        return self.service_dir / "failure-logs"

    def download_url(self, version: str) -> str:
        return self.download_url_template.replace("{version}", version)


def load_settings(env_file: Optional[Path] = None, **overrides: Any) -> BenchmarkSettings:
    """Build settings from .env + environment, then apply non-None overrides."""
    load_dotenv(env_file or ENV_PATH, override=False)

    compare_raw = _env("COMPARE_SCRIPT")
    if compare_raw is None:
        compare_script: Optional[Path] = ROOT_DIR / "baseline_compare.yak"
    elif compare_raw.strip():
        compare_script = _anchor_under_root(Path(compare_raw.strip()).expanduser())
    else:
        compare_script = None

    settings = BenchmarkSettings(
        service_dir=_env_path("SERVICE_DIR", ROOT_DIR / "service"),
        work_dir=_env_path("WORK_DIR", ROOT_DIR),
        configs_dir=_env_path("CONFIGS_DIR", ROOT_DIR / "configs"),
        report_dir=_env_path("REPORT_DIR", ROOT_DIR / "reports"),
        version_url=_env("VERSION_URL", DEFAULT_VERSION_URL) or DEFAULT_VERSION_URL,
        download_url_template=_env("DOWNLOAD_URL_TEMPLATE", DEFAULT_DOWNLOAD_URL_TEMPLATE)
        or DEFAULT_DOWNLOAD_URL_TEMPLATE,
        baseline_version=_env("BASELINE_VERSION", DEFAULT_BASELINE_VERSION) or DEFAULT_BASELINE_VERSION,
        compare_script=compare_script,
        tolerance=_env_int("TOLERANCE", 10),
        keep_engines=_env_int("KEEP_ENGINES", 3),
        failure_log_retention_days=_env_int("FAILURE_LOG_RETENTION_DAYS", 30),
        scan_timeout_seconds=_env_int("SCAN_TIMEOUT", 3600),
        compare_timeout_seconds=_env_int("COMPARE_TIMEOUT", 600),
    )

    clean = {k: v for k, v in overrides.items() if v is not None}
    for key in ("service_dir", "work_dir", "configs_dir", "report_dir", "compare_script"):
        if key in clean:
            clean[key] = _anchor_under_root(Path(clean[key]).expanduser())
    return replace(settings, **clean) if clean else settings


def ensure_service_dirs(settings: BenchmarkSettings) -> None:
    """Create the directories every tick writes into."""
    for d in (
        settings.service_dir,
        settings.engine_dir,
        settings.report_dir,
        settings.failure_log_dir,
    ):
        d.mkdir(parents=True, exist_ok=True)
