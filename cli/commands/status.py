from __future__ import annotations

from datetime import datetime

from ssa_benchmark.failures import FailureLogger
from ssa_benchmark.lock import pid_is_alive, read_lock_pid
from ssa_benchmark.settings import BenchmarkSettings
from ssa_benchmark.state import STATE_KEYS, ConfigStore
from tools.engine.repository import EngineRepository

RECENT_FAILURES = 5


def run_status(settings: BenchmarkSettings) -> int:
    """Print persisted state without taking the lock or changing anything."""
    store = ConfigStore(settings.state_file)
    values = store.read_all(reinitialize=False)

    print(f"\n📄 State file: {settings.state_file}")
    if not values:
        print("  (no state recorded yet)")
    for key in STATE_KEYS:
        print(f"  {key:<18}: {values.get(key, '')}")

    pid = read_lock_pid(settings.lock_file)
    if pid is None:
        print("\n🔓 Not running")
    elif pid_is_alive(pid):
        print(f"\n🔒 Running (PID: {pid})")
    else:
        print(f"\n⚠️ Stale lock file (PID: {pid} is not alive)")

    engines = EngineRepository(settings.engine_dir, settings.download_url, prefix=settings.engine_prefix)
    cached = engines.list_cached()
    print(f"\n⚙️ Cached engines ({len(cached)}): {settings.engine_dir}")
    for p in cached:
        print(f"  - {p.name}")

    reports = FailureLogger(settings.failure_log_dir).list_reports()
    print(f"\n🧾 Failure logs ({len(reports)}): {settings.failure_log_dir}")
    for p in reports[:RECENT_FAILURES]:
        modified = datetime.fromtimestamp(p.stat().st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        print(f"  - {p.name} ({modified})")
    return 0
