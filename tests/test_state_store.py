import tempfile
import unittest
from pathlib import Path

from ssa_benchmark.state import HEADER_TITLE, STATE_KEYS, ConfigStore, RunConfig


class TestConfigStore(unittest.TestCase):
    def test_missing_file_reads_as_empty_without_creating_it(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = ConfigStore(Path(td) / "config.json")

            self.assertEqual("", store.get("current_version"))
            self.assertEqual(RunConfig(), store.load())
            self.assertFalse(store.path.exists())

    def test_first_write_initializes_header_and_all_keys(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = ConfigStore(Path(td) / "svc" / "config.json")
            store.set("last_check_time", "2024-01-01 00:00:00")

            lines = store.path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(HEADER_TITLE, lines[0])
            self.assertTrue(lines[1].startswith("# Last updated: "))
            keys = [ln.split("=", 1)[0] for ln in lines if "=" in ln and not ln.startswith("#")]
            self.assertEqual(list(STATE_KEYS), keys)
            self.assertEqual("2024-01-01 00:00:00", store.get("last_check_time"))
            self.assertEqual("0", store.get("total_runs"))
            self.assertEqual("false", store.get("last_run_success"))

    def test_upsert_replaces_in_place_and_appends_unknown_keys(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            path.write_text(
                "# hand edited\ncurrent_version=1.0\ncustom=keep-me\n",
                encoding="utf-8",
            )
            store = ConfigStore(path)

            store.set("current_version", "1.1")
            store.set("engine_path", "/opt/yak-1.1")
            store.set("current_version", "1.2")

            self.assertEqual(
                ["# hand edited", "current_version=1.2", "custom=keep-me", "engine_path=/opt/yak-1.1"],
                path.read_text(encoding="utf-8").splitlines(),
            )

    def test_values_may_contain_equals_signs_and_newlines_are_flattened(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = ConfigStore(Path(td) / "config.json")
            store.set("last_run_error", "a=b\nsecond line")

            self.assertEqual("a=b second line", store.get("last_run_error"))

    def test_typed_load_parses_counters_and_booleans(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            path.write_text("total_runs=abc\nlast_run_success=true\n", encoding="utf-8")
            cfg = ConfigStore(path).load()
            self.assertEqual(0, cfg.total_runs)
            self.assertTrue(cfg.last_run_success)

            path.write_text("total_runs=7\nlast_run_success=yes\n", encoding="utf-8")
            cfg = ConfigStore(path).load()
            self.assertEqual(7, cfg.total_runs)
            self.assertFalse(cfg.last_run_success)

    def test_update_writes_several_keys_and_formats_types(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = ConfigStore(Path(td) / "config.json")
            store.update(total_runs=3, last_run_success=True, current_version="2.0")

            cfg = store.load()
            self.assertEqual(3, cfg.total_runs)
            self.assertTrue(cfg.last_run_success)
            self.assertEqual("2.0", cfg.current_version)
            self.assertEqual([], list(Path(td).glob("*.tmp")))

    def test_unreadable_file_is_reinitialized(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            path.write_bytes(b"\xff\xfe\x00garbage")
            store = ConfigStore(path)

            store.set("last_check_time", "now")

            self.assertEqual("now", store.get("last_check_time"))
            self.assertTrue(path.read_text(encoding="utf-8").startswith(HEADER_TITLE))

    def test_read_only_access_never_rewrites_an_unreadable_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            corrupt = b"current_version=1.0\n\xff\xfe broken\n"
            path.write_bytes(corrupt)
            store = ConfigStore(path)

            self.assertEqual({}, store.read_all(reinitialize=False))
            self.assertEqual(corrupt, path.read_bytes())

            path.write_text("current_version=1.0\n", encoding="utf-8")
            self.assertEqual({"current_version": "1.0"}, store.read_all(reinitialize=False))

    def test_save_round_trips_run_config(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = ConfigStore(Path(td) / "config.json")
            cfg = RunConfig(current_version="1.4", total_runs=2, last_run_error="1/2 projects failed")
            store.save(cfg)
            self.assertEqual(cfg, store.load())


if __name__ == "__main__":
    unittest.main()
