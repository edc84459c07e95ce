import tempfile
import unittest
from pathlib import Path
from unittest import mock

from ssa_benchmark.io.fs import (
    append_file,
    copy_file_atomic,
    is_non_empty_file,
    read_text_or_none,
    remove_if_exists,
    write_text_atomic,
)


class TestSafeIO(unittest.TestCase):
    def test_write_text_atomic_creates_parents_and_cleans_temp(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_dir = Path(td) / "service"
            out_path = out_dir / "config.json"

            write_text_atomic(out_path, "current_version=2.0\n")

            self.assertEqual("current_version=2.0\n", out_path.read_text(encoding="utf-8"))
            self.assertEqual([], list(out_dir.glob("*.tmp")))

    def test_failed_replace_keeps_previous_content(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "config.json"
            out_path.write_text("old\n", encoding="utf-8")

            with mock.patch("ssa_benchmark.io.fs.os.replace", side_effect=OSError("disk full")):
                with self.assertRaises(OSError):
                    write_text_atomic(out_path, "new\n")

            self.assertEqual("old\n", out_path.read_text(encoding="utf-8"))
            self.assertEqual([], list(Path(td).glob("*.tmp")))

    def test_copy_and_append(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            src = root / "scan.json"
            src.write_bytes(b'{"n": 1}')

            copy_file_atomic(src, root / "project" / "baseline.json")
            append_file(src, root / "logs" / "main.log")
            append_file(src, root / "logs" / "main.log")

            self.assertEqual(b'{"n": 1}', (root / "project" / "baseline.json").read_bytes())
            self.assertEqual(b'{"n": 1}{"n": 1}', (root / "logs" / "main.log").read_bytes())

    def test_small_helpers(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            empty = root / "empty.json"
            empty.write_text("")

            self.assertFalse(is_non_empty_file(empty))
            self.assertFalse(is_non_empty_file(root / "missing.json"))
            self.assertIsNone(read_text_or_none(None))
            self.assertIsNone(read_text_or_none(root / "missing.log"))
            self.assertTrue(remove_if_exists(empty))
            self.assertFalse(remove_if_exists(empty))


if __name__ == "__main__":
    unittest.main()
