import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

import requests

from engine_fakes import FakeResponse, FakeSession, fake_engine_source
from ssa_benchmark.errors import DownloadValidationError, NetworkError
from tools.engine.repository import EngineRepository, is_executable_format


def _url(version: str) -> str:
    return f"https://engine.example/{version}/engine"


class TestEngineRepository(unittest.TestCase):
    def _repo(self, engine_dir: Path, session: FakeSession) -> EngineRepository:
        return EngineRepository(engine_dir, _url, prefix="yak", session=session)

    def test_ensure_twice_downloads_once(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): FakeResponse(fake_engine_source(version="1.0"))})
            repo = self._repo(Path(td), session)

            first = repo.ensure("1.0")
            second = repo.ensure("1.0")

            self.assertEqual(first, second)
            self.assertEqual(Path(td) / "yak-1.0", first)
            self.assertEqual([_url("1.0")], session.calls)
            self.assertTrue(os.access(first, os.X_OK))
            self.assertFalse((Path(td) / "yak-1.0.tmp").exists())

    def test_empty_download_is_rejected_and_removed(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): FakeResponse(b"")})
            repo = self._repo(Path(td), session)

            with self.assertRaises(DownloadValidationError):
                repo.ensure("1.0")

            self.assertEqual([], list(Path(td).iterdir()))

    def test_non_executable_payload_is_rejected_and_removed(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): FakeResponse(b"<html>404 page</html>")})
            repo = self._repo(Path(td), session)

            with self.assertRaises(DownloadValidationError):
                repo.ensure("1.0")

            self.assertEqual([], list(Path(td).iterdir()))

    def test_network_failure_leaves_no_partial_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): requests.ReadTimeout("slow")})
            repo = self._repo(Path(td), session)

            with self.assertRaises(NetworkError):
                repo.ensure("1.0")

            self.assertEqual([], list(Path(td).iterdir()))

    def test_unwritable_temp_path_is_network_error_and_cleared(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            engine_dir = Path(td)
            (engine_dir / "yak-1.0.tmp").mkdir()
            session = FakeSession({_url("1.0"): FakeResponse(fake_engine_source(version="1.0"))})
            repo = self._repo(engine_dir, session)

            with self.assertRaises(NetworkError):
                repo.ensure("1.0")

            self.assertEqual([], list(engine_dir.iterdir()))
            # The next attempt is not blocked by the leftover.
            self.assertEqual(engine_dir / "yak-1.0", repo.ensure("1.0"))

    def test_install_failure_is_validation_error_and_leaves_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): FakeResponse(fake_engine_source(version="1.0"))})
            repo = self._repo(Path(td), session)

            with mock.patch("tools.engine.repository.os.replace", side_effect=OSError("read-only file system")):
                with self.assertRaises(DownloadValidationError):
                    repo.ensure("1.0")

            self.assertEqual([], list(Path(td).iterdir()))

    def test_chmod_failure_is_validation_error_and_removes_target(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            session = FakeSession({_url("1.0"): FakeResponse(fake_engine_source(version="1.0"))})
            repo = self._repo(Path(td), session)

            with mock.patch("tools.engine.repository._make_executable", side_effect=PermissionError("denied")):
                with self.assertRaises(DownloadValidationError):
                    repo.ensure("1.0")

            self.assertEqual([], list(Path(td).iterdir()))

    def test_retire_old_keeps_three_most_recently_modified(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            engine_dir = Path(td)
            now = time.time()
            for age, version in enumerate(["1.5", "1.4", "1.3", "1.2", "1.1"]):
                p = engine_dir / f"yak-{version}"
                p.write_bytes(b"\x7fELF")
                os.utime(p, (now - age * 3600, now - age * 3600))
            (engine_dir / "yak-1.6.tmp").write_bytes(b"partial")

            repo = self._repo(engine_dir, FakeSession())
            removed = repo.retire_old(keep=3)

            self.assertEqual({"yak-1.2", "yak-1.1"}, {p.name for p in removed})
            self.assertEqual(["yak-1.5", "yak-1.4", "yak-1.3"], [p.name for p in repo.list_cached()])
            self.assertTrue((engine_dir / "yak-1.6.tmp").exists())

    def test_retire_old_is_noop_under_limit(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "yak-1.0").write_bytes(b"\x7fELF")
            repo = self._repo(Path(td), FakeSession())
            self.assertEqual([], repo.retire_old(keep=3))

    def test_is_executable_format(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cases = {
                "elf": (b"\x7fELF\x02\x01", True),
                "macho": (b"\xcf\xfa\xed\xfe\x07", True),
                "script": (b"#!/bin/sh\necho hi\n", True),
                "html": (b"<html>", False),
                "empty": (b"", False),
            }
            for name, (content, expected) in cases.items():
                p = Path(td) / name
                p.write_bytes(content)
                self.assertEqual(expected, is_executable_format(p), name)


if __name__ == "__main__":
    unittest.main()
