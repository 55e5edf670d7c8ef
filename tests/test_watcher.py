from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from typing import override
from unittest.mock import patch

from rundeps.watcher import FileWatcher


class FileWatcherTests(unittest.TestCase):
    temp_dir: tempfile.TemporaryDirectory[str] | None
    root: Path

    def __init__(self, methodName: str = "runTest") -> None:
        super().__init__(methodName)
        self.temp_dir = None
        self.root = Path(".")

    @override
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.root = Path(self.temp_dir.name)

    def _touch(self, relative: str, mtime: float) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text("x", encoding="utf-8")
        os.utime(path, (mtime, mtime))
        return path

    def test_find_files_lists_regular_files_with_mtimes(self) -> None:
        _ = self._touch("a.py", 100.0)
        _ = self._touch("pkg/b.py", 200.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(watcher.find_files(), {"a.py": 100.0, "pkg/b.py": 200.0})

    def test_excluded_directories_are_skipped(self) -> None:
        _ = self._touch("a.py", 100.0)
        _ = self._touch(".git/objects/abc", 100.0)
        _ = self._touch("pkg/__pycache__/b.cpython-312.pyc", 100.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(list(watcher.find_files()), ["a.py"])

    def test_test_artifacts_are_skipped(self) -> None:
        _ = self._touch("a.py", 100.0)
        _ = self._touch(".coverage", 100.0)
        _ = self._touch("reports/junit.xml", 100.0)
        _ = self._touch("htmlcov/index.html", 100.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(list(watcher.find_files()), ["a.py"])

    def test_custom_exclude_matches_file_names(self) -> None:
        _ = self._touch("a.py", 100.0)
        _ = self._touch("results.log", 100.0)
        watcher = FileWatcher(self.root, exclude=["results.log"])
        self.assertEqual(list(watcher.find_files()), ["a.py"])

    def test_patterns_restrict_watched_files(self) -> None:
        _ = self._touch("a.py", 100.0)
        _ = self._touch("notes.txt", 100.0)
        _ = self._touch("pkg/b.py", 100.0)
        watcher = FileWatcher(self.root, patterns=["**/*.py"])
        self.assertEqual(sorted(watcher.find_files()), ["a.py", "pkg/b.py"])

    def test_changed_files_include_mtime_equal_to_since(self) -> None:
        _ = self._touch("old.py", 100.0)
        _ = self._touch("same.py", 150.0)
        _ = self._touch("new.py", 200.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(watcher.find_changed_files(150.0), {"same.py": 150.0, "new.py": 200.0})

    def test_epoch_reports_every_existing_file(self) -> None:
        _ = self._touch("a.py", 1.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(watcher.find_changed_files(0.0), {"a.py": 1.0})

    def test_nothing_changed_is_empty(self) -> None:
        _ = self._touch("a.py", 100.0)
        watcher = FileWatcher(self.root)
        self.assertEqual(watcher.find_changed_files(500.0), {})

    def test_wait_for_changes_sleeps_at_poll_interval(self) -> None:
        watcher = FileWatcher(self.root, poll_interval=0.5)
        results = [{}, {}, {"a.py": 900.0}]
        with patch.object(watcher, "find_changed_files", side_effect=results), patch(
            "rundeps.watcher.time.sleep"
        ) as sleep_mock:
            changed = watcher.wait_for_changes(800.0)
        self.assertEqual(changed, {"a.py": 900.0})
        self.assertEqual(sleep_mock.call_count, 2)
        sleep_mock.assert_called_with(0.5)

    def test_poll_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            _ = FileWatcher(self.root, poll_interval=0)
