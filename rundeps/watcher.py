"""Change detection over a watched file tree."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: tuple[str, ...] = ("**/*",)
DEFAULT_EXCLUDE: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "node_modules",
    ".coverage",
    "coverage.xml",
    "htmlcov",
    "junit.xml",
)


class ChangeDetector(Protocol):
    """What a dependency needs from its host to decide when to recheck."""

    poll_interval: float

    def find_changed_files(self, since: float) -> dict[str, float]: ...


class FileWatcher:
    """Polls modification times of files under ``root``."""

    root: Path
    patterns: tuple[str, ...]
    exclude: frozenset[str]
    poll_interval: float

    def __init__(
        self,
        root: Path,
        patterns: Iterable[str] = DEFAULT_PATTERNS,
        exclude: Iterable[str] = DEFAULT_EXCLUDE,
        poll_interval: float = 1.0,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.root = Path(root)
        self.patterns = tuple(patterns) or DEFAULT_PATTERNS
        self.exclude = frozenset(exclude)
        self.poll_interval = poll_interval

    def _is_excluded(self, relative: Path) -> bool:
        return any(part in self.exclude for part in relative.parts)

    def find_files(self) -> dict[str, float]:
        """Return relative path -> modification time for every watched file."""
        files: dict[str, float] = {}
        for pattern in self.patterns:
            for candidate in self.root.glob(pattern):
                relative = candidate.relative_to(self.root)
                key = relative.as_posix()
                if key in files or self._is_excluded(relative):
                    continue
                if not candidate.is_file():
                    continue
                try:
                    files[key] = candidate.stat().st_mtime
                except FileNotFoundError:
                    # Removed between listing and stat.
                    continue
        return files

    def find_changed_files(self, since: float) -> dict[str, float]:
        changed = {name: mtime for name, mtime in self.find_files().items() if mtime >= since}
        if changed:
            logger.debug("%d file(s) changed since %s", len(changed), since)
        return changed

    def wait_for_changes(self, since: float) -> dict[str, float]:
        """Block until some watched file is modified at or after ``since``."""
        while True:
            changed = self.find_changed_files(since)
            if changed:
                return changed
            time.sleep(self.poll_interval)
