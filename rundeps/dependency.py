"""Dependencies that must be satisfied before a test run proceeds."""

from __future__ import annotations

import logging
import re
import sys
import threading
import time
from dataclasses import dataclass
from typing import TextIO

from .evaluator import extract_errors, format_errors, is_satisfied
from .report import OutputSettings, format_satisfied, format_unsatisfied, output_settings
from .runner import run_command
from .watcher import ChangeDetector

logger = logging.getLogger(__name__)

EPOCH = 0.0

PatternLike = re.Pattern[str] | str | None


class ConfigurationError(RuntimeError):
    """A dependency or its configuration is unusable as written."""


def _compile(pattern: PatternLike) -> re.Pattern[str] | None:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regular expression {pattern!r}: {exc}") from exc


@dataclass
class DependencySpec:
    """The four fields a dependency is declared with."""

    name: str | None = None
    command: str | None = None
    satisfied_pattern: PatternLike = None
    errors_pattern: PatternLike = None

    def build(self) -> Dependency:
        return Dependency(
            name=self.name,
            command=self.command,
            satisfied_pattern=self.satisfied_pattern,
            errors_pattern=self.errors_pattern,
        )


class Dependency:
    """A shell command whose output must match a pattern before tests run.

    The dependency is rechecked only when some watched file changed since the
    last check. While unsatisfied it reports the extracted errors and blocks,
    polling its host for file changes, before checking again.

    The host (anything implementing :class:`~rundeps.watcher.ChangeDetector`) is
    supplied after construction through :meth:`on_initialize` or by assigning
    :attr:`host` directly.
    """

    name: str | None
    command: str | None
    last_check_time: float
    host: ChangeDetector | None
    settings: OutputSettings
    stream: TextIO | None

    def __init__(
        self,
        name: str | None = None,
        command: str | None = None,
        satisfied_pattern: PatternLike = None,
        errors_pattern: PatternLike = None,
        *,
        settings: OutputSettings | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.name = name
        self.command = command
        self.satisfied_pattern = satisfied_pattern
        self.errors_pattern = errors_pattern
        self.last_check_time = EPOCH
        self.host = None
        self.settings = settings if settings is not None else output_settings
        self.stream = stream
        self._output = ""

    @property
    def satisfied_pattern(self) -> re.Pattern[str] | None:
        return self._satisfied_pattern

    @satisfied_pattern.setter
    def satisfied_pattern(self, value: PatternLike) -> None:
        self._satisfied_pattern = _compile(value)

    @property
    def errors_pattern(self) -> re.Pattern[str] | None:
        return self._errors_pattern

    @errors_pattern.setter
    def errors_pattern(self, value: PatternLike) -> None:
        self._errors_pattern = _compile(value)

    def __repr__(self) -> str:
        return f"Dependency(name={self.name!r}, command={self.command!r})"

    def ensure_satisfied(self, cancel: threading.Event | None = None) -> bool:
        """Run the check command until its output matches, if anything changed.

        Returns ``True`` once the dependency is satisfied or when no watched file
        changed since the last check. Returns ``False`` only when ``cancel`` is
        set while waiting for changes.

        Raises:
            ConfigurationError: ``command`` or ``satisfied_pattern`` is unset, or
                no host has been supplied.
        """
        pattern = self.satisfied_pattern
        if not self.command or pattern is None:
            raise ConfigurationError("Dependencies must have at least a command and a satisfied pattern set.")
        if not self._files_changed():
            logger.debug("No changes since last check of %s; skipping", self.name)
            return True

        self._write(f"\nChecking dependency: {self.name or ''}")
        while True:
            self.last_check_time = time.time()
            self._output = run_command(self.command)
            if is_satisfied(self._output, pattern):
                logger.info("Dependency %s satisfied", self.name)
                self._write(format_satisfied(self.settings.colorize))
                return True
            errors = extract_errors(self._output, self.errors_pattern)
            logger.info("Dependency %s not satisfied (%d error line(s))", self.name, len(errors))
            self._write(format_unsatisfied(format_errors(errors), self.settings.colorize))
            if not self._wait_for_changes(cancel):
                logger.info("Stopped waiting on dependency %s", self.name)
                return False
            self._write(f"Rechecking dependency: {self.name or ''}")

    def reset(self) -> None:
        """Force the next check to run regardless of file changes."""
        self.last_check_time = EPOCH

    # Lifecycle hooks, see rundeps.hooks.RunHooks.

    def on_initialize(self, host: ChangeDetector) -> None:
        self.host = host

    def before_run(self) -> None:
        _ = self.ensure_satisfied()

    def on_interrupt(self) -> None:
        self.reset()

    def _require_host(self) -> ChangeDetector:
        if self.host is None:
            raise ConfigurationError(f"Dependency {self.name!r} has no host to watch files with.")
        return self.host

    def _files_changed(self) -> bool:
        return bool(self._require_host().find_changed_files(self.last_check_time))

    def _wait_for_changes(self, cancel: threading.Event | None) -> bool:
        host = self._require_host()
        while not self._files_changed():
            if cancel is None:
                time.sleep(host.poll_interval)
            elif cancel.wait(host.poll_interval):
                return False
        return True

    def _write(self, message: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        _ = stream.write(message if message.endswith("\n") else message + "\n")
        stream.flush()
