"""Configuration helpers for locating and loading dependency declarations."""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from .dependency import ConfigurationError, DependencySpec
from .watcher import DEFAULT_EXCLUDE, DEFAULT_PATTERNS

APP_NAME = "rundeps"
CONFIG_FILENAME = "rundeps.toml"
PYPROJECT_FILENAME = "pyproject.toml"
POLL_INTERVAL_ENV = "RUNDEPS_POLL_INTERVAL"

_DEPENDENCY_KEYS = {"name", "command", "satisfied", "errors"}


@dataclass
class RunDepsConfig:
    dependencies: list[DependencySpec] = field(default_factory=list)
    poll_interval: float = 1.0
    colorize: bool | None = None
    watch: list[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    source: Path | None = None


def find_config_file(directory: Path) -> Path | None:
    """Return the first configuration source found in ``directory``."""
    candidate = directory / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    pyproject = directory / PYPROJECT_FILENAME
    if not pyproject.is_file():
        return None
    tool = _read_toml(pyproject).get("tool")
    if isinstance(tool, dict) and APP_NAME in tool:
        return pyproject
    return None


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc


def _table_for(path: Path) -> dict[str, object]:
    data = _read_toml(path)
    if path.name != PYPROJECT_FILENAME:
        return data
    tool = data.get("tool")
    table = cast(dict[str, object], tool).get(APP_NAME) if isinstance(tool, dict) else None
    if not isinstance(table, dict):
        raise ConfigurationError(f"{path}: no [tool.{APP_NAME}] table")
    return cast(dict[str, object], table)


def _string_list(value: object, key: str, path: Path) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in cast(list[object], value)):
        raise ConfigurationError(f"{path}: '{key}' must be a list of strings")
    return cast(list[str], value)


def _optional_string(entry: dict[str, object], key: str, label: str) -> str | None:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"{label}: '{key}' must be a string")
    return value


def _parse_dependency(raw: object, index: int, path: Path) -> DependencySpec:
    label = f"{path}: dependency #{index + 1}"
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{label} must be a table")
    entry = cast(dict[str, object], raw)
    unknown = sorted(set(entry) - _DEPENDENCY_KEYS)
    if unknown:
        raise ConfigurationError(f"{label}: unknown key(s) {', '.join(unknown)}")
    command = _optional_string(entry, "command", label)
    satisfied = _optional_string(entry, "satisfied", label)
    if not command or not satisfied:
        raise ConfigurationError(f"{label}: 'command' and 'satisfied' are required")
    errors = _optional_string(entry, "errors", label)
    patterns: list[re.Pattern[str] | None] = []
    for key, pattern in (("satisfied", satisfied), ("errors", errors)):
        try:
            patterns.append(re.compile(pattern) if pattern is not None else None)
        except re.error as exc:
            raise ConfigurationError(f"{label}: invalid '{key}' pattern: {exc}") from exc
    return DependencySpec(
        name=_optional_string(entry, "name", label),
        command=command,
        satisfied_pattern=patterns[0],
        errors_pattern=patterns[1],
    )


def _poll_interval(value: object, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigurationError(f"{label}: 'poll_interval' must be a number")
    try:
        interval = float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{label}: 'poll_interval' must be a number") from exc
    if interval <= 0:
        raise ConfigurationError(f"{label}: 'poll_interval' must be positive")
    return interval


def load_config(path: Path) -> RunDepsConfig:
    """Parse a ``rundeps.toml`` file or the ``[tool.rundeps]`` table of a pyproject."""
    table = _table_for(path)
    config = RunDepsConfig(source=path)

    raw_dependencies = table.get("dependency", [])
    if not isinstance(raw_dependencies, list):
        raise ConfigurationError(f"{path}: 'dependency' must be an array of tables")
    config.dependencies = [
        _parse_dependency(raw, index, path) for index, raw in enumerate(cast(list[object], raw_dependencies))
    ]

    if "poll_interval" in table:
        config.poll_interval = _poll_interval(table["poll_interval"], str(path))
    if "colorize" in table:
        colorize = table["colorize"]
        if not isinstance(colorize, bool):
            raise ConfigurationError(f"{path}: 'colorize' must be true or false")
        config.colorize = colorize
    if "watch" in table:
        config.watch = _string_list(table["watch"], "watch", path)
    if "exclude" in table:
        config.exclude = _string_list(table["exclude"], "exclude", path)

    env_interval = os.environ.get(POLL_INTERVAL_ENV)
    if env_interval:
        config.poll_interval = _poll_interval(env_interval, POLL_INTERVAL_ENV)
    return config
