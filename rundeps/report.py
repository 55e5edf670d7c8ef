"""Success and failure reports for dependency checks.

Colorization is controlled by an :class:`OutputSettings` object. A single
process-scoped instance, :data:`output_settings`, is created at import time
with colorization on; it can be read with :func:`colorize_output` and changed
with :func:`set_colorize_output` (last writer wins). Dependencies accept their
own settings object when a caller needs isolation, for example in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class OutputSettings:
    colorize: bool = True


output_settings = OutputSettings()


def colorize_output() -> bool:
    """Return whether reports written with the process-wide settings are colorized."""
    return output_settings.colorize


def set_colorize_output(enabled: bool) -> None:
    output_settings.colorize = enabled


def settings_from_env() -> OutputSettings:
    """Build settings honouring ``NO_COLOR`` and ``RUNDEPS_COLOR``."""
    if os.environ.get("NO_COLOR"):
        return OutputSettings(colorize=False)
    value = os.environ.get("RUNDEPS_COLOR")
    if value is not None and value.strip().lower() in _FALSE_VALUES:
        return OutputSettings(colorize=False)
    return OutputSettings(colorize=True)


def _codes(color: str, colorize: bool) -> tuple[str, str]:
    if not colorize:
        return "", ""
    return color, RESET


def format_satisfied(colorize: bool) -> str:
    start, reset = _codes(GREEN, colorize)
    return f"-> {start}Dependency satisfied\n{reset}"


def format_unsatisfied(errors_text: str, colorize: bool) -> str:
    start, reset = _codes(RED, colorize)
    return f"-> {start}Dependency not satisfied:\n{errors_text}{reset}"
