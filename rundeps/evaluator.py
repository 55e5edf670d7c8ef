"""Interpretation of dependency command output."""

from __future__ import annotations

import re
from collections.abc import Sequence

INDENT = "    "


def is_satisfied(output: str, pattern: re.Pattern[str]) -> bool:
    return pattern.search(output) is not None


def extract_errors(output: str, pattern: re.Pattern[str] | None) -> list[str]:
    """Collect every match of ``pattern`` in ``output``, in order.

    Patterns with a single group yield that group, patterns with several groups
    yield each group in turn, and patterns without groups yield the whole match.
    """
    if pattern is None:
        return []
    errors: list[str] = []
    for match in pattern.finditer(output):
        groups = match.groups()
        if not groups:
            errors.append(match.group(0))
            continue
        errors.extend(group for group in groups if group is not None)
    return errors


def format_errors(errors: Sequence[str]) -> str:
    return "\n".join(INDENT + error for error in errors)
