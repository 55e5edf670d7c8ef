"""Execution of dependency check commands through the shell."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


def run_command(command: str) -> str:
    """Run ``command`` in the shell and return stdout with stderr merged into it.

    The exit status is not inspected: only the captured text decides whether a
    dependency is satisfied. A shell that cannot be spawned at all is reported
    through the returned text as well.
    """
    logger.debug("Running dependency command: %s", command)
    try:
        completed = subprocess.run(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as exc:
        logger.error("Could not run dependency command %r: %s", command, exc)
        return str(exc)
    logger.debug("Dependency command exited with status %s", completed.returncode)
    return completed.stdout or ""
