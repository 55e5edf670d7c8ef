from __future__ import annotations

import subprocess
import unittest
from unittest.mock import MagicMock, patch

from rundeps.runner import run_command


class RunCommandTests(unittest.TestCase):
    def test_runs_through_shell_merging_stderr(self) -> None:
        completed = subprocess.CompletedProcess(args="check", returncode=0, stdout="ready\n")
        with patch("rundeps.runner.subprocess.run", return_value=completed) as run_mock:
            output = run_command("check --all")
        self.assertEqual(output, "ready\n")
        run_mock.assert_called_once_with(
            "check --all",
            shell=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

    def test_non_zero_exit_still_returns_output(self) -> None:
        completed = subprocess.CompletedProcess(args="check", returncode=3, stdout="error: boom\n")
        with patch("rundeps.runner.subprocess.run", return_value=completed):
            self.assertEqual(run_command("check"), "error: boom\n")

    def test_missing_stdout_returns_empty_text(self) -> None:
        completed = MagicMock(returncode=0, stdout=None)
        with patch("rundeps.runner.subprocess.run", return_value=completed):
            self.assertEqual(run_command("check"), "")

    def test_spawn_failure_is_reported_as_output(self) -> None:
        with patch("rundeps.runner.subprocess.run", side_effect=OSError("no shell")):
            self.assertEqual(run_command("check"), "no shell")

    def test_real_shell_merges_streams(self) -> None:
        output = run_command("echo out; echo err 1>&2; exit 4")
        self.assertIn("out\n", output)
        self.assertIn("err\n", output)
