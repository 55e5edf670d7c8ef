from __future__ import annotations

import re
import unittest

from rundeps.evaluator import extract_errors, format_errors, is_satisfied


class IsSatisfiedTests(unittest.TestCase):
    def test_matches_anywhere_in_output(self) -> None:
        self.assertTrue(is_satisfied("step 1\nall checks: success\n", re.compile(r"success")))

    def test_no_match_is_unsatisfied(self) -> None:
        self.assertFalse(is_satisfied("failed", re.compile(r"success")))

    def test_empty_output_is_unsatisfied(self) -> None:
        self.assertFalse(is_satisfied("", re.compile(r"ready")))


class ExtractErrorsTests(unittest.TestCase):
    def test_single_group_yields_captures_in_order(self) -> None:
        output = "failed:\nerror: dependency not met\nerror: sorry mate"
        self.assertEqual(
            extract_errors(output, re.compile(r"error: (.*)")),
            ["dependency not met", "sorry mate"],
        )

    def test_pattern_without_groups_yields_whole_matches(self) -> None:
        output = "E101 bad\nok\nE202 worse"
        self.assertEqual(extract_errors(output, re.compile(r"E\d+ \w+")), ["E101 bad", "E202 worse"])

    def test_multiple_groups_are_flattened(self) -> None:
        output = "a.py:3 missing\nb.py:9 broken"
        self.assertEqual(
            extract_errors(output, re.compile(r"(\S+):(\d+)")),
            ["a.py", "3", "b.py", "9"],
        )

    def test_unmatched_optional_groups_are_skipped(self) -> None:
        output = "warn\nerror: x"
        self.assertEqual(extract_errors(output, re.compile(r"(warn)|error: (.*)")), ["warn", "x"])

    def test_unset_pattern_yields_nothing(self) -> None:
        self.assertEqual(extract_errors("error: x", None), [])

    def test_no_matches_yields_nothing(self) -> None:
        self.assertEqual(extract_errors("all good", re.compile(r"error: (.*)")), [])


class FormatErrorsTests(unittest.TestCase):
    def test_each_error_is_indented_four_spaces(self) -> None:
        self.assertEqual(format_errors(["A", "B"]), "    A\n    B")

    def test_no_errors_formats_empty(self) -> None:
        self.assertEqual(format_errors([]), "")
