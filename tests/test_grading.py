"""Tests for quizgate.access.grading module."""

from __future__ import annotations

import decimal
import typing as t

import pytest

from quizgate.access.grading import aggregate_grade, aggregate_scores, quantize
from quizgate.model import AttemptState, GradingMethod

Build = t.Callable[..., t.Any]
D = decimal.Decimal


class TestAggregateScores(object):
    @pytest.mark.parametrize(
        "method,scores,expected",
        [
            (GradingMethod.Average, ["4", "8"], D("6")),
            (GradingMethod.Highest, ["4", "8", "2"], D("8")),
            (GradingMethod.First, ["4", "8"], D("4")),
            (GradingMethod.Last, ["4", "8"], D("8")),
        ],
    )
    def test_methods(self, method: GradingMethod, scores: list[str], expected: decimal.Decimal) -> None:
        assert aggregate_scores([D(s) for s in scores], method) == expected

    @pytest.mark.parametrize("method", list(GradingMethod))
    def test_no_scores(self, method: GradingMethod) -> None:
        assert aggregate_scores([], method) is None

    def test_rounds_half_even(self) -> None:
        assert quantize(D("6.125"), 2) == D("6.12")
        assert quantize(D("6.135"), 2) == D("6.14")
        assert aggregate_scores([D("1"), D("2")], GradingMethod.Average, 0) == D("2")
        assert aggregate_scores([D("2"), D("3")], GradingMethod.Average, 0) == D("2")

    def test_average_keeps_precision(self) -> None:
        result = aggregate_scores([D("1"), D("1"), D("2")], GradingMethod.Average, 3)
        assert result == D("1.333")
        assert result is not None and result.as_tuple().exponent == -3


class TestAggregateGrade(object):
    def test_first_and_last_follow_sequence(self, build_assessment: Build, build_attempt: Build) -> None:
        """Attempt order is by sequence number, whatever order they are passed in."""
        assessment = build_assessment()
        attempts = [build_attempt(assessment, 2, 8), build_attempt(assessment, 1, 4)]

        assert aggregate_grade(attempts, GradingMethod.First).value == D("4")
        assert aggregate_grade(attempts, GradingMethod.Last).value == D("8")

    def test_zero_finished_attempts(self, build_assessment: Build, build_attempt: Build) -> None:
        assessment = build_assessment()
        in_progress = build_attempt(assessment, 1)

        for method in GradingMethod:
            grade = aggregate_grade([in_progress], method)
            assert grade.value is None
            assert not grade.overridden
            assert grade.passed is None

    def test_unscored_and_unfinished_are_ignored(self, build_assessment: Build, build_attempt: Build) -> None:
        assessment = build_assessment()
        attempts = [
            build_attempt(assessment, 1, 9, state=AttemptState.Abandoned),
            build_attempt(assessment, 2, 3),
            build_attempt(assessment, 3, state=AttemptState.Finished),
        ]

        assert aggregate_grade(attempts, GradingMethod.Highest).value == D("3")

    def test_authoritative_override_wins(
        self, build_assessment: Build, build_attempt: Build, build_override: Build
    ) -> None:
        assessment = build_assessment()
        attempts = [build_attempt(assessment, 1, 4), build_attempt(assessment, 2, 9)]
        override = build_override(assessment, value=D("7"), is_overridden=True, feedback="Regraded")

        grade = aggregate_grade(attempts, GradingMethod.Highest, override)

        assert grade.value == D("7")
        assert grade.overridden
        assert grade.feedback == "Regraded"

    def test_non_authoritative_override_keeps_computed_grade(
        self, build_assessment: Build, build_attempt: Build, build_override: Build
    ) -> None:
        """Feedback is reported even when the override does not replace the grade."""
        assessment = build_assessment()
        attempts = [build_attempt(assessment, 1, 4), build_attempt(assessment, 2, 9)]
        override = build_override(assessment, value=D("7"), is_overridden=False, feedback="Nice work")

        grade = aggregate_grade(attempts, GradingMethod.Highest, override)

        assert grade.value == D("9")
        assert not grade.overridden
        assert grade.feedback == "Nice work"

    def test_override_without_value_is_ignored(self, build_assessment: Build, build_override: Build) -> None:
        assessment = build_assessment()
        grade = aggregate_grade([], GradingMethod.Highest, build_override(assessment, is_overridden=True))

        assert grade.value is None
        assert not grade.overridden

    def test_scores_are_bounded_by_total(
        self, build_assessment: Build, build_attempt: Build, build_override: Build
    ) -> None:
        """Scores above the total or below zero are clamped before they are combined."""
        assessment = build_assessment()
        attempts = [build_attempt(assessment, 1, 15), build_attempt(assessment, 2, -3)]
        regraded = build_override(assessment, value=D("12"), is_overridden=True)

        assert aggregate_grade(attempts, GradingMethod.Highest, total_score=D("10")).value == D("10")
        assert aggregate_grade(attempts, GradingMethod.Average, total_score=D("10")).value == D("5")
        assert aggregate_grade(attempts, GradingMethod.Last, total_score=D("10")).value == D("0")
        assert aggregate_grade(attempts, GradingMethod.Highest, regraded, total_score=D("10")).value == D("10")

    def test_pass_threshold(self, build_assessment: Build, build_attempt: Build) -> None:
        assessment = build_assessment()
        attempts = [build_attempt(assessment, 1, 6)]

        assert aggregate_grade(attempts, GradingMethod.Highest, pass_threshold=D("6")).passed is True
        assert aggregate_grade(attempts, GradingMethod.Highest, pass_threshold=D("6.5")).passed is False
        assert aggregate_grade(attempts, GradingMethod.Highest).passed is None
