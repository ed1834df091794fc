"""Tests for quizgate.access.effective module."""

from __future__ import annotations

import datetime
import typing as t

import pytest

from quizgate.access import merge_overrides
from quizgate.model import AccessOverride, AccessOverrideID, Assessment, AssessmentID, UserID

from .conftest import NOW

Build = t.Callable[..., t.Any]


def make_override(assessment: Assessment, **kwargs: t.Any) -> AccessOverride:
    return AccessOverride(
        override_id=AccessOverrideID(),
        assessment_id=assessment.assessment_id,
        user_id=UserID(),
        create_time=NOW,
        update_time=NOW,
        **kwargs,
    )


class TestMergeOverrides(object):
    def test_no_override(self, build_assessment: Build) -> None:
        assessment = build_assessment(max_attempts=1)
        assert merge_overrides(assessment) is assessment
        assert merge_overrides(assessment, None) is assessment

    def test_override_replaces_set_fields(self, build_assessment: Build) -> None:
        closes = NOW + datetime.timedelta(days=1)
        assessment = build_assessment(max_attempts=1, close_time=NOW, time_limit=datetime.timedelta(minutes=30))
        override = make_override(assessment, close_time=closes, time_limit=datetime.timedelta(minutes=45))

        effective = merge_overrides(assessment, override)

        assert effective.close_time == closes
        assert effective.time_limit == datetime.timedelta(minutes=45)
        assert effective.max_attempts == 1
        # the base record is left alone
        assert assessment.close_time == NOW
        assert assessment.time_limit == datetime.timedelta(minutes=30)

    def test_later_override_wins(self, build_assessment: Build) -> None:
        assessment = build_assessment(max_attempts=1)
        first = make_override(assessment, max_attempts=2, password="one")
        second = make_override(assessment, max_attempts=3)

        effective = merge_overrides(assessment, first, second)

        assert effective.max_attempts == 3
        assert effective.password == "one"

    def test_override_for_other_assessment(self, build_assessment: Build) -> None:
        assessment = build_assessment()
        other = build_assessment(assessment_id=AssessmentID())

        with pytest.raises(ValueError):
            merge_overrides(assessment, make_override(other, max_attempts=2))
