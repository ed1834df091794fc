"""Tests for quizgate.storage.assessment module."""

from __future__ import annotations

import datetime
import decimal
import typing as t

from sqlalchemy.orm import Session

from quizgate.model import Assessment, AssessmentID, GradingMethod, UserID
from quizgate.storage import access_override as access_override_storage
from quizgate.storage import assessment as assessment_storage

from ..conftest import NOW


class TestCreate(object):
    """Tests for assessment_storage.create()."""

    def test_create_with_defaults(self, db_session: Session) -> None:
        with db_session.begin():
            assessment = assessment_storage.create({"name": "Midterm"}, session=db_session)

        assert assessment.name == "Midterm"
        assert assessment.max_attempts == 0
        assert assessment.grading_method is GradingMethod.Highest
        assert assessment.total_score == decimal.Decimal("10")
        assert assessment.subnets == ()
        assert not assessment.has_questions
        assert assessment.create_time is not None
        assert assessment.create_time.tzinfo is not None

    def test_create_round_trips_settings(self, db_session: Session) -> None:
        """Every access setting comes back as it went in."""
        prerequisite = AssessmentID()
        with db_session.begin():
            assessment = assessment_storage.create(
                {
                    "name": "Final",
                    "max_attempts": 2,
                    "grading_method": GradingMethod.Average,
                    "decimal_points": 1,
                    "pass_threshold": decimal.Decimal("5.5"),
                    "open_time": NOW,
                    "close_time": NOW + datetime.timedelta(days=7),
                    "time_limit": datetime.timedelta(minutes=45),
                    "attempt_delay": datetime.timedelta(hours=1),
                    "password": "pw",
                    "subnets": ["10.0.0.0/8"],
                    "require_safe_browser": True,
                    "prerequisites": [prerequisite],
                    "question_count": 12,
                },
                session=db_session,
            )

        assert assessment.grading_method is GradingMethod.Average
        assert assessment.pass_threshold == decimal.Decimal("5.5")
        assert assessment.open_time == NOW
        assert assessment.close_time == NOW + datetime.timedelta(days=7)
        assert assessment.time_limit == datetime.timedelta(minutes=45)
        assert assessment.attempt_delay == datetime.timedelta(hours=1)
        assert assessment.attempt_delay_after_second is None
        assert assessment.subnets == ("10.0.0.0/8",)
        assert assessment.prerequisites == (prerequisite,)
        assert assessment.require_safe_browser
        assert assessment.question_count == 12


class TestGet(object):
    """Tests for assessment_storage.get()."""

    def test_get(self, db_session: Session, assessment_factory: t.Callable[..., Assessment]) -> None:
        assessment = assessment_factory()

        with db_session.begin():
            result = assessment_storage.get(assessment.assessment_id, session=db_session)

        assert result == assessment

    def test_get_nonexistent_returns_none(self, db_session: Session) -> None:
        with db_session.begin():
            assert assessment_storage.get(AssessmentID(), session=db_session) is None


class TestGetEffectiveAccess(object):
    """Tests for assessment_storage.get_effective_access()."""

    def test_without_override(
        self, db_session: Session, assessment_factory: t.Callable[..., Assessment], user_id: UserID
    ) -> None:
        assessment = assessment_factory(max_attempts=1)

        with db_session.begin():
            effective = assessment_storage.get_effective_access(assessment, user_id, session=db_session)

        assert effective == assessment

    def test_applies_only_that_users_override(
        self, db_session: Session, assessment_factory: t.Callable[..., Assessment], user_id: UserID
    ) -> None:
        assessment = assessment_factory(max_attempts=1, time_limit=datetime.timedelta(minutes=30))
        with db_session.begin():
            access_override_storage.create(
                {
                    "assessment_id": assessment.assessment_id,
                    "user_id": user_id,
                    "max_attempts": 3,
                    "time_limit": datetime.timedelta(minutes=60),
                },
                session=db_session,
            )

        with db_session.begin():
            mine = assessment_storage.get_effective_access(assessment, user_id, session=db_session)
            theirs = assessment_storage.get_effective_access(assessment, UserID(), session=db_session)

        assert mine.max_attempts == 3
        assert mine.time_limit == datetime.timedelta(minutes=60)
        assert theirs.max_attempts == 1
        assert theirs.time_limit == datetime.timedelta(minutes=30)
