"""Tests for quizgate.storage.attempt module."""

from __future__ import annotations

import datetime
import decimal
import typing as t

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizgate.model import Assessment, Attempt, AttemptID, AttemptState, UserID
from quizgate.storage import attempt as attempt_storage

from ..conftest import NOW


class TestGet(object):
    """Tests for attempt_storage.get()."""

    def test_get_by_attempt_id(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        """get() with attempt_id returns the attempt."""
        attempt = attempt_factory(assessment_factory())

        with db_session.begin():
            result = attempt_storage.get(attempt.attempt_id, session=db_session)

        assert result is not None
        assert result.attempt_id == attempt.attempt_id

    def test_get_nonexistent_returns_none(self, db_session: Session) -> None:
        """get() returns None for nonexistent attempt ID."""
        with db_session.begin():
            result = attempt_storage.get(AttemptID(), session=db_session)

        assert result is None


class TestFind(object):
    """Tests for attempt_storage.find()."""

    def test_find_by_assessment_and_user(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
        user_id: UserID,
    ) -> None:
        assessment, other = assessment_factory(), assessment_factory()
        mine = attempt_factory(assessment, 5)
        attempt_factory(assessment, 6, user=UserID())
        attempt_factory(other, 7)

        with db_session.begin():
            result = attempt_storage.find(assessment_id=assessment.assessment_id, user_id=user_id, session=db_session)

        assert result == (mine,)

    def test_find_by_state(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        assessment = assessment_factory()
        finished = attempt_factory(assessment, 5)
        abandoned = attempt_factory(assessment, state=AttemptState.Abandoned)
        in_progress = attempt_factory(assessment)

        with db_session.begin():
            only_finished = attempt_storage.find(state=AttemptState.Finished, session=db_session)
            live = attempt_storage.find(
                state=(AttemptState.Finished, AttemptState.InProgress), session=db_session
            )

        assert only_finished == (finished,)
        assert {a.attempt_id for a in live} == {finished.attempt_id, in_progress.attempt_id}
        assert abandoned.attempt_id not in {a.attempt_id for a in live}

    def test_find_orders_by_sequence(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        assessment = assessment_factory()
        third = attempt_factory(assessment, 3, sequence=3)
        first = attempt_factory(assessment, 1, sequence=1)
        second = attempt_factory(assessment, 2, sequence=2)

        with db_session.begin():
            result = attempt_storage.find(assessment_id=assessment.assessment_id, session=db_session)

        assert [a.attempt_id for a in result] == [first.attempt_id, second.attempt_id, third.attempt_id]


class TestCreate(object):
    """Tests for attempt_storage.create()."""

    def test_sequence_is_numbered_per_user(
        self,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        assessment = assessment_factory()

        first = attempt_factory(assessment, 4)
        second = attempt_factory(assessment, 6)
        someone_else = attempt_factory(assessment, 8, user=UserID())

        assert (first.sequence, second.sequence) == (1, 2)
        assert someone_else.sequence == 1

    def test_create_in_progress(
        self, db_session: Session, assessment_factory: t.Callable[..., Assessment], user_id: UserID
    ) -> None:
        assessment = assessment_factory()

        with db_session.begin():
            attempt = attempt_storage.create(
                {"assessment_id": assessment.assessment_id, "user_id": user_id, "start_time": NOW},
                session=db_session,
            )

        assert attempt.state is AttemptState.InProgress
        assert attempt.start_time == NOW
        assert attempt.finish_time is None
        assert attempt.score is None
        assert not attempt.is_finished

    def test_second_in_progress_attempt_is_refused(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
        user_id: UserID,
    ) -> None:
        """At most one attempt per user may be in progress."""
        assessment = assessment_factory()
        attempt_factory(assessment)

        with pytest.raises(IntegrityError):
            with db_session.begin():
                attempt_storage.create(
                    {"assessment_id": assessment.assessment_id, "user_id": user_id, "start_time": NOW},
                    session=db_session,
                )

    def test_in_progress_allowed_beside_finished(
        self,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        assessment = assessment_factory()
        attempt_factory(assessment, 5)
        attempt_factory(assessment, state=AttemptState.Abandoned)

        attempt = attempt_factory(assessment)

        assert attempt.sequence == 3

    def test_naive_datetime_is_refused(
        self, db_session: Session, assessment_factory: t.Callable[..., Assessment], user_id: UserID
    ) -> None:
        assessment = assessment_factory()

        with pytest.raises(Exception, match="naive datetime"):
            with db_session.begin():
                attempt_storage.create(
                    {
                        "assessment_id": assessment.assessment_id,
                        "user_id": user_id,
                        "start_time": datetime.datetime(2026, 3, 2, 10, 0),
                    },
                    session=db_session,
                )


class TestFinish(object):
    """Tests for attempt_storage.finish()."""

    def test_finish(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        attempt = attempt_factory(assessment_factory())

        with db_session.begin():
            result = attempt_storage.finish(attempt.attempt_id, decimal.Decimal("7.25"), NOW, session=db_session)

        assert result is not None
        assert result.state is AttemptState.Finished
        assert result.score == decimal.Decimal("7.25")
        assert result.finish_time == NOW
        assert result.is_finished

    def test_finish_twice(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        attempt = attempt_factory(assessment_factory(), 5)

        with pytest.raises(ValueError, match="Cannot finish attempt with state finished"):
            with db_session.begin():
                attempt_storage.finish(attempt.attempt_id, decimal.Decimal("9"), NOW, session=db_session)

    def test_finish_nonexistent(self, db_session: Session) -> None:
        with db_session.begin():
            assert attempt_storage.finish(AttemptID(), decimal.Decimal("1"), NOW, session=db_session) is None

    def test_finished_attempt_frees_the_in_progress_slot(
        self,
        db_session: Session,
        assessment_factory: t.Callable[..., Assessment],
        attempt_factory: t.Callable[..., Attempt],
    ) -> None:
        assessment = assessment_factory()
        attempt = attempt_factory(assessment)
        with db_session.begin():
            attempt_storage.finish(attempt.attempt_id, decimal.Decimal("3"), NOW, session=db_session)

        following = attempt_factory(assessment)

        assert following.sequence == 2
        assert following.state is AttemptState.InProgress
