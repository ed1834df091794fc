"""Pytest fixtures for quizgate tests.

Pure tests build models directly with the `build_*` factories. Storage tests
use `db_session`, bound to the Test environment's in-memory SQLite engine;
the schema is created before each test and dropped after it, so every test
starts from an empty database.

Usage:
    def test_something(db_session: Session, assessment_factory):
        assessment = assessment_factory(max_attempts=2)
        with db_session.begin():
            ...
"""

from __future__ import annotations

import datetime
import decimal
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from sqlalchemy.orm import Session

import quizgate
from quizgate.core import QuizgateContainer
from quizgate.model import AccessContext, Assessment, AssessmentID, Attempt, AttemptID, AttemptState, \
    DeploymentEnvironment, GradeOverride, GradeOverrideID, UserID
from quizgate.storage import assessment as assessment_storage
from quizgate.storage import attempt as attempt_storage
from quizgate.storage.table import metadata

NOW = datetime.datetime(2026, 3, 2, 10, 0, tzinfo=datetime.UTC)


@pytest.fixture(scope="session")
def container() -> t.Generator[QuizgateContainer]:
    """Boot the DI container once, in the Test environment."""
    ct = QuizgateContainer()
    root = Path(os.path.dirname(quizgate.__file__)).parent

    QuizgateContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()


@pytest.fixture
def now() -> datetime.datetime:
    return NOW


@pytest.fixture
def db_session(container: QuizgateContainer) -> t.Generator[Session]:
    """Provide a session on a freshly created schema.

    autobegin=False matches production, so tests open their own
    `with db_session.begin():` blocks.
    """
    engine = container.storage().persistent().engine()
    metadata.create_all(engine)

    session = Session(bind=engine, autobegin=False, expire_on_commit=False)

    yield session

    session.close()
    metadata.drop_all(engine)


# Model builders, no database involved


@pytest.fixture
def user_id() -> UserID:
    return UserID()


@pytest.fixture
def build_assessment() -> t.Callable[..., Assessment]:
    """Build an Assessment with one question and no restrictions unless told otherwise."""

    def build(**kwargs: t.Any) -> Assessment:
        fields: dict[str, t.Any] = {
            "assessment_id": AssessmentID(),
            "name": "Week 3 quiz",
            "question_count": 1,
            "create_time": NOW - datetime.timedelta(days=30),
            "update_time": NOW - datetime.timedelta(days=30),
        }
        fields.update(kwargs)
        return Assessment(**fields)

    return build


@pytest.fixture
def build_attempt(user_id: UserID) -> t.Callable[..., Attempt]:
    """Build an Attempt; a `score` makes it finished unless `state` says otherwise."""

    def build(
        assessment: Assessment, sequence: int, score: decimal.Decimal | int | str | None = None, **kwargs: t.Any
    ) -> Attempt:
        start = NOW - datetime.timedelta(days=10 - sequence)
        fields: dict[str, t.Any] = {
            "attempt_id": AttemptID(),
            "assessment_id": assessment.assessment_id,
            "user_id": user_id,
            "sequence": sequence,
            "start_time": start,
            "create_time": start,
        }
        if score is not None:
            fields.update(
                state=AttemptState.Finished,
                score=decimal.Decimal(score),
                finish_time=start + datetime.timedelta(minutes=20),
            )
        fields.update(kwargs)
        return Attempt(**fields)

    return build


@pytest.fixture
def build_override(user_id: UserID) -> t.Callable[..., GradeOverride]:
    def build(assessment: Assessment, **kwargs: t.Any) -> GradeOverride:
        fields: dict[str, t.Any] = {
            "override_id": GradeOverrideID(),
            "assessment_id": assessment.assessment_id,
            "user_id": user_id,
            "create_time": NOW,
        }
        fields.update(kwargs)
        return GradeOverride(**fields)

    return build


@pytest.fixture
def build_context(user_id: UserID) -> t.Callable[..., AccessContext]:
    def build(**kwargs: t.Any) -> AccessContext:
        fields: dict[str, t.Any] = {"user_id": user_id, "now": NOW}
        fields.update(kwargs)
        return AccessContext(**fields)

    return build


# Stored records


@pytest.fixture
def assessment_factory(db_session: Session) -> t.Callable[..., Assessment]:
    """Factory fixture for creating stored assessments."""

    def create_assessment(**kwargs: t.Any) -> Assessment:
        params: dict[str, t.Any] = {"name": "Week 3 quiz", "question_count": 5}
        params.update(kwargs)
        with db_session.begin():
            create = t.cast(assessment_storage.AssessmentCreateParams, params)
            return assessment_storage.create(create, session=db_session)

    return create_assessment


@pytest.fixture
def attempt_factory(db_session: Session, user_id: UserID) -> t.Callable[..., Attempt]:
    """Factory fixture for creating stored attempts, finished when given a score."""

    def create_attempt(
        assessment: Assessment,
        score: decimal.Decimal | int | str | None = None,
        user: UserID | None = None,
        **kwargs: t.Any,
    ) -> Attempt:
        params: dict[str, t.Any] = {
            "assessment_id": assessment.assessment_id,
            "user_id": user or user_id,
            "start_time": NOW - datetime.timedelta(days=1),
        }
        if score is not None:
            params.update(
                state=AttemptState.Finished,
                score=decimal.Decimal(score),
                finish_time=NOW - datetime.timedelta(hours=23),
            )
        params.update(kwargs)
        with db_session.begin():
            return attempt_storage.create(t.cast(attempt_storage.AttemptCreateParams, params), session=db_session)

    return create_attempt
