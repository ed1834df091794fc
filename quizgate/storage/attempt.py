from __future__ import annotations

import datetime
import decimal
import typing as t

from sqlalchemy import func, select

from quizgate.core import di
from quizgate.model import AssessmentID, Attempt, AttemptID, AttemptState, UserID

from . import Session
from .table import attempts


def get(key: AttemptID, session: Session = di.Provide["storage.persistent.session"]) -> Attempt | None:
    stmt = select(attempts.__table__).where(attempts.attempt_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Attempt(**row) if row else None


def find(
    *,
    assessment_id: AssessmentID | None = None,
    user_id: UserID | None = None,
    state: AttemptState | t.Collection[AttemptState] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Attempt, ...]:
    """Attempts matching every filter given, in sequence order."""
    stmt = select(attempts.__table__).order_by(attempts.user_id, attempts.sequence)
    if assessment_id is not None:
        stmt = stmt.where(attempts.assessment_id == assessment_id)
    if user_id is not None:
        stmt = stmt.where(attempts.user_id == user_id)
    if isinstance(state, AttemptState):
        stmt = stmt.where(attempts.state == state.value)
    elif state is not None:
        stmt = stmt.where(attempts.state.in_([s.value for s in state]))
    rows = session.execute(stmt).mappings().all()
    return tuple(Attempt(**row) for row in rows)


def next_sequence(
    assessment_id: AssessmentID, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]
) -> int:
    stmt = select(func.coalesce(func.max(attempts.sequence), 0)).where(
        attempts.assessment_id == assessment_id, attempts.user_id == user_id
    )
    return int(session.execute(stmt).scalar_one()) + 1


def create(params: AttemptCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Attempt:
    """Record a new attempt.

    The partial unique index on in-progress attempts makes a second concurrent
    attempt fail with an IntegrityError at flush.
    """
    sequence = params.get("sequence") or next_sequence(params["assessment_id"], params["user_id"], session=session)
    attempt = attempts(
        attempt_id=AttemptID(),
        assessment_id=params["assessment_id"],
        user_id=params["user_id"],
        sequence=sequence,
        start_time=params["start_time"],
        state=params.get("state", AttemptState.InProgress).value,
        finish_time=params.get("finish_time"),
        score=params.get("score"),
    )
    session.add(attempt)
    session.flush()
    return get(attempt.attempt_id, session=session)  # type: ignore


def update(
    key: AttemptID,
    params: AttemptUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Attempt | None:
    stmt = select(attempts).where(attempts.attempt_id == key)
    attempt = session.execute(stmt).scalar_one_or_none()
    if attempt is None:
        return None
    for field, value in params.items():
        if value is not None:
            setattr(attempt, field, value.value if isinstance(value, AttemptState) else value)
    session.flush()
    return get(key, session=session)


def finish(
    attempt_id: AttemptID,
    score: decimal.Decimal,
    finish_time: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> Attempt | None:
    """Move an in-progress attempt to Finished with its score.

    Returns None if the attempt does not exist.
    """
    attempt = get(attempt_id, session=session)
    if attempt is None:
        return None

    if attempt.state != AttemptState.InProgress:
        msg = f"Cannot finish attempt with state {attempt.state.value}"
        raise ValueError(msg)

    return update(
        attempt_id,
        {"state": AttemptState.Finished, "score": score, "finish_time": finish_time},
        session=session,
    )


class AttemptCreateParams(t.TypedDict, total=False):
    assessment_id: t.Required[AssessmentID]
    user_id: t.Required[UserID]
    start_time: t.Required[datetime.datetime]
    sequence: int
    state: AttemptState
    finish_time: datetime.datetime | None
    score: decimal.Decimal | None


class AttemptUpdateParams(t.TypedDict, total=False):
    state: AttemptState
    finish_time: datetime.datetime | None
    score: decimal.Decimal | None
