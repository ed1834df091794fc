from __future__ import annotations

import datetime

from sqlalchemy import select

from quizgate.core import di
from quizgate.model import AssessmentID, UserID, ViewCompletion

from . import Session
from .table import view_completions


def get(
    assessment_id: AssessmentID, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]
) -> ViewCompletion | None:
    stmt = select(view_completions.__table__).where(
        view_completions.assessment_id == assessment_id, view_completions.user_id == user_id
    )
    row = session.execute(stmt).mappings().one_or_none()
    return ViewCompletion(**row) if row else None


def mark_viewed(
    assessment_id: AssessmentID,
    user_id: UserID,
    when: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> ViewCompletion:
    """Record that the user has viewed the assessment, counting repeat views."""
    stmt = select(view_completions).where(
        view_completions.assessment_id == assessment_id, view_completions.user_id == user_id
    )
    completion = session.execute(stmt).scalar_one_or_none()
    if completion is None:
        completion = view_completions(
            assessment_id=assessment_id,
            user_id=user_id,
            first_viewed=when,
            last_viewed=when,
        )
        session.add(completion)
    else:
        completion.last_viewed = when
        completion.view_count += 1
    session.flush()
    return get(assessment_id, user_id, session=session)  # type: ignore
