from __future__ import annotations

import decimal
import typing as t

from sqlalchemy import select

from quizgate.core import di
from quizgate.model import AssessmentID, GradeOverride, GradeOverrideID, UserID

from . import Session
from .table import grade_overrides


def get(key: GradeOverrideID, session: Session = di.Provide["storage.persistent.session"]) -> GradeOverride | None:
    stmt = select(grade_overrides.__table__).where(grade_overrides.override_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return GradeOverride(**row) if row else None


def get_for_user(
    assessment_id: AssessmentID, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]
) -> GradeOverride | None:
    """The user's most recent gradebook entry for the assessment."""
    stmt = (
        select(grade_overrides.__table__)
        .where(grade_overrides.assessment_id == assessment_id, grade_overrides.user_id == user_id)
        .order_by(grade_overrides.create_time.desc(), grade_overrides.override_id.desc())
        .limit(1)
    )
    row = session.execute(stmt).mappings().one_or_none()
    return GradeOverride(**row) if row else None


def create(
    params: GradeOverrideCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> GradeOverride:
    override = grade_overrides(
        override_id=GradeOverrideID(),
        assessment_id=params["assessment_id"],
        user_id=params["user_id"],
        graded_by=params.get("graded_by"),
        value=params.get("value"),
        is_overridden=params.get("is_overridden", False),
        feedback=params.get("feedback"),
    )
    session.add(override)
    session.flush()
    return get(override.override_id, session=session)  # type: ignore


class GradeOverrideCreateParams(t.TypedDict, total=False):
    assessment_id: t.Required[AssessmentID]
    user_id: t.Required[UserID]
    graded_by: UserID | None
    value: decimal.Decimal | None
    is_overridden: bool
    feedback: str | None
