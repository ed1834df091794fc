from __future__ import annotations

import datetime
import decimal
import typing as t

from sqlalchemy import select

from quizgate.access.effective import merge_overrides
from quizgate.core import di
from quizgate.model import Assessment, AssessmentID, GradingMethod, UserID

from . import access_override as access_override_storage
from . import Session
from .table import assessments


def get(key: AssessmentID, session: Session = di.Provide["storage.persistent.session"]) -> Assessment | None:
    stmt = select(assessments.__table__).where(assessments.assessment_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Assessment(**row) if row else None


def get_effective_access(
    assessment: Assessment, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]
) -> Assessment:
    """Return `assessment` with `user_id`'s access override, if any, applied."""
    override = access_override_storage.get_for_user(assessment.assessment_id, user_id, session=session)
    return merge_overrides(assessment, override)


def create(params: AssessmentCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Assessment:
    assessment = assessments(
        assessment_id=AssessmentID(),
        name=params["name"],
        max_attempts=params.get("max_attempts", 0),
        grading_method=params.get("grading_method", GradingMethod.Highest).value,
        total_score=params.get("total_score", decimal.Decimal("10")),
        decimal_points=params.get("decimal_points", 2),
        pass_threshold=params.get("pass_threshold"),
        open_time=params.get("open_time"),
        close_time=params.get("close_time"),
        time_limit=params.get("time_limit"),
        attempt_delay=params.get("attempt_delay"),
        attempt_delay_after_second=params.get("attempt_delay_after_second"),
        password=params.get("password"),
        subnets=list(params.get("subnets", ())),
        require_safe_browser=params.get("require_safe_browser", False),
        prerequisites=[str(a) for a in params.get("prerequisites", ())],
        question_count=params.get("question_count", 0),
    )
    session.add(assessment)
    session.flush()
    return get(assessment.assessment_id, session=session)  # type: ignore


class AssessmentCreateParams(t.TypedDict, total=False):
    name: t.Required[str]
    max_attempts: int
    grading_method: GradingMethod
    total_score: decimal.Decimal
    decimal_points: int
    pass_threshold: decimal.Decimal | None
    open_time: datetime.datetime | None
    close_time: datetime.datetime | None
    time_limit: datetime.timedelta | None
    attempt_delay: datetime.timedelta | None
    attempt_delay_after_second: datetime.timedelta | None
    password: str | None
    subnets: t.Sequence[str]
    require_safe_browser: bool
    prerequisites: t.Sequence[AssessmentID]
    question_count: int
