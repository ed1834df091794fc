from __future__ import annotations

import datetime
import typing as t

from sqlalchemy import select

from quizgate.core import di
from quizgate.model import AccessOverride, AccessOverrideID, AssessmentID, UserID

from . import Session
from .table import access_overrides


def get(key: AccessOverrideID, session: Session = di.Provide["storage.persistent.session"]) -> AccessOverride | None:
    stmt = select(access_overrides.__table__).where(access_overrides.override_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return AccessOverride(**row) if row else None


def get_for_user(
    assessment_id: AssessmentID, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]
) -> AccessOverride | None:
    stmt = select(access_overrides.__table__).where(
        access_overrides.assessment_id == assessment_id, access_overrides.user_id == user_id
    )
    row = session.execute(stmt).mappings().one_or_none()
    return AccessOverride(**row) if row else None


def create(
    params: AccessOverrideCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> AccessOverride:
    override = access_overrides(
        override_id=AccessOverrideID(),
        assessment_id=params["assessment_id"],
        user_id=params["user_id"],
        open_time=params.get("open_time"),
        close_time=params.get("close_time"),
        time_limit=params.get("time_limit"),
        max_attempts=params.get("max_attempts"),
        password=params.get("password"),
    )
    session.add(override)
    session.flush()
    return get(override.override_id, session=session)  # type: ignore


class AccessOverrideCreateParams(t.TypedDict, total=False):
    assessment_id: t.Required[AssessmentID]
    user_id: t.Required[UserID]
    open_time: datetime.datetime | None
    close_time: datetime.datetime | None
    time_limit: datetime.timedelta | None
    max_attempts: int | None
    password: str | None
