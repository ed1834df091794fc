from __future__ import annotations

import typing as t

from sqlalchemy import select

from quizgate.core import di
from quizgate.model import AssessmentID, AuditEvent, AuditEventID, UserID

from . import Session
from .table import audit_events


def get(key: AuditEventID, session: Session = di.Provide["storage.persistent.session"]) -> AuditEvent | None:
    stmt = select(audit_events.__table__).where(audit_events.event_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return AuditEvent(**row) if row else None


def find(
    *,
    assessment_id: AssessmentID | None = None,
    user_id: UserID | None = None,
    action: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[AuditEvent, ...]:
    stmt = select(audit_events.__table__).order_by(audit_events.create_time)
    if assessment_id is not None:
        stmt = stmt.where(audit_events.assessment_id == assessment_id)
    if user_id is not None:
        stmt = stmt.where(audit_events.user_id == user_id)
    if action is not None:
        stmt = stmt.where(audit_events.action == action)
    rows = session.execute(stmt).mappings().all()
    return tuple(AuditEvent(**row) for row in rows)


def record(
    assessment_id: AssessmentID,
    user_id: UserID,
    action: str,
    detail: dict[str, t.Any] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> AuditEvent:
    event = audit_events(
        event_id=AuditEventID(),
        assessment_id=assessment_id,
        user_id=user_id,
        action=action,
        detail=detail or {},
    )
    session.add(event)
    session.flush()
    return get(event.event_id, session=session)  # type: ignore
