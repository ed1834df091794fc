import typing as t

from .base import FrozenModel, UTCDateTime, WithCtime
from .id import AssessmentID, AuditEventID, UserID


class AuditEvent(FrozenModel, WithCtime):
    event_id: AuditEventID
    assessment_id: AssessmentID
    user_id: UserID
    action: str
    detail: dict[str, t.Any] = {}


class ViewCompletion(FrozenModel):
    assessment_id: AssessmentID
    user_id: UserID
    first_viewed: UTCDateTime
    last_viewed: UTCDateTime
    view_count: int = 1
