import decimal
import enum

import pydantic as p

from .base import BaseModel, FrozenModel, UTCDateTime
from .id import AssessmentID, UserID


class AdmissionAction(enum.Enum):
    NoButton = "no_button"
    Continue = "continue"
    ContinuePreview = "continue_preview"
    StartFirst = "start_first"
    Reattempt = "reattempt"
    Preview = "preview"


class Capabilities(FrozenModel):
    can_attempt: bool = False
    can_preview: bool = False
    can_review_own: bool = False

    @property
    def any(self) -> bool:
        return self.can_attempt or self.can_preview or self.can_review_own


class AccessContext(FrozenModel):
    """Everything about the request that admission rules may read.

    Built once per evaluation; rules never look anywhere else for the user,
    the clock or the client.
    """

    user_id: UserID
    now: UTCDateTime
    ignore_time_limits: bool = False

    client_address: str | None = None
    safe_browser: bool = False
    password: str | None = None
    completed: frozenset[AssessmentID] = frozenset()


class GradeRecord(FrozenModel):
    value: decimal.Decimal | None = None
    overridden: bool = False
    feedback: str | None = None
    passed: bool | None = None


class AdmissionResult(BaseModel):
    assessment_id: AssessmentID
    user_id: UserID

    action: AdmissionAction
    blocking_messages: list[str] = []
    info_messages: list[str] = []
    grade: GradeRecord = GradeRecord()

    attempt_count: int = 0
    has_unfinished: bool = False
    more_attempts: bool = True
    # false when the user holds none of the capabilities
    enrolled: bool = True
    warnings: list[str] = []

    @p.field_serializer("grade", when_used="json")
    def serialize_grade(self, grade: GradeRecord) -> dict[str, object]:
        return {
            "value": None if grade.value is None else float(grade.value),
            "overridden": grade.overridden,
            "feedback": grade.feedback,
            "passed": grade.passed,
        }
