import datetime
import decimal
import enum

from .base import FrozenModel, UTCDateTime, WithTimestamps
from .id import AccessOverrideID, AssessmentID, UserID


class GradingMethod(enum.Enum):
    Highest = "highest"
    Average = "average"
    First = "first"
    Last = "last"


class Assessment(FrozenModel, WithTimestamps):
    assessment_id: AssessmentID
    name: str

    max_attempts: int = 0
    grading_method: GradingMethod = GradingMethod.Highest
    total_score: decimal.Decimal = decimal.Decimal("10")
    decimal_points: int = 2
    pass_threshold: decimal.Decimal | None = None

    open_time: UTCDateTime | None = None
    close_time: UTCDateTime | None = None
    time_limit: datetime.timedelta | None = None
    attempt_delay: datetime.timedelta | None = None
    attempt_delay_after_second: datetime.timedelta | None = None

    password: str | None = None
    subnets: tuple[str, ...] = ()
    require_safe_browser: bool = False
    prerequisites: tuple[AssessmentID, ...] = ()

    question_count: int = 0

    @property
    def has_questions(self) -> bool:
        return self.question_count > 0


class AccessOverride(FrozenModel, WithTimestamps):
    """Per-user replacement values for an assessment's access settings.

    A field left as None keeps the assessment's own value.
    """

    override_id: AccessOverrideID
    assessment_id: AssessmentID
    user_id: UserID

    open_time: UTCDateTime | None = None
    close_time: UTCDateTime | None = None
    time_limit: datetime.timedelta | None = None
    max_attempts: int | None = None
    password: str | None = None

    @property
    def changes(self) -> dict[str, object]:
        return {k: v for k, v in self.model_dump(include=OVERRIDABLE).items() if v is not None}


OVERRIDABLE = frozenset({"open_time", "close_time", "time_limit", "max_attempts", "password"})
