import decimal
import enum

from .base import FrozenModel, UTCDateTime, WithCtime
from .id import AssessmentID, AttemptID, UserID


class AttemptState(enum.Enum):
    InProgress = "in_progress"
    Finished = "finished"
    Abandoned = "abandoned"


class Attempt(FrozenModel, WithCtime):
    attempt_id: AttemptID
    assessment_id: AssessmentID
    user_id: UserID

    sequence: int
    state: AttemptState = AttemptState.InProgress
    start_time: UTCDateTime
    finish_time: UTCDateTime | None = None

    score: decimal.Decimal | None = None

    @property
    def is_finished(self) -> bool:
        return self.state == AttemptState.Finished
