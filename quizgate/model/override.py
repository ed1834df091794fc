import decimal

from .base import FrozenModel, WithCtime
from .id import AssessmentID, GradeOverrideID, UserID


class GradeOverride(FrozenModel, WithCtime):
    """A gradebook entry recorded outside the attempt history.

    Only an entry with `is_overridden` set replaces the computed grade; the
    feedback text is shown either way.
    """

    override_id: GradeOverrideID
    assessment_id: AssessmentID
    user_id: UserID
    graded_by: UserID | None = None

    value: decimal.Decimal | None = None
    is_overridden: bool = False
    feedback: str | None = None
