"""Exceptions raised by the admission engine."""

from __future__ import annotations

from quizgate.model import AssessmentID, AttemptID, UserID


class AccessError(Exception):
    """Error while deciding what a user may do with an assessment."""

    pass


class ConfigurationError(AccessError, ValueError):
    """An assessment's settings cannot be turned into admission rules."""

    def __init__(self, assessment_id: AssessmentID, message: str):
        super().__init__(f"{assessment_id}: {message}")
        self.assessment_id = assessment_id


class InvariantViolation(AccessError):
    """More than one in-progress attempt exists for a single user."""

    def __init__(self, assessment_id: AssessmentID, user_id: UserID, attempt_ids: tuple[AttemptID, ...]):
        ids = ", ".join(str(a) for a in attempt_ids)
        super().__init__(f"user {user_id} has {len(attempt_ids)} in-progress attempts on {assessment_id}: {ids}")
        self.assessment_id = assessment_id
        self.user_id = user_id
        self.attempt_ids = attempt_ids


class DataUnavailable(AccessError):
    """A collaborator could not supply the assessment, attempts or grade."""

    pass
