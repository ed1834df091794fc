"""What a user can do with an assessment right now.

`decide` is the transition function: it picks a tentative action from the
user's attempt state and capabilities, then re-checks it against the attempt
limit and the access rules. The two checks fail differently. Running out of
attempts removes the action silently, while an access rule (a closed window,
a missing password) removes it and says why.
"""

from __future__ import annotations

import datetime
import logging
import typing as t

from quizgate.model import AccessContext, AdmissionAction, AdmissionResult, Assessment, AssessmentID, Attempt, \
    Capabilities, GradeOverride, UserID

from .grading import aggregate_grade, GRADING_METHOD_NAMES
from .history import AttemptHistory, InvariantPolicy, resolve_history
from .manager import AccessManager

logger = logging.getLogger(__name__)


class Decision(t.NamedTuple):
    action: AdmissionAction
    blocking_messages: list[str]
    more_attempts: bool


def _tentative(
    history: AttemptHistory, capabilities: Capabilities, manager: AccessManager
) -> tuple[AdmissionAction, list[str]]:
    if history.has_unfinished:
        if capabilities.can_attempt:
            return AdmissionAction.Continue, []
        if capabilities.can_preview:
            return AdmissionAction.ContinuePreview, []
        return AdmissionAction.NoButton, []

    if capabilities.can_attempt:
        vetoes = manager.prevent_new_attempt(history.attempt_count, history.last_finished)
        if vetoes:
            return AdmissionAction.NoButton, vetoes
        if history.attempt_count == 0:
            return AdmissionAction.StartFirst, []
        return AdmissionAction.Reattempt, []

    if capabilities.can_preview:
        return AdmissionAction.Preview, []
    return AdmissionAction.NoButton, []


def decide(
    assessment: Assessment, history: AttemptHistory, capabilities: Capabilities, manager: AccessManager
) -> Decision:
    more_attempts = history.has_unfinished or not manager.is_finished(history.attempt_count, history.last_finished)

    if not assessment.has_questions:
        return Decision(AdmissionAction.NoButton, [], more_attempts)

    action, blocking = _tentative(history, capabilities, manager)
    if action is AdmissionAction.NoButton:
        return Decision(action, blocking, more_attempts)

    if not more_attempts:
        return Decision(AdmissionAction.NoButton, [], more_attempts)
    if capabilities.can_attempt:
        blocking = manager.prevent_access()
        if blocking:
            return Decision(AdmissionAction.NoButton, blocking, more_attempts)
    return Decision(action, [], more_attempts)


def describe(assessment: Assessment, manager: AccessManager) -> list[str]:
    messages = manager.describe_rules()
    if assessment.max_attempts != 1:
        messages.append(f"Grading method: {GRADING_METHOD_NAMES[assessment.grading_method]}")
    return messages


def evaluate(
    assessment: Assessment,
    user_id: UserID,
    now: datetime.datetime,
    capabilities: Capabilities,
    *,
    attempts: t.Iterable[Attempt] = (),
    override: GradeOverride | None = None,
    ignore_time_limits: bool = False,
    client_address: str | None = None,
    safe_browser: bool = False,
    password: str | None = None,
    completed: t.Iterable[AssessmentID] = (),
    invariant_policy: InvariantPolicy = "warn",
) -> AdmissionResult:
    """Decide what `user_id` may do with `assessment` at `now`.

    `attempts` are the user's attempts on this assessment in any state, and
    `override` is their gradebook entry, if one exists. Everything is already
    loaded; nothing here touches storage.

    Raises ConfigurationError if the assessment's settings are malformed, and
    InvariantViolation only when `invariant_policy` is "raise".
    """
    context = AccessContext(
        user_id=user_id,
        now=now,
        ignore_time_limits=ignore_time_limits,
        client_address=client_address,
        safe_browser=safe_browser,
        password=password,
        completed=frozenset(completed),
    )
    manager = AccessManager(assessment, context)

    mine = [a for a in attempts if a.user_id == user_id and a.assessment_id == assessment.assessment_id]
    history = resolve_history(mine, policy=invariant_policy)
    decision = decide(assessment, history, capabilities, manager)
    grade = aggregate_grade(
        history.finished,
        assessment.grading_method,
        override,
        decimal_points=assessment.decimal_points,
        pass_threshold=assessment.pass_threshold,
        total_score=assessment.total_score,
    )

    logger.debug(
        "evaluated admission",
        extra={
            "assessment_id": str(assessment.assessment_id),
            "user_id": str(user_id),
            "action": decision.action.value,
            "attempt_count": history.attempt_count,
            "blocked": bool(decision.blocking_messages),
        },
    )

    return AdmissionResult(
        assessment_id=assessment.assessment_id,
        user_id=user_id,
        action=decision.action,
        blocking_messages=decision.blocking_messages,
        info_messages=describe(assessment, manager),
        grade=grade,
        attempt_count=history.attempt_count,
        has_unfinished=history.has_unfinished,
        more_attempts=decision.more_attempts,
        enrolled=capabilities.any,
        warnings=list(history.warnings),
    )
