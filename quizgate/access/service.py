"""Admission as seen from a request: load, decide, record the view."""

from __future__ import annotations

import datetime
import logging
import typing as t

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizgate.core import di
from quizgate.core.config import AccessSettings
from quizgate.core.provider import TimestampProvider
from quizgate.model import AdmissionResult, AssessmentID, Capabilities, UserID
from quizgate.storage import assessment as assessment_storage
from quizgate.storage import attempt as attempt_storage
from quizgate.storage import audit as audit_storage
from quizgate.storage import completion as completion_storage
from quizgate.storage import override as override_storage

from .decision import evaluate
from .errors import DataUnavailable

logger = logging.getLogger(__name__)


@di.inject
def view_assessment(
    assessment_id: AssessmentID,
    user_id: UserID,
    capabilities: Capabilities,
    *,
    client_address: str | None = None,
    password: str | None = None,
    safe_browser: bool = False,
    ignore_time_limits: bool = False,
    completed: t.Iterable[AssessmentID] = (),
    now: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    settings: AccessSettings = di.Provide["access"],
) -> AdmissionResult:
    """Evaluate admission for one user viewing one assessment.

    The caller owns the transaction. The view is marked on the user's
    completion record and written to the audit log when the access settings
    ask for it; each runs in its own savepoint, and a failure there is logged
    and rolled back without touching the result or the caller's transaction.

    Raises DataUnavailable if the assessment does not exist or cannot be loaded.
    """
    now = now or utcnow()
    try:
        assessment = assessment_storage.get(assessment_id, session=session)
        if assessment is None:
            raise DataUnavailable(f"assessment {assessment_id} does not exist")
        effective = assessment_storage.get_effective_access(assessment, user_id, session=session)
        attempts = attempt_storage.find(assessment_id=assessment_id, user_id=user_id, session=session)
        override = override_storage.get_for_user(assessment_id, user_id, session=session)
    except SQLAlchemyError as ex:
        raise DataUnavailable(f"could not load admission data for {assessment_id}") from ex

    result = evaluate(
        effective,
        user_id,
        now,
        capabilities,
        attempts=attempts,
        override=override,
        ignore_time_limits=ignore_time_limits,
        client_address=client_address,
        safe_browser=safe_browser,
        password=password,
        completed=completed,
        invariant_policy=settings.invariant_policy,
    )

    where = {"assessment_id": str(assessment_id), "user_id": str(user_id)}
    if settings.mark_viewed:
        try:
            with session.begin_nested():
                completion_storage.mark_viewed(assessment_id, user_id, now, session=session)
        except SQLAlchemyError as ex:
            logger.warning("could not mark view", extra={**where, "error": str(ex)})
    if settings.audit:
        try:
            with session.begin_nested():
                audit_storage.record(
                    assessment_id,
                    user_id,
                    "view",
                    {
                        "action": result.action.value,
                        "attempt_count": result.attempt_count,
                        "blocking_messages": result.blocking_messages,
                    },
                    session=session,
                )
        except SQLAlchemyError as ex:
            logger.warning("could not audit view", extra={**where, "error": str(ex)})

    logger.info("assessment viewed", extra={**where, "action": result.action.value})
    return result
