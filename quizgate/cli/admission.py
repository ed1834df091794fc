"""CLI commands for inspecting admission decisions."""

from __future__ import annotations

import datetime

from sqlalchemy.orm import Session

import quizgate.lib.cli as click
from quizgate.access import AccessManager, describe as describe_rules
from quizgate.access.service import view_assessment
from quizgate.core import di
from quizgate.core.provider import TimestampProvider
from quizgate.model import AccessContext, AssessmentID, Capabilities, UserID
from quizgate.storage import assessment as assessment_storage


@click.group("admission")
def admission():
    """Decide what a user may do with an assessment."""
    ...


@admission.command("evaluate")
@click.argument("assessment_id", type=click.KeyParamType(AssessmentID))
@click.argument("user_id", type=click.KeyParamType(UserID))
@click.option("--attempt/--no-attempt", "can_attempt", default=True, help="User may start and continue attempts")
@click.option("--preview/--no-preview", "can_preview", default=False, help="User may preview the assessment")
@click.option("--review/--no-review", "can_review_own", default=False, help="User may review their own attempts")
@click.option("--at", "at", type=click.DateTime(), default=None, help="Evaluate at this UTC time instead of now")
@click.option("--client-address", "-a", default=None, help="Address the request comes from")
@click.option("--password", "-p", default=None, help="Assessment password supplied by the user")
@click.option("--safe-browser", is_flag=True, default=False, help="Request comes from a secure browser")
@click.option("--ignore-time-limits", is_flag=True, default=False)
@click.option(
    "--completed",
    multiple=True,
    type=click.KeyParamType(AssessmentID),
    help="Assessments the user has completed, for prerequisites",
)
@di.inject
def evaluate(
    assessment_id: AssessmentID,
    user_id: UserID,
    can_attempt: bool,
    can_preview: bool,
    can_review_own: bool,
    at: datetime.datetime | None,
    client_address: str | None,
    password: str | None,
    safe_browser: bool,
    ignore_time_limits: bool,
    completed: tuple[AssessmentID, ...],
    session: Session = di.Manage["storage.persistent.session"],
) -> None:
    """Print the admission result for USER_ID on ASSESSMENT_ID as JSON."""
    with session.begin():
        result = view_assessment(
            assessment_id,
            user_id,
            Capabilities(can_attempt=can_attempt, can_preview=can_preview, can_review_own=can_review_own),
            client_address=client_address,
            password=password,
            safe_browser=safe_browser,
            ignore_time_limits=ignore_time_limits,
            completed=completed,
            now=at.replace(tzinfo=datetime.UTC) if at else None,
            session=session,
        )
    click.echo(result.model_dump_json(indent=2))


@admission.command("describe")
@click.argument("assessment_id", type=click.KeyParamType(AssessmentID))
@click.option(
    "--user", "-u", "user_id", type=click.KeyParamType(UserID), default=None, help="Apply this user's access override"
)
@di.inject
def describe(
    assessment_id: AssessmentID,
    user_id: UserID | None,
    session: Session = di.Manage["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Print the access rules of ASSESSMENT_ID, one per line."""
    with session.begin():
        assessment = assessment_storage.get(assessment_id, session=session)
        if assessment is None:
            raise click.ClickException(f"assessment {assessment_id} not found")
        if user_id is not None:
            assessment = assessment_storage.get_effective_access(assessment, user_id, session=session)

    context = AccessContext(user_id=user_id or UserID(), now=utcnow())
    for line in describe_rules(assessment, AccessManager(assessment, context)):
        click.echo(line)
