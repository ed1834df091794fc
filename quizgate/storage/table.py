import datetime
import decimal
import typing as t

from sqlalchemy import ForeignKey, func, Index, MetaData, text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import JSON, Numeric

from quizgate.model import AccessOverrideID, AssessmentID, AttemptID, AuditEventID, GradeOverrideID, UserID

from .type import ShortUUIDKeyType, UTCDateTime

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        AssessmentID: ShortUUIDKeyType(AssessmentID),
        AttemptID: ShortUUIDKeyType(AttemptID),
        AccessOverrideID: ShortUUIDKeyType(AccessOverrideID),
        GradeOverrideID: ShortUUIDKeyType(GradeOverrideID),
        AuditEventID: ShortUUIDKeyType(AuditEventID),
        datetime.datetime: UTCDateTime(),
        decimal.Decimal: Numeric(12, 5),
        list[str]: JSON,
        dict[str, t.Any]: JSON,
    }


# Assessments


class assessments(base):
    __tablename__ = "assessments"

    assessment_id: Mapped[AssessmentID] = mapped_column(primary_key=True)
    name: Mapped[str]

    max_attempts: Mapped[int] = mapped_column(default=0)
    grading_method: Mapped[str] = mapped_column(default="highest")
    total_score: Mapped[decimal.Decimal] = mapped_column(default=decimal.Decimal("10"))
    decimal_points: Mapped[int] = mapped_column(default=2)
    pass_threshold: Mapped[decimal.Decimal | None] = mapped_column(default=None)

    open_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    close_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    time_limit: Mapped[datetime.timedelta | None] = mapped_column(default=None)
    attempt_delay: Mapped[datetime.timedelta | None] = mapped_column(default=None)
    attempt_delay_after_second: Mapped[datetime.timedelta | None] = mapped_column(default=None)

    password: Mapped[str | None] = mapped_column(default=None)
    subnets: Mapped[list[str]] = mapped_column(default_factory=list)
    require_safe_browser: Mapped[bool] = mapped_column(default=False)
    prerequisites: Mapped[list[str]] = mapped_column(default_factory=list)

    question_count: Mapped[int] = mapped_column(default=0)

    create_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now(), onupdate=func.now())


class access_overrides(base):
    __tablename__ = "access_overrides"
    __table_args__ = (UniqueConstraint("assessment_id", "user_id"),)

    override_id: Mapped[AccessOverrideID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    user_id: Mapped[UserID]

    open_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    close_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    time_limit: Mapped[datetime.timedelta | None] = mapped_column(default=None)
    max_attempts: Mapped[int | None] = mapped_column(default=None)
    password: Mapped[str | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now(), onupdate=func.now())


# Attempts


class attempts(base):
    __tablename__ = "attempts"
    __table_args__ = (
        UniqueConstraint("assessment_id", "user_id", "sequence"),
        # at most one attempt in progress per user
        Index(
            "ix_attempts_one_in_progress",
            "assessment_id",
            "user_id",
            unique=True,
            postgresql_where=text("state = 'in_progress'"),
            sqlite_where=text("state = 'in_progress'"),
        ),
    )

    attempt_id: Mapped[AttemptID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    user_id: Mapped[UserID]
    sequence: Mapped[int]
    start_time: Mapped[datetime.datetime]

    state: Mapped[str] = mapped_column(default="in_progress")
    finish_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    score: Mapped[decimal.Decimal | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now())


# Gradebook


class grade_overrides(base):
    __tablename__ = "grade_overrides"

    override_id: Mapped[GradeOverrideID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    user_id: Mapped[UserID]
    graded_by: Mapped[UserID | None] = mapped_column(default=None)

    value: Mapped[decimal.Decimal | None] = mapped_column(default=None)
    is_overridden: Mapped[bool] = mapped_column(default=False)
    feedback: Mapped[str | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now())


# Completion & audit


class view_completions(base):
    __tablename__ = "view_completions"

    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"), primary_key=True)
    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    first_viewed: Mapped[datetime.datetime]
    last_viewed: Mapped[datetime.datetime]
    view_count: Mapped[int] = mapped_column(default=1)


class audit_events(base):
    __tablename__ = "audit_events"

    event_id: Mapped[AuditEventID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    user_id: Mapped[UserID]
    action: Mapped[str]
    detail: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)

    create_time: Mapped[datetime.datetime] = mapped_column(init=False, server_default=func.now())
