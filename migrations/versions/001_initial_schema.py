"""Initial schema for assessments, attempts and the gradebook

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy import text
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import JSON, Boolean, DateTime, Integer, Interval, Numeric, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Assessments
    op.create_table(
        "assessments",
        Column("assessment_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("max_attempts", Integer, server_default="0", nullable=False),
        Column("grading_method", String, server_default="highest", nullable=False),
        Column("total_score", Numeric(12, 5), server_default="10", nullable=False),
        Column("decimal_points", Integer, server_default="2", nullable=False),
        Column("pass_threshold", Numeric(12, 5), nullable=True),
        Column("open_time", DateTime(timezone=True), nullable=True),
        Column("close_time", DateTime(timezone=True), nullable=True),
        Column("time_limit", Interval, nullable=True),
        Column("attempt_delay", Interval, nullable=True),
        Column("attempt_delay_after_second", Interval, nullable=True),
        Column("password", String, nullable=True),
        Column("subnets", JSON, nullable=False),
        Column("require_safe_browser", Boolean, server_default="false", nullable=False),
        Column("prerequisites", JSON, nullable=False),
        Column("question_count", Integer, server_default="0", nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    op.create_table(
        "access_overrides",
        Column("override_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("user_id", String(22), nullable=False),
        Column("open_time", DateTime(timezone=True), nullable=True),
        Column("close_time", DateTime(timezone=True), nullable=True),
        Column("time_limit", Interval, nullable=True),
        Column("max_attempts", Integer, nullable=True),
        Column("password", String, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_unique_constraint(
        "uq_access_overrides_assessment_id_user_id", "access_overrides", ["assessment_id", "user_id"]
    )

    # Attempts
    op.create_table(
        "attempts",
        Column("attempt_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("user_id", String(22), nullable=False),
        Column("sequence", Integer, nullable=False),
        Column("start_time", DateTime(timezone=True), nullable=False),
        Column("state", String, server_default="in_progress", nullable=False),
        Column("finish_time", DateTime(timezone=True), nullable=True),
        Column("score", Numeric(12, 5), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_unique_constraint(
        "uq_attempts_assessment_id_user_id_sequence", "attempts", ["assessment_id", "user_id", "sequence"]
    )
    op.create_index(
        "ix_attempts_one_in_progress",
        "attempts",
        ["assessment_id", "user_id"],
        unique=True,
        postgresql_where=text("state = 'in_progress'"),
        sqlite_where=text("state = 'in_progress'"),
    )

    # Gradebook
    op.create_table(
        "grade_overrides",
        Column("override_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("user_id", String(22), nullable=False),
        Column("graded_by", String(22), nullable=True),
        Column("value", Numeric(12, 5), nullable=True),
        Column("is_overridden", Boolean, server_default="false", nullable=False),
        Column("feedback", Text, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_index("ix_grade_overrides_assessment_id_user_id", "grade_overrides", ["assessment_id", "user_id"])

    # Completion & audit
    op.create_table(
        "view_completions",
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), primary_key=True),
        Column("user_id", String(22), primary_key=True),
        Column("first_viewed", DateTime(timezone=True), nullable=False),
        Column("last_viewed", DateTime(timezone=True), nullable=False),
        Column("view_count", Integer, server_default="1", nullable=False),
    )

    op.create_table(
        "audit_events",
        Column("event_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("user_id", String(22), nullable=False),
        Column("action", String, nullable=False),
        Column("detail", JSON, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_index("ix_audit_events_assessment_id", "audit_events", ["assessment_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_assessment_id")
    op.drop_table("audit_events")
    op.drop_table("view_completions")
    op.drop_index("ix_grade_overrides_assessment_id_user_id")
    op.drop_table("grade_overrides")
    op.drop_index("ix_attempts_one_in_progress")
    op.drop_table("attempts")
    op.drop_table("access_overrides")
    op.drop_table("assessments")
