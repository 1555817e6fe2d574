# backend/alembic/versions/001_tutoring_core.py
"""Tutoring core: users, tutors, subjects, availability, sessions, notifications

Revision ID: 001_tutoring_core
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_tutoring_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _create_extension_prefer_extensions_schema(extension_name: str) -> None:
    """Create extension using extensions schema when available."""

    bind = op.get_bind()
    if bind is None or bind.dialect.name != "postgresql":
        return

    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_extension WHERE extname = '{extension_name}') THEN
                IF EXISTS (SELECT 1 FROM pg_namespace WHERE nspname = 'extensions') THEN
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name} WITH SCHEMA extensions';
                ELSE
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name}';
                END IF;
            END IF;
        END
        $$;
        """
    )


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind is not None and bind.dialect.name == "postgresql"

    op.create_table(
        "users",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'tutor', 'student')", name="ck_users_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "tutor_profiles",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(26),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("hourly_rate_cents", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "hourly_rate_cents IS NULL OR hourly_rate_cents >= 0",
            name="ck_tutor_profiles_rate_non_negative",
        ),
    )
    op.create_index("ix_tutor_profiles_id", "tutor_profiles", ["id"])

    op.create_table(
        "tutor_subjects",
        sa.Column(
            "tutor_id",
            sa.String(26),
            sa.ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "subject_id",
            sa.String(26),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "availability_windows",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "tutor_id",
            sa.String(26),
            sa.ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weekday", sa.Integer(), nullable=True),
        sa.Column("specific_date", sa.Date(), nullable=True),
        sa.Column("start_minute", sa.Integer(), nullable=False),
        sa.Column("end_minute", sa.Integer(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "(weekday IS NULL) <> (specific_date IS NULL)",
            name="ck_availability_weekday_xor_date",
        ),
        sa.CheckConstraint(
            "weekday IS NULL OR (weekday >= 0 AND weekday <= 6)",
            name="ck_availability_weekday_range",
        ),
        sa.CheckConstraint(
            "start_minute >= 0 AND end_minute <= 1440 AND start_minute < end_minute",
            name="ck_availability_minutes",
        ),
    )
    op.create_index(
        "ix_availability_tutor_weekday", "availability_windows", ["tutor_id", "weekday"]
    )
    op.create_index(
        "ix_availability_tutor_date", "availability_windows", ["tutor_id", "specific_date"]
    )

    op.create_table(
        "tutoring_sessions",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("student_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("tutor_id", sa.String(26), sa.ForeignKey("tutor_profiles.id"), nullable=False),
        sa.Column("subject_id", sa.String(26), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("meeting_link", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'scheduled', 'in_progress', 'completed', 'cancelled')",
            name="ck_tutoring_sessions_status",
        ),
        sa.CheckConstraint("duration_minutes > 0", name="check_duration_positive"),
        sa.CheckConstraint("price_cents >= 0", name="check_price_non_negative"),
        sa.CheckConstraint("scheduled_at < ends_at", name="check_interval_order"),
    )
    op.create_index("ix_tutoring_sessions_id", "tutoring_sessions", ["id"])
    op.create_index("ix_tutoring_sessions_student_id", "tutoring_sessions", ["student_id"])
    op.create_index("ix_tutoring_sessions_status", "tutoring_sessions", ["status"])
    op.create_index(
        "ix_tutoring_sessions_tutor_window",
        "tutoring_sessions",
        ["tutor_id", "scheduled_at", "ends_at"],
    )

    if is_postgres:
        _create_extension_prefer_extensions_schema("btree_gist")
        # At most one blocking session per tutor and instant
        op.execute(
            """
            ALTER TABLE tutoring_sessions
              ADD CONSTRAINT tutoring_sessions_no_overlap_per_tutor
              EXCLUDE USING gist (
                tutor_id WITH =,
                tstzrange(scheduled_at, ends_at, '[)') WITH &&
              )
              WHERE (status IN ('pending', 'scheduled', 'in_progress'))
            """
        )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(26),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("session_id", sa.String(26), sa.ForeignKey("tutoring_sessions.id"), nullable=True),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_unread", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        op.execute(
            "ALTER TABLE tutoring_sessions DROP CONSTRAINT IF EXISTS tutoring_sessions_no_overlap_per_tutor"
        )

    op.drop_index("ix_notifications_user_unread", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_tutoring_sessions_tutor_window", table_name="tutoring_sessions")
    op.drop_index("ix_tutoring_sessions_status", table_name="tutoring_sessions")
    op.drop_index("ix_tutoring_sessions_student_id", table_name="tutoring_sessions")
    op.drop_index("ix_tutoring_sessions_id", table_name="tutoring_sessions")
    op.drop_table("tutoring_sessions")
    op.drop_index("ix_availability_tutor_date", table_name="availability_windows")
    op.drop_index("ix_availability_tutor_weekday", table_name="availability_windows")
    op.drop_table("availability_windows")
    op.drop_table("tutor_subjects")
    op.drop_index("ix_tutor_profiles_id", table_name="tutor_profiles")
    op.drop_table("tutor_profiles")
    op.drop_table("subjects")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
