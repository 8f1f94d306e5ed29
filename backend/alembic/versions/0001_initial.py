"""Initial team docs schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


member_role_enum = sa.Enum("developer", "trainee", "lead", name="member_role")
assignment_category_enum = sa.Enum("core-java", "backend", "frontend", name="assignment_category")
assignment_status_enum = sa.Enum("pending", "in-progress", "review", "completed", name="assignment_status")
assignment_priority_enum = sa.Enum("low", "medium", "high", name="assignment_priority")
activity_type_enum = sa.Enum(
    "assignment_created",
    "assignment_updated",
    "status_changed",
    "member_added",
    "member_updated",
    name="activity_type",
)

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    return columns


def upgrade() -> None:
    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", member_role_enum, nullable=False),
        sa.Column("skills", json_type, nullable=False),
        sa.Column("assigned_topics", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_topics", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("join_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("profile_image", sa.String(length=500), nullable=True),
        sa.Column("github_username", sa.String(length=100), nullable=True),
        sa.Column("last_login_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_team_members"),
    )
    op.create_index("ix_team_members_id", "team_members", ["id"], unique=False)
    op.create_index("ix_team_members_name", "team_members", ["name"], unique=False)
    op.create_index("ix_team_members_email", "team_members", ["email"], unique=True)
    op.create_index("ix_team_members_role", "team_members", ["role"], unique=False)
    op.create_index("ix_team_members_is_active", "team_members", ["is_active"], unique=False)

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("topic", sa.String(length=255), nullable=False),
        sa.Column("category", assignment_category_enum, nullable=False),
        sa.Column("assignee", sa.String(length=255), nullable=False),
        sa.Column("assignee_id", sa.Integer(), nullable=False),
        sa.Column("status", assignment_status_enum, nullable=False),
        sa.Column("priority", assignment_priority_enum, nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewers", json_type, nullable=False),
        sa.Column("tags", json_type, nullable=False),
        sa.Column("documentation_url", sa.String(length=500), nullable=True),
        sa.Column("github_pr_url", sa.String(length=500), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["assignee_id"],
            ["team_members.id"],
            name="fk_assignments_assignee_id_team_members",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_assignments"),
    )
    op.create_index("ix_assignments_id", "assignments", ["id"], unique=False)
    op.create_index("ix_assignments_status", "assignments", ["status"], unique=False)
    op.create_index("ix_assignments_is_deleted", "assignments", ["is_deleted"], unique=False)
    op.create_index("ix_assignments_assignee_status", "assignments", ["assignee_id", "status"], unique=False)
    op.create_index("ix_assignments_category_status", "assignments", ["category", "status"], unique=False)
    op.create_index("ix_assignments_due_status", "assignments", ["due_date", "status"], unique=False)

    op.create_table(
        "assignment_notes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("assignment_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(
            ["assignment_id"],
            ["assignments.id"],
            name="fk_assignment_notes_assignment_id_assignments",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["team_members.id"],
            name="fk_assignment_notes_author_id_team_members",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_assignment_notes"),
    )
    op.create_index("ix_assignment_notes_id", "assignment_notes", ["id"], unique=False)
    op.create_index("ix_assignment_notes_assignment_id", "assignment_notes", ["assignment_id"], unique=False)
    op.create_index("ix_assignment_notes_author_id", "assignment_notes", ["author_id"], unique=False)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", activity_type_enum, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("actor_name", sa.String(length=255), nullable=False),
        sa.Column("target", sa.String(length=255), nullable=False),
        sa.Column("details", json_type, nullable=True),
        sa.Column("assignment_id", sa.Integer(), nullable=True),
        sa.Column("team_member_id", sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(
            ["actor_id"],
            ["team_members.id"],
            name="fk_activity_logs_actor_id_team_members",
        ),
        sa.ForeignKeyConstraint(
            ["assignment_id"],
            ["assignments.id"],
            name="fk_activity_logs_assignment_id_assignments",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["team_member_id"],
            ["team_members.id"],
            name="fk_activity_logs_team_member_id_team_members",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_activity_logs"),
    )
    op.create_index("ix_activity_logs_id", "activity_logs", ["id"], unique=False)
    op.create_index("ix_activity_logs_type", "activity_logs", ["type"], unique=False)
    op.create_index("ix_activity_logs_assignment_id", "activity_logs", ["assignment_id"], unique=False)
    op.create_index("ix_activity_logs_team_member_id", "activity_logs", ["team_member_id"], unique=False)
    op.create_index("ix_activity_logs_actor_created", "activity_logs", ["actor_id", "created_at"], unique=False)
    op.create_index("ix_activity_logs_created", "activity_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("assignment_notes")
    op.drop_table("assignments")
    op.drop_table("team_members")

    bind = op.get_bind()
    for enum in (
        activity_type_enum,
        assignment_priority_enum,
        assignment_status_enum,
        assignment_category_enum,
        member_role_enum,
    ):
        enum.drop(bind, checkfirst=True)
