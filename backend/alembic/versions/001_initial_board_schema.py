"""Initial board schema: columns, categories, tasks, projects and team data.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated_nullable: bool = True) -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=updated_nullable,
        ),
    ]


def upgrade() -> None:
    # Create board_columns table
    op.create_table(
        "board_columns",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("color", sa.String(100), nullable=False),
        sa.Column("max_tasks", sa.Integer(), nullable=True),
        sa.Column("allows_dynamic_categories", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create categories table
    op.create_table(
        "categories",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("column_id", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("color", sa.String(100), nullable=False),
        sa.Column("is_collapsed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("task_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_person", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("person_name", sa.String(200), nullable=True),
        sa.Column("is_team_member", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["column_id"], ["board_columns.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_categories_column_id", "categories", ["column_id"])

    # Create tasks table
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="todo"),
        sa.Column("column_id", sa.String(100), nullable=True),
        sa.Column("category_id", sa.String(100), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("assigned_to", sa.String(200), nullable=True),
        sa.Column("assignee_id", sa.String(100), nullable=True),
        sa.Column("project_id", sa.String(100), nullable=True),
        sa.Column("client", sa.String(200), nullable=True),
        sa.Column("tags", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=True),
        sa.Column("duration_hours", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_column_id", "tasks", ["column_id"])
    op.create_index("ix_tasks_category_id", "tasks", ["category_id"])
    op.create_index("ix_tasks_assignee_id", "tasks", ["assignee_id"])
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])

    # Create projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("client", sa.String(200), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_tasks", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create achievements table
    op.create_table(
        "achievements",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("icon", sa.String(100), nullable=False, server_default=""),
        sa.Column("color", sa.String(100), nullable=False, server_default=""),
        sa.Column("is_unlocked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_progress", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="completion"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create singleton board rows
    op.create_table(
        "board_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("theme", sa.String(10), nullable=False, server_default="auto"),
        sa.Column("enable_animations", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("enable_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("working_hours_start", sa.String(5), nullable=False, server_default="09:00"),
        sa.Column("working_hours_end", sa.String(5), nullable=False, server_default="17:00"),
        sa.Column("daily_goal", sa.Integer(), nullable=False, server_default="8"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "user_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("total_tasks_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_focus_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_completion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_achievements", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_active_date", sa.String(10), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "daily_stats",
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("tasks_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tasks_created", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("focus_time_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("streak_day", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("end_time", sa.String(5), nullable=True),
        sa.PrimaryKeyConstraint("date"),
    )
    op.create_table(
        "board_meta",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create team_member_details table
    op.create_table(
        "team_member_details",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("discipline", sa.String(100), nullable=True),
        sa.Column("level", sa.String(100), nullable=True),
        sa.Column("team", sa.String(100), nullable=True),
        sa.Column("morale", sa.String(20), nullable=True),
        sa.Column("performance", sa.String(20), nullable=True),
        sa.Column("growth_goals", sa.JSON(), nullable=False),
        sa.Column("goals", sa.JSON(), nullable=False),
        sa.Column("morale_check_ins", sa.JSON(), nullable=False),
        sa.Column("performance_check_ins", sa.JSON(), nullable=False),
        sa.Column("clients", sa.JSON(), nullable=False),
        sa.Column("client_details", sa.JSON(), nullable=False),
        sa.Column("red_flags", sa.JSON(), nullable=False),
        sa.Column("review_cycles", sa.JSON(), nullable=False),
        sa.Column("one_on_ones", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )

    # Create role_growth_goals table
    op.create_table(
        "role_growth_goals",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("discipline", sa.String(100), nullable=False),
        sa.Column("level", sa.String(100), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_role_growth_goals_discipline", "role_growth_goals", ["discipline"])


def downgrade() -> None:
    op.drop_table("role_growth_goals")
    op.drop_table("team_member_details")
    op.drop_table("board_meta")
    op.drop_table("daily_stats")
    op.drop_table("user_stats")
    op.drop_table("board_settings")
    op.drop_table("achievements")
    op.drop_table("projects")
    op.drop_table("tasks")
    op.drop_table("categories")
    op.drop_table("board_columns")
