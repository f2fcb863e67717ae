"""Board tables: columns, categories, tasks, projects and board-wide rows."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulseboard.db.base import Base, TimestampMixin

# Board-wide singleton rows (settings, stats, meta) use this primary key
SINGLETON_ID = 1


class BoardColumn(Base):
    """A board column. Named ``board_columns`` to stay clear of SQL keywords."""

    __tablename__ = "board_columns"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    color: Mapped[str] = mapped_column(String(100), nullable=False)
    max_tasks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    allows_dynamic_categories: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class CategoryRow(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    column_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("board_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    color: Mapped[str] = mapped_column(String(100), nullable=False)
    is_collapsed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    task_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Person categories (follow-up column)
    is_person: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    person_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_team_member: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class TaskRow(Base, TimestampMixin):
    """A task.

    Placement columns carry no foreign keys: a task may point at a category
    that no longer exists and is then shown as orphaned rather than lost.
    """

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo", index=True)

    column_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    category_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    assigned_to: Mapped[str | None] = mapped_column(String(200), nullable=True)
    assignee_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    project_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    client: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # JSON-encoded list of strings
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_hours: Mapped[float | None] = mapped_column(Float, nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ProjectRow(Base, TimestampMixin):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")  # active, completed, on-hold
    client: Mapped[str | None] = mapped_column(String(200), nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AchievementRow(Base):
    __tablename__ = "achievements"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    color: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    is_unlocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="completion")


class BoardSettingsRow(Base):
    __tablename__ = "board_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SINGLETON_ID)
    theme: Mapped[str] = mapped_column(String(10), nullable=False, default="auto")
    enable_animations: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    working_hours_start: Mapped[str] = mapped_column(String(5), nullable=False, default="09:00")
    working_hours_end: Mapped[str] = mapped_column(String(5), nullable=False, default="17:00")
    daily_goal: Mapped[int] = mapped_column(Integer, nullable=False, default=8)


class UserStatsRow(Base):
    __tablename__ = "user_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SINGLETON_ID)
    total_tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_focus_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_achievements: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_date: Mapped[str] = mapped_column(String(10), nullable=False)


class DailyStatsRow(Base):
    __tablename__ = "daily_stats"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)  # YYYY-MM-DD
    tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    focus_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    streak_day: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)


class BoardMeta(Base):
    """Snapshot version used to detect concurrent writers."""

    __tablename__ = "board_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SINGLETON_ID)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
