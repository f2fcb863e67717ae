"""Board records: tasks, columns, categories, projects and team data.

Records are plain pydantic models. Field names are snake_case in Python and
camelCase on the wire (JSON file, API payloads), matching the shape the board
UI consumes. All timestamps are timezone-aware UTC; naive values read back
from storage are treated as UTC.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal
from uuid import uuid4

import orjson
from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pulseboard.domain.constants import DONE_COLUMN_ID, FOLLOW_UP_COLUMN_ID, TERMINAL_STATUSES


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate an opaque record id such as ``task-3f9a1c0b2e4d``."""
    return f"{prefix}-{uuid4().hex[:12]}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]

TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal[
    "todo",
    "in-progress",
    "blocked",
    "done",
    "uncategorized",
    "today",
    "delegated",
    "later",
    "completed",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]
Rating = Literal["excellent", "good", "fair", "poor"]


def parse_json_value(value: Any, default: Any) -> Any:
    """Normalize a JSON-valued field that may arrive as text or be missing.

    Relational backends store arrays and maps either natively or as
    serialized text; both shapes read back into Python containers here.
    """
    if value is None:
        return type(default)(default)
    if isinstance(value, (str, bytes)):
        if not value.strip():
            return type(default)(default)
        return orjson.loads(value)
    return value


class Record(BaseModel):
    """Base for every board record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to the camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Board
# ============================================================================


class Task(Record):
    """A unit of work placed in a column and optionally a category."""

    id: str = Field(default_factory=lambda: new_id("task"))
    title: str = Field(..., min_length=1)
    description: str | None = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"

    # Placement
    column_id: str | None = None
    category_id: str | None = None
    category: str | None = None  # mirrors category_id for older clients

    # Assignment: display name plus the person category it resolved to
    assigned_to: str | None = None
    assignee_id: str | None = None

    project_id: str | None = None
    client: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None

    created_at: UTCDateTime = Field(default_factory=utcnow)
    updated_at: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None
    due_date: UTCDateTime | None = None
    start_date: UTCDateTime | None = None
    duration_days: int | None = None
    duration_hours: int | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value: Any) -> Any:
        return parse_json_value(value, [])


class Category(Record):
    """A named subgroup inside a column; may stand for a person."""

    id: str = Field(default_factory=lambda: new_id("cat"))
    name: str
    column_id: str
    color: str = "from-gray-400 to-gray-500"
    is_collapsed: bool = False
    order: int = 0
    task_count: int = 0
    completed_count: int = 0

    is_person: bool = False
    person_name: str | None = None
    is_team_member: bool = False
    archived: bool = False

    @property
    def display_name(self) -> str:
        return self.person_name or self.name

    def matches_person(self, name: str) -> bool:
        """Case-insensitive match of a person category against a name."""
        return self.is_person and self.display_name.strip().casefold() == name.strip().casefold()


class Column(Record):
    """Top-level swimlane holding categories and, through them, tasks."""

    id: str = Field(default_factory=lambda: new_id("col"))
    name: str
    order: int = 0
    color: str = "from-gray-400 to-gray-500"
    max_tasks: int | None = None
    categories: list[Category] = Field(default_factory=list)
    allows_dynamic_categories: bool = False

    def category_ids(self) -> set[str]:
        return {category.id for category in self.categories}


class Project(Record):
    id: str = Field(default_factory=lambda: new_id("project"))
    name: str = Field(..., min_length=1)
    description: str | None = None
    color: str = "from-blue-400 to-blue-500"
    status: Literal["active", "completed", "on-hold"] = "active"
    client: str | None = None
    archived: bool = False
    created_at: UTCDateTime = Field(default_factory=utcnow)
    updated_at: UTCDateTime = Field(default_factory=utcnow)
    due_date: UTCDateTime | None = None
    progress: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0


class Achievement(Record):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    color: str = ""
    is_unlocked: bool = False
    progress: int = 0
    max_progress: int = 1
    unlocked_at: UTCDateTime | None = None
    type: Literal["streak", "completion", "focus", "consistency", "milestone"] = "completion"


class DailyStats(Record):
    date: str  # YYYY-MM-DD
    tasks_completed: int = 0
    tasks_created: int = 0
    focus_time_minutes: int = 0
    completion_rate: float = 0
    streak_day: int = 0
    start_time: str | None = None
    end_time: str | None = None


class UserStats(Record):
    total_tasks_completed: int = 0
    total_focus_hours: float = 0
    current_streak: int = 0
    longest_streak: int = 0
    average_completion_rate: float = 0
    total_achievements: int = 0
    daily_stats: list[DailyStats] = Field(default_factory=list)
    last_active_date: str = Field(default_factory=lambda: utcnow().date().isoformat())


class WorkingHours(Record):
    start: str = "09:00"
    end: str = "17:00"


class BoardSettings(Record):
    theme: Literal["light", "dark", "auto"] = "auto"
    enable_animations: bool = True
    enable_notifications: bool = True
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    daily_goal: int = 8


# ============================================================================
# Team member data
# ============================================================================


class MoraleCheckIn(Record):
    id: str = Field(default_factory=lambda: new_id("checkin"))
    date: UTCDateTime = Field(default_factory=utcnow)
    morale: Rating
    notes: str | None = None
    created_at: UTCDateTime = Field(default_factory=utcnow)


class PerformanceCheckIn(Record):
    id: str = Field(default_factory=lambda: new_id("checkin"))
    date: UTCDateTime = Field(default_factory=utcnow)
    performance: Rating
    notes: str | None = None
    created_at: UTCDateTime = Field(default_factory=utcnow)


class OneOnOne(Record):
    """A 1:1 meeting record.

    Entries written from the board carry ``notes``/``actionItems``; entries
    logged through the integration endpoints carry ``discussionNotes``,
    ``followUps`` and ``decisions``. Both shapes live in the same list.
    """

    id: str = Field(default_factory=lambda: new_id("oneonone"))
    date: UTCDateTime = Field(default_factory=utcnow)
    notes: str | None = None
    action_items: list[str] = Field(default_factory=list)
    discussion_notes: str | None = None
    follow_ups: list[str] = Field(default_factory=list)
    decisions: list[str] = Field(default_factory=list)
    morale: Rating | None = None
    performance: Rating | None = None
    created_at: UTCDateTime = Field(default_factory=utcnow)


class RedFlag(Record):
    id: str = Field(default_factory=lambda: new_id("flag"))
    text: str
    date: UTCDateTime = Field(default_factory=utcnow)
    status: Literal["open", "resolved"] = "open"
    created_at: UTCDateTime = Field(default_factory=utcnow)
    resolved_at: UTCDateTime | None = None


class GoalMilestone(Record):
    id: str = Field(default_factory=lambda: new_id("milestone"))
    title: str
    description: str | None = None
    target_date: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None
    status: Literal["pending", "completed"] = "pending"


class GoalNote(Record):
    id: str = Field(default_factory=lambda: new_id("note"))
    date: UTCDateTime = Field(default_factory=utcnow)
    # Integration clients historically wrote the body under "text"
    note: str = Field(validation_alias=AliasChoices("note", "text"))
    created_at: UTCDateTime = Field(default_factory=utcnow)


class TeamMemberGoal(Record):
    id: str = Field(default_factory=lambda: new_id("goal"))
    title: str
    description: str | None = None
    target_date: UTCDateTime | None = None
    status: Literal["not-started", "in-progress", "completed", "on-hold"] = "not-started"
    created_at: UTCDateTime = Field(default_factory=utcnow)
    completed_at: UTCDateTime | None = None
    milestones: list[GoalMilestone] = Field(default_factory=list)
    notes: list[GoalNote] = Field(default_factory=list)


class ReviewCycle(Record):
    id: str = Field(default_factory=lambda: new_id("review"))
    type: Literal["6-month"] = "6-month"
    start_date: UTCDateTime
    end_date: UTCDateTime
    notes: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    created_at: UTCDateTime = Field(default_factory=utcnow)


class ClientDetail(Record):
    client_name: str
    summary: str | None = None
    problems: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    notes: str | None = None
    updated_at: UTCDateTime = Field(default_factory=utcnow)


class GrowthGoalRating(Record):
    id: str = Field(default_factory=lambda: new_id("rating"))
    week_start_date: UTCDateTime
    rating: int = Field(..., ge=1, le=5)
    notes: str | None = None
    created_at: UTCDateTime = Field(default_factory=utcnow)


class MemberGrowthGoal(Record):
    goal_id: str
    ratings: list[GrowthGoalRating] = Field(default_factory=list)
    current_rating: int | None = None
    notes: str | None = None


class RoleGrowthGoal(Record):
    id: str = Field(default_factory=lambda: new_id("role-goal"))
    discipline: str
    level: str
    title: str
    description: str | None = None
    category: str | None = None
    created_at: UTCDateTime = Field(default_factory=utcnow)
    updated_at: UTCDateTime = Field(default_factory=utcnow)


class TeamMemberDetails(Record):
    """Qualitative data tracked per team member, keyed by display name."""

    name: str
    discipline: str | None = None
    level: str | None = None
    team: str | None = None
    growth_goals: list[MemberGrowthGoal] = Field(default_factory=list)
    goals: list[TeamMemberGoal] = Field(default_factory=list)
    morale: Rating | None = None
    performance: Rating | None = None
    morale_check_ins: list[MoraleCheckIn] = Field(default_factory=list)
    performance_check_ins: list[PerformanceCheckIn] = Field(default_factory=list)
    clients: list[str] = Field(default_factory=list)
    client_details: dict[str, ClientDetail] = Field(default_factory=dict)
    red_flags: list[RedFlag] = Field(default_factory=list)
    review_cycles: list[ReviewCycle] = Field(default_factory=list)
    one_on_ones: list[OneOnOne] = Field(default_factory=list)
    notes: str | None = None
    updated_at: UTCDateTime = Field(default_factory=utcnow)

    @field_validator(
        "growth_goals",
        "goals",
        "morale_check_ins",
        "performance_check_ins",
        "clients",
        "review_cycles",
        "one_on_ones",
        mode="before",
    )
    @classmethod
    def _parse_json_list(cls, value: Any) -> Any:
        return parse_json_value(value, [])

    @field_validator("client_details", mode="before")
    @classmethod
    def _parse_json_map(cls, value: Any) -> Any:
        return parse_json_value(value, {})

    @field_validator("red_flags", mode="before")
    @classmethod
    def _upgrade_legacy_red_flags(cls, value: Any) -> Any:
        # Older records kept red flags as bare strings; those are open flags
        flags = parse_json_value(value, [])
        return [{"text": flag, "status": "open"} if isinstance(flag, str) else flag for flag in flags]

    def open_red_flags(self) -> list[RedFlag]:
        return [flag for flag in self.red_flags if flag.status == "open"]


# ============================================================================
# Aggregate root
# ============================================================================


class AppState(Record):
    """The whole board, always read and written as one snapshot."""

    version: int = 0
    columns: list[Column] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
    user_stats: UserStats = Field(default_factory=UserStats)
    settings: BoardSettings = Field(default_factory=BoardSettings)
    team_member_details: dict[str, TeamMemberDetails] = Field(default_factory=dict)
    role_growth_goals: list[RoleGrowthGoal] = Field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    def find_column(self, column_id: str | None) -> Column | None:
        if column_id is None:
            return None
        return next((column for column in self.columns if column.id == column_id), None)

    def find_category(self, category_id: str | None) -> Category | None:
        if category_id is None:
            return None
        for column in self.columns:
            for category in column.categories:
                if category.id == category_id:
                    return category
        return None

    def find_project(self, project_id: str) -> Project | None:
        return next((project for project in self.projects if project.id == project_id), None)

    def follow_up_column(self) -> Column | None:
        """The dynamic column whose categories are people."""
        column = self.find_column(FOLLOW_UP_COLUMN_ID)
        if column is not None:
            return column
        return next((c for c in self.columns if c.allows_dynamic_categories), None)

    def replace_task(self, updated: Task) -> "AppState":
        tasks = [updated if task.id == updated.id else task for task in self.tasks]
        return self.model_copy(update={"tasks": tasks})

    def replace_column(self, updated: Column) -> "AppState":
        columns = [updated if column.id == updated.id else column for column in self.columns]
        return self.model_copy(update={"columns": columns})


def is_active_task(task: Task) -> bool:
    """True while a task is still open work.

    A task is finished when its status is terminal or it sits in the done
    column, whichever was updated last.
    """
    return task.status not in TERMINAL_STATUSES and task.column_id != DONE_COLUMN_ID
