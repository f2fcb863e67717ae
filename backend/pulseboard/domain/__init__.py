"""Board domain: passive records, intents and the default board."""

from pulseboard.domain.constants import (
    DONE_COLUMN_ID,
    FOLLOW_UP_COLUMN_ID,
    LATER_COLUMN_ID,
    TODAY_COLUMN_ID,
    UNCATEGORIZED_COLUMN_ID,
)
from pulseboard.domain.intents import (
    NO_CHANGE,
    UNASSIGN,
    AssigneeChange,
    AssignTo,
    NoChange,
    Unassign,
    assignee_change_from_payload,
)
from pulseboard.domain.records import (
    AppState,
    Category,
    Column,
    Project,
    Task,
    TeamMemberDetails,
)
from pulseboard.domain.seed import default_state

__all__ = [
    "DONE_COLUMN_ID",
    "FOLLOW_UP_COLUMN_ID",
    "LATER_COLUMN_ID",
    "TODAY_COLUMN_ID",
    "UNCATEGORIZED_COLUMN_ID",
    "NO_CHANGE",
    "UNASSIGN",
    "AssigneeChange",
    "AssignTo",
    "NoChange",
    "Unassign",
    "assignee_change_from_payload",
    "AppState",
    "Category",
    "Column",
    "Project",
    "Task",
    "TeamMemberDetails",
    "default_state",
]
