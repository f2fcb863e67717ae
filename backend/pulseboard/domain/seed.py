"""Default board used when a store holds nothing yet."""

from pulseboard.domain.constants import (
    DONE_COLUMN_ID,
    FOLLOW_UP_COLUMN_ID,
    LATER_COLUMN_ID,
    TODAY_COLUMN_ID,
    UNCATEGORIZED_COLUMN_ID,
)
from pulseboard.domain.records import (
    Achievement,
    AppState,
    BoardSettings,
    Category,
    Column,
    UserStats,
)

DEFAULT_COLUMNS = [
    {
        "id": UNCATEGORIZED_COLUMN_ID,
        "name": "Uncategorized",
        "color": "from-slate-400 to-slate-500",
        "categories": [],
    },
    {
        "id": TODAY_COLUMN_ID,
        "name": "Today",
        "color": "from-blue-400 to-indigo-500",
        "categories": [
            ("cat-standing", "Standing Tasks", "from-blue-400 to-blue-500"),
            ("cat-comms", "Comms", "from-green-400 to-green-500"),
            ("cat-big-tasks", "Big Tasks", "from-purple-400 to-purple-500"),
        ],
    },
    {
        "id": FOLLOW_UP_COLUMN_ID,
        "name": "Follow Up",
        "color": "from-orange-400 to-red-500",
        "categories": [],
        "allows_dynamic_categories": True,
    },
    {
        "id": LATER_COLUMN_ID,
        "name": "Later",
        "color": "from-amber-400 to-yellow-500",
        "categories": [],
    },
    {
        "id": DONE_COLUMN_ID,
        "name": "Done",
        "color": "from-emerald-400 to-green-500",
        "categories": [],
    },
]

DEFAULT_ACHIEVEMENTS = [
    ("achievement-task-crusher", "Task Crusher", "Complete 50 tasks", "completion", 50),
    ("achievement-streak-master", "Streak Master", "Keep a 7 day streak", "streak", 7),
    ("achievement-focus-champion", "Focus Champion", "Log 20 focus hours", "focus", 20),
]


def default_columns() -> list[Column]:
    columns = []
    for order, column_def in enumerate(DEFAULT_COLUMNS):
        categories = [
            Category(id=cat_id, name=name, column_id=column_def["id"], color=color, order=position)
            for position, (cat_id, name, color) in enumerate(column_def["categories"])
        ]
        columns.append(
            Column(
                id=column_def["id"],
                name=column_def["name"],
                order=order,
                color=column_def["color"],
                categories=categories,
                allows_dynamic_categories=column_def.get("allows_dynamic_categories", False),
            )
        )
    return columns


def default_state() -> AppState:
    """Build a fresh board: the five standard columns and no tasks."""
    return AppState(
        columns=default_columns(),
        achievements=[
            Achievement(id=aid, name=name, description=desc, type=kind, max_progress=target)
            for aid, name, desc, kind, target in DEFAULT_ACHIEVEMENTS
        ],
        user_stats=UserStats(),
        settings=BoardSettings(),
    )
