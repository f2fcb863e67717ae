"""Well-known column ids and vocabularies shared across the board."""

UNCATEGORIZED_COLUMN_ID = "col-uncategorized"
TODAY_COLUMN_ID = "col-today"
FOLLOW_UP_COLUMN_ID = "col-followup"
LATER_COLUMN_ID = "col-later"
DONE_COLUMN_ID = "col-done"

# Status a task takes when its final column is one of these; anything else is "todo"
COLUMN_STATUS = {
    DONE_COLUMN_ID: "done",
    FOLLOW_UP_COLUMN_ID: "todo",
    TODAY_COLUMN_ID: "today",
    LATER_COLUMN_ID: "later",
}

# Statuses that count as finished work
TERMINAL_STATUSES = frozenset({"done", "completed"})

RATINGS = ("excellent", "good", "fair", "poor")

PERSON_COLORS = (
    "from-orange-400 to-orange-500",
    "from-red-400 to-red-500",
    "from-pink-400 to-pink-500",
    "from-purple-400 to-purple-500",
    "from-indigo-400 to-indigo-500",
    "from-teal-400 to-teal-500",
    "from-amber-400 to-amber-500",
    "from-cyan-400 to-cyan-500",
)
