"""Task create/update/delete on top of the placement rules."""

from datetime import datetime
from typing import Any

import structlog

from pulseboard.domain.constants import COLUMN_STATUS, DONE_COLUMN_ID, TERMINAL_STATUSES, UNCATEGORIZED_COLUMN_ID
from pulseboard.domain.intents import NO_CHANGE, AssigneeChange, NoChange
from pulseboard.domain.records import AppState, Task, utcnow
from pulseboard.exceptions import ColumnNotFoundError, TaskNotFoundError
from pulseboard.services.placement import relocate_task

logger = structlog.get_logger()

# Fields owned by relocate_task; a plain patch never writes them directly
PLACEMENT_FIELDS = frozenset(
    {
        "column_id",
        "category_id",
        "category",
        "assigned_to",
        "assignee_id",
        "completed_at",
        "duration_days",
        "duration_hours",
    }
)


def _require_task(state: AppState, task_id: str) -> Task:
    task = state.find_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def _keep_explicit_status(task: Task, status: str | None) -> Task:
    # Columns with a status of their own win over whatever the form sent
    if status is None or status in TERMINAL_STATUSES or task.column_id in COLUMN_STATUS:
        return task
    return task.model_copy(update={"status": status})


def create_task(
    state: AppState,
    fields: dict[str, Any],
    assignee: AssigneeChange = NO_CHANGE,
    *,
    now: datetime | None = None,
) -> tuple[AppState, Task]:
    """Add a task and place it.

    ``fields`` holds snake_case task attributes. Without a column the task
    lands in the uncategorized column; its status comes from where it ends up.
    """
    now = now or utcnow()
    fields = dict(fields)
    status = fields.pop("status", None)
    column_id = fields.pop("column_id", None) or UNCATEGORIZED_COLUMN_ID
    category_id = fields.pop("category_id", None)
    if status in TERMINAL_STATUSES:
        column_id = DONE_COLUMN_ID
    if state.find_column(column_id) is None:
        raise ColumnNotFoundError(column_id)

    draft = Task.model_validate(
        {
            **{k: v for k, v in fields.items() if k not in PLACEMENT_FIELDS},
            "column_id": column_id,
            "created_at": now,
            "updated_at": now,
        }
    )
    task = relocate_task(state, draft, column_id, category_id, assignee, now=now)
    task = _keep_explicit_status(task, status)

    logger.info("task_created", task_id=task.id, column_id=task.column_id, status=task.status)
    return state.model_copy(update={"tasks": [*state.tasks, task]}), task


def update_task(
    state: AppState,
    task_id: str,
    fields: dict[str, Any],
    assignee: AssigneeChange = NO_CHANGE,
    *,
    now: datetime | None = None,
) -> tuple[AppState, Task]:
    """Patch a task from a form edit.

    Plain attributes are copied over. A new column, category or assignee, or
    a terminal status, goes through the placement rules so the task stays
    consistent with where it sits.
    """
    task = _require_task(state, task_id)
    now = now or utcnow()
    fields = dict(fields)
    status = fields.pop("status", None)
    column_id = fields.pop("column_id", None) or task.column_id
    category_given = "category_id" in fields
    category_id = fields.pop("category_id", None)
    if status in TERMINAL_STATUSES:
        column_id = DONE_COLUMN_ID

    patched = Task.model_validate(
        {
            **task.model_dump(),
            **{k: v for k, v in fields.items() if k not in PLACEMENT_FIELDS},
            "updated_at": now,
        }
    )

    moved = column_id != task.column_id or category_given or not isinstance(assignee, NoChange)
    if moved:
        if category_given and category_id is None:
            patched = patched.model_copy(update={"category_id": None, "category": None})
        patched = relocate_task(state, patched, column_id, category_id, assignee, now=now)
    patched = _keep_explicit_status(patched, status)

    logger.info("task_updated", task_id=task_id, moved=moved, fields=sorted(fields))
    return state.replace_task(patched), patched


def delete_task(state: AppState, task_id: str) -> AppState:
    _require_task(state, task_id)
    logger.info("task_deleted", task_id=task_id)
    return state.model_copy(update={"tasks": [t for t in state.tasks if t.id != task_id]})
