"""Task placement and assignment transitions.

Moving a task between columns, categories and people changes several fields
together: ``columnId``, ``categoryId``, ``assignedTo``, ``status`` and the
completion bookkeeping. Everything here is a pure function of the current
board state; nothing is persisted.
"""

import math
from datetime import datetime

import structlog

from pulseboard.domain.constants import (
    COLUMN_STATUS,
    DONE_COLUMN_ID,
    UNCATEGORIZED_COLUMN_ID,
)
from pulseboard.domain.intents import NO_CHANGE, AssigneeChange, AssignTo, Unassign
from pulseboard.domain.records import AppState, Category, Task, utcnow

logger = structlog.get_logger()

SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_HOUR = 60 * 60


def find_person_category(state: AppState, name: str) -> Category | None:
    """Find the live follow-up person category for a name, ignoring case.

    Archived people never take new assignments: a name that only matches an
    archived entry returns None, so the task keeps the name without a slot.
    When duplicates have not been reconciled yet, a team-member entry wins
    over a contact.
    """
    column = state.follow_up_column()
    if column is None or not name.strip():
        return None
    matches = [
        category
        for category in column.categories
        if category.matches_person(name) and not category.archived
    ]
    if not matches:
        return None
    matches.sort(key=lambda category: not category.is_team_member)
    return matches[0]


def is_in_follow_up(state: AppState, task: Task) -> bool:
    """A task is in follow-up by column or by belonging to a follow-up category."""
    column = state.follow_up_column()
    if column is None:
        return False
    if task.column_id == column.id:
        return True
    return task.category_id is not None and task.category_id in column.category_ids()


def derive_status(column_id: str | None) -> str:
    return COLUMN_STATUS.get(column_id, "todo")


def completion_fields(task: Task, completed_at: datetime) -> dict:
    """Completion timestamp plus whole days/hours elapsed since creation, rounded up."""
    elapsed = max((completed_at - task.created_at).total_seconds(), 0)
    return {
        "completed_at": completed_at,
        "duration_days": math.ceil(elapsed / SECONDS_PER_DAY),
        "duration_hours": math.ceil(elapsed / SECONDS_PER_HOUR),
    }


def relocate_task(
    state: AppState,
    task: Task,
    target_column_id: str,
    target_category_id: str | None = None,
    assignee: AssigneeChange = NO_CHANGE,
    *,
    now: datetime | None = None,
) -> Task:
    """Compute a task's next placement.

    Args:
        state: Current board, used to resolve people and the follow-up column.
        task: The task being moved.
        target_column_id: Column the task was dropped on. Ignored when the
            assignee resolves to a person (the task goes to follow-up), and
            when unassigning (the task stays put or leaves follow-up).
        target_category_id: Category the task was dropped on, if any. With
            no explicit assignee change, dropping onto a person's category
            in follow-up assigns the task to that person.
        assignee: Requested assignee change.
        now: Clock override.

    Returns:
        A copy of ``task`` with placement, status and timestamps updated.
    """
    now = now or utcnow()
    updates: dict = {"updated_at": now}

    # Dropping onto a person category is an assignment to that person
    if not isinstance(assignee, (AssignTo, Unassign)) and target_category_id:
        target = state.find_category(target_category_id)
        follow_up = state.follow_up_column()
        if target is not None and target.is_person and follow_up is not None and target.column_id == follow_up.id:
            assignee = AssignTo(target.display_name)

    if isinstance(assignee, AssignTo):
        person = find_person_category(state, assignee.name)
        updates["assigned_to"] = assignee.name
        if person is not None:
            updates.update(
                column_id=person.column_id,
                category_id=person.id,
                category=person.id,
                assignee_id=person.id,
            )
        else:
            updates.update(
                column_id=target_column_id,
                category_id=None,
                category=None,
                assignee_id=None,
            )
    elif isinstance(assignee, Unassign):
        column_id = task.column_id
        if is_in_follow_up(state, task):
            column_id = UNCATEGORIZED_COLUMN_ID
        updates.update(
            assigned_to=None,
            assignee_id=None,
            category_id=None,
            category=None,
            column_id=column_id,
        )
    else:
        updates["column_id"] = target_column_id
        if target_category_id:
            updates.update(category_id=target_category_id, category=target_category_id)
        elif target_column_id != task.column_id:
            # A category id never carries over into another column
            updates.update(category_id=None, category=None)

    # Status follows the final column, not the one the caller asked for
    final_column_id = updates["column_id"]
    updates["status"] = derive_status(final_column_id)
    if final_column_id == DONE_COLUMN_ID:
        if task.column_id != DONE_COLUMN_ID or task.completed_at is None:
            updates.update(completion_fields(task, now))
    else:
        updates.update(completed_at=None, duration_days=None, duration_hours=None)

    return task.model_copy(update=updates)


def move_task(
    state: AppState,
    task_id: str,
    target_column_id: str,
    target_category_id: str | None = None,
    assignee: AssigneeChange = NO_CHANGE,
    *,
    now: datetime | None = None,
) -> AppState:
    """Apply a drag/drop or assignment to one task.

    An unknown task id leaves the board untouched (the same state object is
    returned).
    """
    task = state.find_task(task_id)
    if task is None:
        logger.debug("move_task_unknown_task", task_id=task_id)
        return state

    moved = relocate_task(
        state,
        task,
        target_column_id,
        target_category_id,
        assignee,
        now=now,
    )
    logger.info(
        "task_moved",
        task_id=task_id,
        from_column=task.column_id,
        to_column=moved.column_id,
        category_id=moved.category_id,
        assigned_to=moved.assigned_to,
        status=moved.status,
    )
    return state.replace_task(moved)


def complete_task(state: AppState, task_id: str, *, now: datetime | None = None) -> AppState:
    """Mark a task done by moving it to the done column."""
    return move_task(state, task_id, DONE_COLUMN_ID, now=now)
