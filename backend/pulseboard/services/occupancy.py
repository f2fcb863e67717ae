"""Read-only queries over board occupancy: what sits where, and how much."""

from typing import NamedTuple

from pulseboard.domain.records import AppState, Category, Task, is_active_task
from pulseboard.services.people import is_assigned_to, sort_person_categories


class Bucket(NamedTuple):
    """Tasks grouped under one category; ``category`` is None for orphans."""

    category: Category | None
    tasks: list[Task]


def tasks_in_column(state: AppState, column_id: str) -> list[Task]:
    """Tasks placed in a column.

    A column without categories holds its tasks directly, so a task there
    only counts when it carries no category id.
    """
    column = state.find_column(column_id)
    tasks = [task for task in state.tasks if task.column_id == column_id]
    if column is not None and not column.categories:
        tasks = [task for task in tasks if task.category_id is None]
    return tasks


def tasks_in_category(state: AppState, column_id: str, category_id: str) -> list[Task]:
    return [task for task in state.tasks if task.column_id == column_id and task.category_id == category_id]


def orphaned_tasks(state: AppState, column_id: str) -> list[Task]:
    """Tasks in a categorized column whose category id matches none of its categories."""
    column = state.find_column(column_id)
    if column is None or not column.categories:
        return []
    known = column.category_ids()
    return [task for task in state.tasks if task.column_id == column_id and task.category_id not in known]


def column_buckets(state: AppState, column_id: str) -> list[Bucket]:
    """Group a column's tasks by category for display.

    Categories come in their display order (people sorted team members
    first). Orphaned tasks are collected into a trailing bucket with no
    category rather than hidden. A flat column yields a single bucket.
    """
    column = state.find_column(column_id)
    if column is None:
        return []
    if not column.categories:
        return [Bucket(None, tasks_in_column(state, column_id))]

    if column.allows_dynamic_categories:
        categories = sort_person_categories(c for c in column.categories if not c.archived)
        # Tasks under an archived person remain visible in their own slot
        categories += [
            c for c in column.categories if c.archived and tasks_in_category(state, column_id, c.id)
        ]
    else:
        categories = sorted(column.categories, key=lambda c: c.order)

    buckets = [Bucket(c, tasks_in_category(state, column_id, c.id)) for c in categories]
    orphans = orphaned_tasks(state, column_id)
    if orphans:
        buckets.append(Bucket(None, orphans))
    return buckets


def column_counts(state: AppState) -> dict[str, dict[str, int]]:
    """Per column: total tasks, active tasks and orphans."""
    counts = {}
    for column in sorted(state.columns, key=lambda c: c.order):
        tasks = [task for task in state.tasks if task.column_id == column.id]
        counts[column.id] = {
            "total": len(tasks),
            "active": sum(1 for task in tasks if is_active_task(task)),
            "orphaned": len(orphaned_tasks(state, column.id)),
        }
    return counts


def tasks_by_team_member(state: AppState) -> dict[str, list[Task]]:
    """Active tasks for each non-archived team member, keyed by display name.

    A task is attributed through its assignee first and, failing that, the
    person category it sits in.
    """
    column = state.follow_up_column()
    if column is None:
        return {}

    members = sort_person_categories(
        c for c in column.categories if c.is_person and c.is_team_member and not c.archived
    )
    grouped: dict[str, list[Task]] = {member.display_name: [] for member in members}
    for task in state.tasks:
        if not is_active_task(task):
            continue
        owner = next((m for m in members if is_assigned_to(task, m)), None)
        if owner is None and not task.assigned_to:
            owner = next((m for m in members if task.category_id == m.id), None)
        if owner is not None:
            grouped[owner.display_name].append(task)
    return grouped


def project_progress(state: AppState, project_id: str) -> dict[str, int]:
    """Task totals for a project and the share completed, as a whole percent."""
    tasks = [task for task in state.tasks if task.project_id == project_id]
    completed = sum(1 for task in tasks if not is_active_task(task))
    progress = round(completed * 100 / len(tasks)) if tasks else 0
    return {"total_tasks": len(tasks), "completed_tasks": completed, "progress": progress}
