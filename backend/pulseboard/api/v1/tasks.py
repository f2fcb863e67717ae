"""Tasks API endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.intents import assignee_change_from_payload
from pulseboard.domain.records import Record, TaskPriority, TaskStatus, is_active_task
from pulseboard.services import placement, tasks as task_service

router = APIRouter()

# Request Models
class TaskFields(Record):
    """Editable task attributes shared by create and update."""

    description: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    column_id: str | None = None
    category_id: str | None = None
    # Absent: leave assignee alone. null or "": unassign.
    assigned_to: str | None = None
    project_id: str | None = None
    client: str | None = None
    tags: list[str] | None = None
    notes: str | None = None
    estimated_hours: float | None = Field(None, ge=0)
    actual_hours: float | None = Field(None, ge=0)
    due_date: datetime | None = None
    start_date: datetime | None = None


class TaskCreate(TaskFields):
    title: str = Field(..., min_length=1, max_length=500)


class TaskUpdate(TaskFields):
    title: str | None = Field(None, min_length=1, max_length=500)


class TaskMove(Record):
    """Drag/drop or assignment of a task."""

    column_id: str
    category_id: str | None = None
    assigned_to: str | None = None


def _split(body: TaskFields) -> tuple[dict[str, Any], Any]:
    """Plain fields and the assignee change carried by a request body."""
    sent = body.model_dump(by_alias=True, exclude_unset=True)
    fields = body.model_dump(exclude_unset=True, exclude={"assigned_to"})
    # Drop explicit nulls for attributes that have defaults on the record
    for key in ("title", "priority", "tags"):
        if key in fields and fields[key] is None:
            del fields[key]
    return fields, assignee_change_from_payload(sent)


@router.get("")
async def list_tasks(
    manager: BoardManager,
    column_id: str | None = Query(None, alias="columnId"),
    project_id: str | None = Query(None, alias="projectId"),
    active: bool | None = Query(None),
) -> list[dict[str, Any]]:
    """List tasks, newest first."""
    state = await manager.snapshot()
    tasks = state.tasks
    if column_id is not None:
        tasks = [t for t in tasks if t.column_id == column_id]
    if project_id is not None:
        tasks = [t for t in tasks if t.project_id == project_id]
    if active is not None:
        tasks = [t for t in tasks if is_active_task(t) == active]
    tasks = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    return [t.to_json_dict() for t in tasks]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, manager: BoardManager) -> dict[str, Any]:
    """Create a task; its status follows the column it lands in."""
    fields, assignee = _split(body)
    _, task = await manager.apply_with_result(
        lambda state: task_service.create_task(state, fields, assignee),
        action="create_task",
    )
    return task.to_json_dict()


@router.get("/{task_id}")
async def get_task(task_id: str, manager: BoardManager) -> dict[str, Any]:
    state = await manager.snapshot()
    task = state.find_task(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task.to_json_dict()


@router.put("/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, manager: BoardManager) -> dict[str, Any]:
    """Update a task. Only fields present in the body change."""
    fields, assignee = _split(body)
    _, task = await manager.apply_with_result(
        lambda state: task_service.update_task(state, task_id, fields, assignee),
        action="update_task",
    )
    return task.to_json_dict()


@router.post("/{task_id}/move")
async def move_task(task_id: str, body: TaskMove, manager: BoardManager) -> dict[str, Any]:
    """Move a task to a column, category or person."""
    current = await manager.snapshot()
    if current.find_task(task_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    assignee = assignee_change_from_payload(body.model_dump(by_alias=True, exclude_unset=True))
    state = await manager.apply(
        lambda state: placement.move_task(state, task_id, body.column_id, body.category_id, assignee),
        action="move_task",
    )
    task = state.find_task(task_id)
    if task is None:
        # Deleted by another session between the check and the move
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task.to_json_dict()


@router.delete("/{task_id}")
async def delete_task(task_id: str, manager: BoardManager) -> dict[str, str]:
    await manager.apply(lambda state: task_service.delete_task(state, task_id), action="delete_task")
    return {"message": "Task deleted successfully"}
