"""Projects API endpoints."""

from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Record
from pulseboard.services import projects as project_service

router = APIRouter()

ProjectStatus = Literal["active", "completed", "on-hold"]


class ProjectCreate(Record):
    name: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    color: str | None = None
    status: ProjectStatus | None = None
    client: str | None = None
    due_date: datetime | None = None


class ProjectUpdate(Record):
    name: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    color: str | None = None
    status: ProjectStatus | None = None
    client: str | None = None
    archived: bool | None = None
    due_date: datetime | None = None


def _fields(body: Record) -> dict[str, Any]:
    # name, color, status and archived cannot be cleared; the rest can
    required = {"name", "color", "status", "archived"}
    return {
        k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k not in required
    }


@router.get("")
async def list_projects(
    manager: BoardManager,
    include_archived: bool = Query(False, alias="includeArchived"),
) -> list[dict[str, Any]]:
    """Projects with task progress computed from the board."""
    state = await manager.snapshot()
    projects = [p for p in state.projects if include_archived or not p.archived]
    return [project_service.with_progress(state, p).to_json_dict() for p in projects]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, manager: BoardManager) -> dict[str, Any]:
    fields = _fields(body)
    _, project = await manager.apply_with_result(
        lambda state: project_service.create_project(state, fields),
        action="create_project",
    )
    return project.to_json_dict()


@router.get("/{project_id}")
async def get_project(project_id: str, manager: BoardManager) -> dict[str, Any]:
    state = await manager.snapshot()
    project = state.find_project(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project_service.with_progress(state, project).to_json_dict()


@router.put("/{project_id}")
async def update_project(project_id: str, body: ProjectUpdate, manager: BoardManager) -> dict[str, Any]:
    fields = _fields(body)
    state, project = await manager.apply_with_result(
        lambda state: project_service.update_project(state, project_id, fields),
        action="update_project",
    )
    return project_service.with_progress(state, project).to_json_dict()


@router.delete("/{project_id}")
async def delete_project(project_id: str, manager: BoardManager) -> dict[str, str]:
    """Delete a project. Its tasks remain, detached from it."""
    await manager.apply(
        lambda state: project_service.delete_project(state, project_id),
        action="delete_project",
    )
    return {"message": "Project deleted successfully"}
