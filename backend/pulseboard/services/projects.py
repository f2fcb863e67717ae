"""Projects: passive records that tasks may point at."""

from datetime import datetime
from typing import Any

import structlog

from pulseboard.domain.records import AppState, Project, utcnow
from pulseboard.exceptions import ProjectNotFoundError
from pulseboard.services.occupancy import project_progress

logger = structlog.get_logger()


def _require_project(state: AppState, project_id: str) -> Project:
    project = state.find_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def with_progress(state: AppState, project: Project) -> Project:
    """Project with task totals and progress filled in from the board."""
    return project.model_copy(update=project_progress(state, project.id))


def create_project(
    state: AppState,
    fields: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, Project]:
    now = now or utcnow()
    project = Project.model_validate({**fields, "created_at": now, "updated_at": now})
    logger.info("project_created", project_id=project.id, name=project.name)
    return state.model_copy(update={"projects": [*state.projects, project]}), project


def update_project(
    state: AppState,
    project_id: str,
    fields: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, Project]:
    project = _require_project(state, project_id)
    updated = Project.model_validate(
        {**project.model_dump(), **fields, "id": project_id, "updated_at": now or utcnow()}
    )
    projects = [updated if p.id == project_id else p for p in state.projects]
    logger.info("project_updated", project_id=project_id, fields=sorted(fields))
    return state.model_copy(update={"projects": projects}), updated


def delete_project(state: AppState, project_id: str) -> AppState:
    """Remove a project; its tasks stay on the board without a project."""
    _require_project(state, project_id)
    tasks = [
        task.model_copy(update={"project_id": None}) if task.project_id == project_id else task
        for task in state.tasks
    ]
    logger.info("project_deleted", project_id=project_id)
    return state.model_copy(
        update={
            "projects": [p for p in state.projects if p.id != project_id],
            "tasks": tasks,
        }
    )
