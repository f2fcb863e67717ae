"""API router package."""

from fastapi import APIRouter

from pulseboard.api.v1 import (
    board,
    categories,
    columns,
    health,
    integration,
    people,
    projects,
    role_goals,
    tasks,
    team_members,
)

router = APIRouter()

# Include all API routers
router.include_router(health.router, tags=["Health"])
router.include_router(board.router, prefix="/board", tags=["Board"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(categories.router, prefix="/categories", tags=["Categories"])
router.include_router(columns.router, prefix="/columns", tags=["Columns"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(people.router, prefix="/people", tags=["People"])
router.include_router(team_members.router, prefix="/team-members", tags=["Team members"])
router.include_router(role_goals.router, prefix="/role-growth-goals", tags=["Role growth goals"])
router.include_router(integration.router, prefix="/integration", tags=["Integration"])
