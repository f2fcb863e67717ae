"""Role growth-goal catalogue API endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Record
from pulseboard.services import role_goals

router = APIRouter()


class RoleGoalCreate(Record):
    discipline: str = Field(..., min_length=1, max_length=100)
    level: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    category: str | None = None


class RoleGoalUpdate(Record):
    discipline: str | None = Field(None, min_length=1, max_length=100)
    level: str | None = Field(None, min_length=1, max_length=100)
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    category: str | None = None


def _fields(body: Record) -> dict[str, Any]:
    # discipline, level and title cannot be cleared; the rest can
    required = set(role_goals.REQUIRED_FIELDS)
    return {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k not in required}


@router.get("")
async def list_role_goals(
    manager: BoardManager,
    discipline: str | None = None,
    level: str | None = None,
) -> list[dict[str, Any]]:
    state = await manager.snapshot()
    return [goal.to_json_dict() for goal in role_goals.list_role_goals(state, discipline, level)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_role_goal(body: RoleGoalCreate, manager: BoardManager) -> dict[str, Any]:
    fields = _fields(body)
    _, goal = await manager.apply_with_result(
        lambda state: role_goals.create_role_goal(state, fields),
        action="create_role_goal",
    )
    return goal.to_json_dict()


@router.get("/{goal_id}")
async def get_role_goal(goal_id: str, manager: BoardManager) -> dict[str, Any]:
    state = await manager.snapshot()
    goal = next((g for g in state.role_growth_goals if g.id == goal_id), None)
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role growth goal not found")
    return goal.to_json_dict()


@router.put("/{goal_id}")
async def update_role_goal(goal_id: str, body: RoleGoalUpdate, manager: BoardManager) -> dict[str, Any]:
    fields = _fields(body)
    _, goal = await manager.apply_with_result(
        lambda state: role_goals.update_role_goal(state, goal_id, fields),
        action="update_role_goal",
    )
    return goal.to_json_dict()


@router.delete("/{goal_id}")
async def delete_role_goal(goal_id: str, manager: BoardManager) -> dict[str, str]:
    """Delete a catalogue goal; ratings members logged against it are kept."""
    await manager.apply(
        lambda state: role_goals.delete_role_goal(state, goal_id),
        action="delete_role_goal",
    )
    return {"message": "Role growth goal deleted successfully"}
