"""Board-wide read endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from pulseboard.api.deps import BoardManager
from pulseboard.services import occupancy

router = APIRouter()


@router.get("")
async def get_board(manager: BoardManager) -> dict[str, Any]:
    """The full board snapshot, including its version."""
    state = await manager.snapshot()
    return state.to_json_dict()


@router.get("/columns/{column_id}/buckets")
async def get_column_buckets(column_id: str, manager: BoardManager) -> list[dict[str, Any]]:
    """Tasks of a column grouped by category, orphans last."""
    state = await manager.snapshot()
    if state.find_column(column_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
    return [
        {
            "category": bucket.category.to_json_dict() if bucket.category is not None else None,
            "tasks": [task.to_json_dict() for task in bucket.tasks],
        }
        for bucket in occupancy.column_buckets(state, column_id)
    ]


@router.get("/counts")
async def get_column_counts(manager: BoardManager) -> dict[str, dict[str, int]]:
    state = await manager.snapshot()
    return occupancy.column_counts(state)


@router.get("/team")
async def get_team_workload(manager: BoardManager) -> dict[str, list[dict[str, Any]]]:
    """Active tasks per team member."""
    state = await manager.snapshot()
    return {
        name: [task.to_json_dict() for task in tasks]
        for name, tasks in occupancy.tasks_by_team_member(state).items()
    }
