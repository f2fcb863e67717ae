"""Columns API endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Record
from pulseboard.services import occupancy, structure

router = APIRouter()


class ColumnCreate(Record):
    id: str | None = Field(None, min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    order: int | None = None
    color: str | None = None
    max_tasks: int | None = Field(None, ge=0)
    allows_dynamic_categories: bool = False


class ColumnUpdate(Record):
    name: str | None = Field(None, min_length=1, max_length=200)
    order: int | None = None
    color: str | None = None
    max_tasks: int | None = Field(None, ge=0)
    allows_dynamic_categories: bool | None = None


def _fields(body: Record) -> dict[str, Any]:
    return {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "max_tasks"}


@router.get("")
async def list_columns(manager: BoardManager) -> list[dict[str, Any]]:
    """Columns in board order, each with its categories."""
    state = await manager.snapshot()
    return [c.to_json_dict() for c in sorted(state.columns, key=lambda c: c.order)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_column(body: ColumnCreate, manager: BoardManager) -> dict[str, Any]:
    _, column = await manager.apply_with_result(
        lambda state: structure.create_column(state, _fields(body)),
        action="create_column",
    )
    return column.to_json_dict()


@router.get("/{column_id}")
async def get_column(column_id: str, manager: BoardManager) -> dict[str, Any]:
    state = await manager.snapshot()
    column = state.find_column(column_id)
    if column is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
    return column.to_json_dict()


@router.get("/{column_id}/tasks")
async def get_column_tasks(column_id: str, manager: BoardManager) -> list[dict[str, Any]]:
    state = await manager.snapshot()
    if state.find_column(column_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
    return [t.to_json_dict() for t in occupancy.tasks_in_column(state, column_id)]


@router.put("/{column_id}")
async def update_column(column_id: str, body: ColumnUpdate, manager: BoardManager) -> dict[str, Any]:
    _, column = await manager.apply_with_result(
        lambda state: structure.update_column(state, column_id, _fields(body)),
        action="update_column",
    )
    return column.to_json_dict()


@router.delete("/{column_id}")
async def delete_column(column_id: str, manager: BoardManager) -> dict[str, str]:
    """Delete a column. Its tasks move to the uncategorized column."""
    await manager.apply(lambda state: structure.delete_column(state, column_id), action="delete_column")
    return {"message": "Column deleted successfully"}
