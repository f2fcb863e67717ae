"""Categories API endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Record
from pulseboard.services import structure

router = APIRouter()


class CategoryCreate(Record):
    name: str = Field(..., min_length=1, max_length=200)
    column_id: str
    color: str | None = None
    is_collapsed: bool = False
    order: int | None = None
    is_person: bool = False
    person_name: str | None = None
    is_team_member: bool = False


class CategoryUpdate(Record):
    name: str | None = Field(None, min_length=1, max_length=200)
    color: str | None = None
    is_collapsed: bool | None = None
    order: int | None = None
    person_name: str | None = None
    is_team_member: bool | None = None
    archived: bool | None = None


def _fields(body: Record) -> dict[str, Any]:
    return {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}


@router.get("")
async def list_categories(manager: BoardManager) -> list[dict[str, Any]]:
    state = await manager.snapshot()
    return [c.to_json_dict() for c in structure.list_categories(state)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, manager: BoardManager) -> dict[str, Any]:
    """Create a category. A person in the follow-up column is never duplicated."""
    fields = _fields(body)
    fields["column_id"] = body.column_id
    fields["is_person"] = body.is_person
    fields["is_team_member"] = body.is_team_member
    _, category = await manager.apply_with_result(
        lambda state: structure.create_category(state, fields),
        action="create_category",
    )
    return category.to_json_dict()


@router.get("/{category_id}")
async def get_category(category_id: str, manager: BoardManager) -> dict[str, Any]:
    state = await manager.snapshot()
    category = state.find_category(category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category.to_json_dict()


@router.put("/{category_id}")
async def update_category(category_id: str, body: CategoryUpdate, manager: BoardManager) -> dict[str, Any]:
    _, category = await manager.apply_with_result(
        lambda state: structure.update_category(state, category_id, _fields(body)),
        action="update_category",
    )
    return category.to_json_dict()


@router.delete("/{category_id}")
async def delete_category(category_id: str, manager: BoardManager) -> dict[str, str]:
    """Delete a category. Its tasks stay in the column; a person's tasks are unassigned."""
    await manager.apply(
        lambda state: structure.delete_category(state, category_id),
        action="delete_category",
    )
    return {"message": "Category deleted successfully"}
