"""People API endpoints: person categories of the follow-up column."""

from typing import Any

from fastapi import APIRouter, Query, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Record
from pulseboard.services import people

router = APIRouter()


class PersonCreate(Record):
    name: str = Field(..., min_length=1, max_length=200)


class PersonRename(Record):
    name: str = Field(..., min_length=1, max_length=200)


class PersonArchive(Record):
    archived: bool = True


@router.get("")
async def list_people(
    manager: BoardManager,
    include_idle: bool = Query(False, alias="includeIdle"),
) -> list[dict[str, Any]]:
    """People in display order.

    By default only people with active work are listed; ``includeIdle``
    returns everyone who can be assigned.
    """
    state = await manager.snapshot()
    found = people.assignable_people(state) if include_idle else people.visible_person_categories(state)
    return [p.to_json_dict() for p in found]


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_person(body: PersonCreate, manager: BoardManager) -> dict[str, Any]:
    """Add a follow-up contact; an existing person with that name is returned as is."""
    _, person = await manager.apply_with_result(
        lambda state: people.ensure_person_category(state, body.name),
        action="add_person",
    )
    return person.to_json_dict()


@router.post("/team-members", status_code=status.HTTP_201_CREATED)
async def add_team_member(body: PersonCreate, manager: BoardManager) -> dict[str, Any]:
    _, person = await manager.apply_with_result(
        lambda state: people.add_team_member(state, body.name),
        action="add_team_member",
    )
    return person.to_json_dict()


@router.post("/{category_id}/toggle-team-member")
async def toggle_team_member(category_id: str, manager: BoardManager) -> list[dict[str, Any]]:
    """Flip the team-member flag and return the deduplicated people list."""
    state = await manager.apply(
        lambda state: people.toggle_team_member(state, category_id),
        action="toggle_team_member",
    )
    return [p.to_json_dict() for p in people.assignable_people(state)]


@router.post("/{category_id}/archive")
async def archive_person(category_id: str, body: PersonArchive, manager: BoardManager) -> dict[str, Any]:
    state = await manager.apply(
        lambda state: people.archive_person_category(state, category_id, body.archived),
        action="archive_person",
    )
    return state.find_category(category_id).to_json_dict()


@router.patch("/{category_id}")
async def rename_person(category_id: str, body: PersonRename, manager: BoardManager) -> dict[str, Any]:
    """Rename a person; their tasks and details follow."""
    state = await manager.apply(
        lambda state: people.rename_person(state, category_id, body.name),
        action="rename_person",
    )
    return state.find_category(category_id).to_json_dict()


@router.delete("/{category_id}")
async def delete_person(
    category_id: str,
    manager: BoardManager,
    delete_tasks: bool = Query(False, alias="deleteTasks"),
) -> dict[str, str]:
    """Remove a person, deleting or unassigning their tasks."""
    await manager.apply(
        lambda state: people.delete_person_category(state, category_id, delete_tasks=delete_tasks),
        action="delete_person",
    )
    return {"message": "Person deleted successfully"}
