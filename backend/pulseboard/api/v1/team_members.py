"""Team member API endpoints: profile, goals, clients, reviews, 1:1s and growth goals."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, status
from pydantic import Field

from pulseboard.api.deps import BoardManager
from pulseboard.domain.records import Rating, Record
from pulseboard.services import member_records, team_details

router = APIRouter()


# Request Models
class ProfileUpdate(Record):
    discipline: str | None = None
    level: str | None = None
    team: str | None = None
    notes: str | None = None
    morale: Rating | None = None
    performance: Rating | None = None


class GoalCreate(Record):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    target_date: datetime | None = None
    milestones: list[dict[str, Any]] | None = None


class GoalUpdate(Record):
    status: str | None = None
    notes: str | list[dict[str, Any]] | None = None
    milestones: list[dict[str, Any]] | None = None


class MilestoneCreate(Record):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    target_date: datetime | None = None


class GoalNoteCreate(Record):
    note: str = Field(..., min_length=1)


class ClientCreate(Record):
    client: str = Field(..., min_length=1, max_length=200)


class ClientDetailUpdate(Record):
    summary: str | None = None
    problems: list[str] | None = None
    opportunities: list[str] | None = None
    notes: str | None = None


class ReviewCycleCreate(Record):
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None
    rating: int | None = Field(None, ge=1, le=5)


class ReviewCycleUpdate(Record):
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None
    rating: int | None = Field(None, ge=1, le=5)


class OneOnOneUpdate(Record):
    date: datetime | None = None
    notes: str | None = None
    action_items: list[str] | None = None
    discussion_notes: str | None = None
    follow_ups: list[str] | None = None
    decisions: list[str] | None = None


class GrowthRatingCreate(Record):
    rating: int = Field(..., ge=1, le=5)
    notes: str | None = None


def _member_and_item(result: tuple) -> tuple:
    """Reshape ``(state, member, item)`` into ``(state, (member, item))``."""
    state, member, item = result
    return state, (member, item)


def _changes(body: Record, *, required: frozenset[str] = frozenset()) -> dict[str, Any]:
    # Fields in ``required`` cannot be cleared; the rest can
    return {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k not in required}


# ============================================================================
# Members and profile
# ============================================================================


@router.get("")
async def list_team_members(manager: BoardManager) -> list[dict[str, Any]]:
    state = await manager.snapshot()
    members = sorted(state.team_member_details.values(), key=lambda m: m.name.casefold())
    return [member.to_json_dict() for member in members]


@router.get("/{name}")
async def get_team_member(name: str, manager: BoardManager) -> dict[str, Any]:
    return team_details.get_member(await manager.snapshot(), name).to_json_dict()


@router.patch("/{name}")
async def update_profile(name: str, body: ProfileUpdate, manager: BoardManager) -> dict[str, Any]:
    """Patch profile fields; fields sent as ``null`` are cleared."""
    changes = _changes(body)
    _, member = await manager.apply_with_result(
        lambda state: member_records.update_profile(state, name, changes),
        action="update_profile",
    )
    return member.to_json_dict()


# ============================================================================
# Goals
# ============================================================================


@router.post("/{name}/goals", status_code=status.HTTP_201_CREATED)
async def add_goal(name: str, body: GoalCreate, manager: BoardManager) -> dict[str, Any]:
    _, (_member, goal) = await manager.apply_with_result(
        lambda state: _member_and_item(
            team_details.add_goal(
                state,
                name,
                body.title,
                description=body.description,
                target_date=body.target_date,
                milestones=body.milestones,
            )
        ),
        action="add_goal",
    )
    return goal.to_json_dict()


@router.put("/{name}/goals/{goal_id}")
async def update_goal(name: str, goal_id: str, body: GoalUpdate, manager: BoardManager) -> dict[str, Any]:
    _, (_member, goal) = await manager.apply_with_result(
        lambda state: _member_and_item(
            team_details.update_goal(
                state,
                name,
                goal_id,
                status=body.status,
                notes=body.notes,
                milestones=body.milestones,
            )
        ),
        action="update_goal",
    )
    return goal.to_json_dict()


@router.delete("/{name}/goals/{goal_id}")
async def delete_goal(name: str, goal_id: str, manager: BoardManager) -> dict[str, str]:
    await manager.apply(
        lambda state: member_records.delete_goal(state, name, goal_id)[0],
        action="delete_goal",
    )
    return {"message": "Goal deleted successfully"}


@router.post("/{name}/goals/{goal_id}/milestones", status_code=status.HTTP_201_CREATED)
async def add_goal_milestone(
    name: str,
    goal_id: str,
    body: MilestoneCreate,
    manager: BoardManager,
) -> dict[str, Any]:
    milestone = body.model_dump(exclude_unset=True)
    _, (_member, added) = await manager.apply_with_result(
        lambda state: _member_and_item(member_records.add_goal_milestone(state, name, goal_id, milestone)),
        action="add_goal_milestone",
    )
    return added.to_json_dict()


@router.post("/{name}/goals/{goal_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_goal_note(name: str, goal_id: str, body: GoalNoteCreate, manager: BoardManager) -> dict[str, Any]:
    """Append a dated note to a goal."""
    _, (_member, goal) = await manager.apply_with_result(
        lambda state: _member_and_item(team_details.update_goal(state, name, goal_id, notes=body.note)),
        action="add_goal_note",
    )
    return goal.notes[-1].to_json_dict()


# ============================================================================
# Clients
# ============================================================================


@router.post("/{name}/clients", status_code=status.HTTP_201_CREATED)
async def add_client(name: str, body: ClientCreate, manager: BoardManager) -> dict[str, Any]:
    _, member = await manager.apply_with_result(
        lambda state: member_records.add_client(state, name, body.client),
        action="add_client",
    )
    return member.to_json_dict()


@router.put("/{name}/clients/{client}")
async def update_client_detail(
    name: str,
    client: str,
    body: ClientDetailUpdate,
    manager: BoardManager,
) -> dict[str, Any]:
    changes = _changes(body, required=frozenset({"problems", "opportunities"}))
    _, (_member, detail) = await manager.apply_with_result(
        lambda state: _member_and_item(member_records.update_client_detail(state, name, client, changes)),
        action="update_client_detail",
    )
    return detail.to_json_dict()


@router.delete("/{name}/clients/{client}")
async def remove_client(name: str, client: str, manager: BoardManager) -> dict[str, Any]:
    _, member = await manager.apply_with_result(
        lambda state: member_records.remove_client(state, name, client),
        action="remove_client",
    )
    return member.to_json_dict()


# ============================================================================
# Review cycles
# ============================================================================


@router.post("/{name}/review-cycles", status_code=status.HTTP_201_CREATED)
async def add_review_cycle(name: str, body: ReviewCycleCreate, manager: BoardManager) -> dict[str, Any]:
    """Open a review cycle; ``endDate`` defaults to six months after the start."""
    _, (_member, review) = await manager.apply_with_result(
        lambda state: _member_and_item(
            member_records.add_review_cycle(
                state,
                name,
                start_date=body.start_date,
                end_date=body.end_date,
                notes=body.notes,
                rating=body.rating,
            )
        ),
        action="add_review_cycle",
    )
    return review.to_json_dict()


@router.put("/{name}/review-cycles/{review_id}")
async def update_review_cycle(
    name: str,
    review_id: str,
    body: ReviewCycleUpdate,
    manager: BoardManager,
) -> dict[str, Any]:
    changes = _changes(body, required=frozenset({"start_date", "end_date"}))
    _, (_member, review) = await manager.apply_with_result(
        lambda state: _member_and_item(member_records.update_review_cycle(state, name, review_id, changes)),
        action="update_review_cycle",
    )
    return review.to_json_dict()


@router.delete("/{name}/review-cycles/{review_id}")
async def delete_review_cycle(name: str, review_id: str, manager: BoardManager) -> dict[str, str]:
    await manager.apply(
        lambda state: member_records.delete_review_cycle(state, name, review_id)[0],
        action="delete_review_cycle",
    )
    return {"message": "Review cycle deleted successfully"}


# ============================================================================
# 1:1s
# ============================================================================


@router.put("/{name}/one-on-ones/{meeting_id}")
async def update_one_on_one(
    name: str,
    meeting_id: str,
    body: OneOnOneUpdate,
    manager: BoardManager,
) -> dict[str, Any]:
    changes = _changes(body, required=frozenset({"date", "action_items", "follow_ups", "decisions"}))
    _, (_member, meeting) = await manager.apply_with_result(
        lambda state: _member_and_item(member_records.update_one_on_one(state, name, meeting_id, changes)),
        action="update_one_on_one",
    )
    return meeting.to_json_dict()


@router.delete("/{name}/one-on-ones/{meeting_id}")
async def delete_one_on_one(name: str, meeting_id: str, manager: BoardManager) -> dict[str, str]:
    await manager.apply(
        lambda state: member_records.delete_one_on_one(state, name, meeting_id)[0],
        action="delete_one_on_one",
    )
    return {"message": "1:1 deleted successfully"}


# ============================================================================
# Growth goals
# ============================================================================


@router.post("/{name}/growth-goals/sync")
async def sync_growth_goals(name: str, manager: BoardManager) -> list[dict[str, Any]]:
    """Start tracking the catalogue goals for the member's discipline and level."""
    _, (member, _added) = await manager.apply_with_result(
        lambda state: _member_and_item(member_records.sync_growth_goals(state, name)),
        action="sync_growth_goals",
    )
    return [goal.to_json_dict() for goal in member.growth_goals]


@router.post("/{name}/growth-goals/{goal_id}/ratings", status_code=status.HTTP_201_CREATED)
async def rate_growth_goal(
    name: str,
    goal_id: str,
    body: GrowthRatingCreate,
    manager: BoardManager,
) -> dict[str, Any]:
    _, (_member, rating) = await manager.apply_with_result(
        lambda state: _member_and_item(
            member_records.rate_growth_goal(state, name, goal_id, body.rating, body.notes)
        ),
        action="rate_growth_goal",
    )
    return rating.to_json_dict()
