"""Integration endpoints for external automation clients.

Every endpoint requires the shared secret in ``X-API-Key`` (health only
checks it when sent) and answers with an envelope: ``{"ok": true, "data":
...}`` on success, ``{"ok": false, "error": "..."}`` otherwise.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

import structlog
from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, ValidationError

from pulseboard.api.deps import API_KEY_HEADER, AppSettings, BoardManager, require_api_key, verify_api_key
from pulseboard.domain.records import Record, utcnow
from pulseboard.exceptions import AuthenticationError, BoardError, ValidationFailedError
from pulseboard.services import team_details

router = APIRouter()
logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


# Request Models
class CheckInRequest(Record):
    name: str
    type: str
    rating: str
    notes: str | None = None
    date: datetime | None = None


class OneOnOneRequest(Record):
    name: str
    discussion_notes: str
    date: datetime | None = None
    follow_ups: list[str] | None = None
    decisions: list[str] | None = None
    morale: str | None = None
    performance: str | None = None


class RedFlagRequest(Record):
    name: str
    flag: str


class AddGoalRequest(Record):
    name: str
    title: str
    description: str | None = None
    target_date: datetime | None = None
    milestones: list[dict[str, Any]] | None = None


class UpdateGoalRequest(Record):
    name: str
    goal_id: str
    status: str | None = None
    notes: str | list[dict[str, Any]] | None = None
    milestones: list[dict[str, Any]] | None = None


async def read_body(request: Request, model: type[ModelT], required: tuple[str, ...]) -> ModelT:
    """Parse and validate a JSON body.

    Missing or empty required fields are reported together, naming every
    required field.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationFailedError("Request body must be valid JSON") from e
    if not isinstance(payload, dict):
        raise ValidationFailedError("Request body must be a JSON object")

    if any(not payload.get(field) for field in required):
        raise ValidationFailedError(f"Missing required fields: {', '.join(required)}")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ValidationFailedError(f"Invalid {location}: {error['msg']}") from e


async def respond(action: str, work: Callable[[], Awaitable[Any]]) -> dict[str, Any]:
    """Run an endpoint body and wrap its result in the success envelope."""
    try:
        return {"ok": True, "data": await work()}
    except BoardError:
        raise
    except Exception as e:
        logger.exception("integration_request_failed", action=action)
        raise BoardError(f"Failed to {action}: {e}", code="INTEGRATION_FAILED") from e


# ============================================================================
# Health (API key optional)
# ============================================================================


@router.get("/health")
async def integration_health(
    settings: AppSettings,
    manager: BoardManager,
    x_api_key: str | None = Header(None, alias=API_KEY_HEADER),
) -> dict[str, Any]:
    if x_api_key is not None and not verify_api_key(settings, x_api_key):
        raise AuthenticationError()

    async def work() -> dict[str, Any]:
        await manager.snapshot()
        return {
            "status": "healthy",
            "storage": settings.storage_backend,
            "timestamp": utcnow().isoformat(),
        }

    return await respond("check health", work)


# ============================================================================
# Authenticated endpoints
# ============================================================================

secured = APIRouter(dependencies=[Depends(require_api_key)])


@secured.post("/log-checkin")
async def log_checkin(request: Request, manager: BoardManager) -> dict[str, Any]:
    """Append a morale or performance check-in and update the current rating."""
    body = await read_body(request, CheckInRequest, ("name", "type", "rating"))

    async def work() -> dict[str, Any]:
        _, (member, check_in) = await manager.apply_with_result(
            lambda state: _split_result(
                team_details.log_checkin(state, body.name, body.type, body.rating, body.notes, body.date)
            ),
            action="log_checkin",
        )
        check_ins = member.morale_check_ins if body.type == "morale" else member.performance_check_ins
        return {
            "checkIn": check_in.to_json_dict(),
            "currentRating": body.rating,
            "totalCheckIns": len(check_ins),
        }

    return await respond("log check-in", work)


@secured.post("/log-one-on-one")
async def log_one_on_one(request: Request, manager: BoardManager) -> dict[str, Any]:
    body = await read_body(request, OneOnOneRequest, ("name", "discussionNotes"))

    async def work() -> dict[str, Any]:
        _, (member, meeting) = await manager.apply_with_result(
            lambda state: _split_result(
                team_details.log_one_on_one(
                    state,
                    body.name,
                    body.discussion_notes,
                    date=body.date,
                    follow_ups=body.follow_ups,
                    decisions=body.decisions,
                    morale=body.morale,
                    performance=body.performance,
                )
            ),
            action="log_one_on_one",
        )
        return {"oneOnOne": meeting.to_json_dict(), "totalOneOnOnes": len(member.one_on_ones)}

    return await respond("log 1:1", work)


@secured.post("/add-red-flag")
async def add_red_flag(request: Request, manager: BoardManager) -> dict[str, Any]:
    body = await read_body(request, RedFlagRequest, ("name", "flag"))

    async def work() -> dict[str, Any]:
        _, (member, flag) = await manager.apply_with_result(
            lambda state: _split_result(team_details.add_red_flag(state, body.name, body.flag)),
            action="add_red_flag",
        )
        return {
            "redFlag": flag.to_json_dict(),
            "totalRedFlags": len(member.red_flags),
            "openRedFlags": len(member.open_red_flags()),
        }

    return await respond("add red flag", work)


@secured.post("/remove-red-flag")
async def remove_red_flag(request: Request, manager: BoardManager) -> dict[str, Any]:
    """Remove red flags matching the given id or text."""
    body = await read_body(request, RedFlagRequest, ("name", "flag"))

    async def work() -> dict[str, Any]:
        _, (member, _removed) = await manager.apply_with_result(
            lambda state: _split_result(team_details.remove_red_flag(state, body.name, body.flag)),
            action="remove_red_flag",
        )
        return {
            "removed": body.flag,
            "totalRedFlags": len(member.red_flags),
            "openRedFlags": len(member.open_red_flags()),
        }

    return await respond("remove red flag", work)


@secured.post("/add-goal")
async def add_goal(request: Request, manager: BoardManager) -> dict[str, Any]:
    body = await read_body(request, AddGoalRequest, ("name", "title"))

    async def work() -> dict[str, Any]:
        _, (member, goal) = await manager.apply_with_result(
            lambda state: _split_result(
                team_details.add_goal(
                    state,
                    body.name,
                    body.title,
                    description=body.description,
                    target_date=body.target_date,
                    milestones=body.milestones,
                )
            ),
            action="add_goal",
        )
        return {"goal": goal.to_json_dict(), "totalGoals": len(member.goals)}

    return await respond("add goal", work)


@secured.post("/update-goal")
async def update_goal(request: Request, manager: BoardManager) -> dict[str, Any]:
    """Patch a goal's status, milestones or notes."""
    body = await read_body(request, UpdateGoalRequest, ("name", "goalId"))

    async def work() -> dict[str, Any]:
        _, (member, goal) = await manager.apply_with_result(
            lambda state: _split_result(
                team_details.update_goal(
                    state,
                    body.name,
                    body.goal_id,
                    status=body.status,
                    notes=body.notes,
                    milestones=body.milestones,
                )
            ),
            action="update_goal",
        )
        return {"goal": goal.to_json_dict(), "totalGoals": len(member.goals)}

    return await respond("update goal", work)


@secured.get("/team-pulse")
async def get_team_pulse(manager: BoardManager) -> dict[str, Any]:
    """Per-member morale, performance, open red flags and 1:1 recency."""

    async def work() -> list[dict[str, Any]]:
        return team_details.team_pulse(await manager.snapshot())

    return await respond("fetch team pulse", work)


@secured.get("/team-member/{name}")
async def get_team_member(name: str, manager: BoardManager) -> dict[str, Any]:
    async def work() -> dict[str, Any]:
        return team_details.get_member(await manager.snapshot(), name).to_json_dict()

    return await respond("fetch team member", work)


def _split_result(result: tuple) -> tuple:
    """Reshape ``(state, member, item)`` into ``(state, (member, item))``."""
    state, member, item = result
    return state, (member, item)


router.include_router(secured)
