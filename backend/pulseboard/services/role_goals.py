"""Role growth-goal catalogue: goal templates per discipline and level."""

from datetime import datetime
from typing import Any

import structlog

from pulseboard.domain.records import AppState, RoleGrowthGoal, utcnow
from pulseboard.exceptions import RoleGoalNotFoundError, ValidationFailedError
from pulseboard.services.team_details import validate_record

logger = structlog.get_logger()

REQUIRED_FIELDS = ("discipline", "level", "title")


def _require_role_goal(state: AppState, goal_id: str) -> RoleGrowthGoal:
    goal = next((g for g in state.role_growth_goals if g.id == goal_id), None)
    if goal is None:
        raise RoleGoalNotFoundError(goal_id)
    return goal


def _check_required(fields: dict[str, Any]) -> None:
    blank = [field for field in REQUIRED_FIELDS if field in fields and not str(fields[field] or "").strip()]
    if blank:
        raise ValidationFailedError(f"Missing required fields: {', '.join(blank)}")


def list_role_goals(
    state: AppState,
    discipline: str | None = None,
    level: str | None = None,
) -> list[RoleGrowthGoal]:
    return [
        goal
        for goal in state.role_growth_goals
        if (discipline is None or goal.discipline == discipline) and (level is None or goal.level == level)
    ]


def create_role_goal(
    state: AppState,
    fields: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, RoleGrowthGoal]:
    _check_required({field: fields.get(field) for field in REQUIRED_FIELDS})
    now = now or utcnow()
    goal = validate_record(RoleGrowthGoal, {**fields, "created_at": now, "updated_at": now}, "role growth goal")
    logger.info("role_goal_created", goal_id=goal.id, discipline=goal.discipline, level=goal.level)
    return state.model_copy(update={"role_growth_goals": [*state.role_growth_goals, goal]}), goal


def update_role_goal(
    state: AppState,
    goal_id: str,
    fields: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, RoleGrowthGoal]:
    goal = _require_role_goal(state, goal_id)
    _check_required(fields)
    updated = validate_record(
        RoleGrowthGoal,
        {**goal.model_dump(), **fields, "id": goal_id, "updated_at": now or utcnow()},
        "role growth goal",
    )
    goals = [updated if g.id == goal_id else g for g in state.role_growth_goals]
    logger.info("role_goal_updated", goal_id=goal_id, fields=sorted(fields))
    return state.model_copy(update={"role_growth_goals": goals}), updated


def delete_role_goal(state: AppState, goal_id: str) -> AppState:
    """Remove a catalogue goal. Members keep the ratings they logged against it."""
    _require_role_goal(state, goal_id)
    logger.info("role_goal_deleted", goal_id=goal_id)
    return state.model_copy(
        update={"role_growth_goals": [g for g in state.role_growth_goals if g.id != goal_id]}
    )
