"""Editing a team member's profile and nested record lists.

Goals, clients, review cycles, 1:1s and growth-goal ratings are plain lists
on the member's details record: entries are appended with a generated id
and timestamp, patched in place by id, or filtered out on delete. Every
change stamps the member's ``updatedAt``.
"""

import calendar
from datetime import datetime, timedelta
from typing import Any

import structlog

from pulseboard.domain.records import (
    AppState,
    ClientDetail,
    GoalMilestone,
    GrowthGoalRating,
    MemberGrowthGoal,
    OneOnOne,
    ReviewCycle,
    TeamMemberDetails,
    TeamMemberGoal,
    utcnow,
)
from pulseboard.exceptions import GoalNotFoundError, MemberRecordNotFoundError, ValidationFailedError
from pulseboard.services.team_details import get_member, validate_record, with_member

logger = structlog.get_logger()

PROFILE_FIELDS = frozenset({"discipline", "level", "team", "notes", "morale", "performance"})
REVIEW_CYCLE_MONTHS = 6


def _add_months(value: datetime, months: int) -> datetime:
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def week_start(value: datetime) -> datetime:
    """Monday 00:00 of the week containing ``value``."""
    monday = value - timedelta(days=value.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


# ============================================================================
# Profile
# ============================================================================


def update_profile(
    state: AppState,
    name: str,
    changes: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    """Patch discipline, level, team, notes or the current ratings.

    Only keys present in ``changes`` are touched; ``None`` clears a field.
    """
    unknown = set(changes) - PROFILE_FIELDS
    if unknown:
        raise ValidationFailedError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    member = get_member(state, name)
    now = now or utcnow()

    updated = validate_record(TeamMemberDetails, {**member.model_dump(), **changes}, "profile")
    logger.info("member_profile_updated", member=member.name, fields=sorted(changes))
    state = with_member(state, updated, now)
    return state, state.team_member_details[member.name]


# ============================================================================
# Goals
# ============================================================================


def _require_goal(member: TeamMemberDetails, goal_id: str) -> TeamMemberGoal:
    goal = next((g for g in member.goals if g.id == goal_id), None)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return goal


def delete_goal(
    state: AppState,
    name: str,
    goal_id: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    member = get_member(state, name)
    _require_goal(member, goal_id)
    member = member.model_copy(update={"goals": [g for g in member.goals if g.id != goal_id]})
    logger.info("goal_deleted", member=member.name, goal_id=goal_id)
    return with_member(state, member, now or utcnow()), member


def add_goal_milestone(
    state: AppState,
    name: str,
    goal_id: str,
    milestone: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, GoalMilestone]:
    member = get_member(state, name)
    goal = _require_goal(member, goal_id)
    added = validate_record(GoalMilestone, milestone, "milestone")

    goal = goal.model_copy(update={"milestones": [*goal.milestones, added]})
    member = member.model_copy(update={"goals": [goal if g.id == goal_id else g for g in member.goals]})
    logger.info("goal_milestone_added", member=member.name, goal_id=goal_id, milestone_id=added.id)
    return with_member(state, member, now or utcnow()), member, added


# ============================================================================
# Clients
# ============================================================================


def add_client(
    state: AppState,
    name: str,
    client: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    """Add a client to the member's list with an empty detail sheet.

    Adding a client already on the list returns the state unchanged.
    """
    client = client.strip()
    if not client:
        raise ValidationFailedError("Client name is required")
    member = get_member(state, name)
    if client in member.clients:
        return state, member
    now = now or utcnow()

    client_details = dict(member.client_details)
    client_details.setdefault(client, ClientDetail(client_name=client, updated_at=now))
    member = member.model_copy(
        update={"clients": [*member.clients, client], "client_details": client_details}
    )
    logger.info("client_added", member=member.name, client=client)
    return with_member(state, member, now), member


def remove_client(
    state: AppState,
    name: str,
    client: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    """Drop a client from the list. Its detail sheet is kept."""
    member = get_member(state, name)
    if client not in member.clients:
        raise MemberRecordNotFoundError("client", client)
    member = member.model_copy(update={"clients": [c for c in member.clients if c != client]})
    logger.info("client_removed", member=member.name, client=client)
    return with_member(state, member, now or utcnow()), member


def update_client_detail(
    state: AppState,
    name: str,
    client: str,
    changes: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, ClientDetail]:
    """Patch the detail sheet (summary, problems, opportunities, notes) of a client."""
    member = get_member(state, name)
    if client not in member.clients and client not in member.client_details:
        raise MemberRecordNotFoundError("client", client)
    now = now or utcnow()

    current = member.client_details.get(client)
    base = current.model_dump() if current is not None else {}
    detail = validate_record(
        ClientDetail,
        {**base, **changes, "client_name": client, "updated_at": now},
        "client detail",
    )
    member = member.model_copy(update={"client_details": {**member.client_details, client: detail}})
    logger.info("client_detail_updated", member=member.name, client=client, fields=sorted(changes))
    return with_member(state, member, now), member, detail


# ============================================================================
# Review cycles
# ============================================================================


def _require_review(member: TeamMemberDetails, review_id: str) -> ReviewCycle:
    review = next((r for r in member.review_cycles if r.id == review_id), None)
    if review is None:
        raise MemberRecordNotFoundError("review cycle", review_id)
    return review


def add_review_cycle(
    state: AppState,
    name: str,
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    notes: str | None = None,
    rating: int | None = None,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, ReviewCycle]:
    """Open a review cycle; it ends six months after it starts unless given."""
    member = get_member(state, name)
    now = now or utcnow()
    start_date = start_date or now
    review = validate_record(
        ReviewCycle,
        {
            "start_date": start_date,
            "end_date": end_date or _add_months(start_date, REVIEW_CYCLE_MONTHS),
            "notes": notes or None,
            "rating": rating,
            "created_at": now,
        },
        "review cycle",
    )
    if review.end_date < review.start_date:
        raise ValidationFailedError("Review cycle cannot end before it starts")

    member = member.model_copy(update={"review_cycles": [*member.review_cycles, review]})
    logger.info("review_cycle_added", member=member.name, review_id=review.id)
    return with_member(state, member, now), member, review


def update_review_cycle(
    state: AppState,
    name: str,
    review_id: str,
    changes: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, ReviewCycle]:
    member = get_member(state, name)
    review = _require_review(member, review_id)
    updated = validate_record(ReviewCycle, {**review.model_dump(), **changes, "id": review_id}, "review cycle")
    if updated.end_date < updated.start_date:
        raise ValidationFailedError("Review cycle cannot end before it starts")

    member = member.model_copy(
        update={"review_cycles": [updated if r.id == review_id else r for r in member.review_cycles]}
    )
    logger.info("review_cycle_updated", member=member.name, review_id=review_id)
    return with_member(state, member, now or utcnow()), member, updated


def delete_review_cycle(
    state: AppState,
    name: str,
    review_id: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    member = get_member(state, name)
    _require_review(member, review_id)
    member = member.model_copy(
        update={"review_cycles": [r for r in member.review_cycles if r.id != review_id]}
    )
    logger.info("review_cycle_deleted", member=member.name, review_id=review_id)
    return with_member(state, member, now or utcnow()), member


# ============================================================================
# 1:1s
# ============================================================================


def _require_one_on_one(member: TeamMemberDetails, meeting_id: str) -> OneOnOne:
    meeting = next((m for m in member.one_on_ones if m.id == meeting_id), None)
    if meeting is None:
        raise MemberRecordNotFoundError("one on one", meeting_id)
    return meeting


def update_one_on_one(
    state: AppState,
    name: str,
    meeting_id: str,
    changes: dict[str, Any],
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, OneOnOne]:
    """Patch the notes, action items or ratings stored on a 1:1.

    Check-ins derived when the meeting was logged are left as they were.
    """
    member = get_member(state, name)
    meeting = _require_one_on_one(member, meeting_id)
    updated = validate_record(OneOnOne, {**meeting.model_dump(), **changes, "id": meeting_id}, "1:1")
    member = member.model_copy(
        update={"one_on_ones": [updated if m.id == meeting_id else m for m in member.one_on_ones]}
    )
    logger.info("one_on_one_updated", member=member.name, meeting_id=meeting_id)
    return with_member(state, member, now or utcnow()), member, updated


def delete_one_on_one(
    state: AppState,
    name: str,
    meeting_id: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails]:
    member = get_member(state, name)
    _require_one_on_one(member, meeting_id)
    member = member.model_copy(
        update={"one_on_ones": [m for m in member.one_on_ones if m.id != meeting_id]}
    )
    logger.info("one_on_one_deleted", member=member.name, meeting_id=meeting_id)
    return with_member(state, member, now or utcnow()), member


# ============================================================================
# Growth goals
# ============================================================================


def applicable_role_goal_ids(state: AppState, member: TeamMemberDetails) -> list[str]:
    """Catalogue goals matching the member's discipline (or team) and level."""
    discipline = member.discipline or member.team
    if not discipline or not member.level:
        return []
    return [
        goal.id
        for goal in state.role_growth_goals
        if goal.discipline == discipline and goal.level == member.level
    ]


def sync_growth_goals(
    state: AppState,
    name: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, list[MemberGrowthGoal]]:
    """Track every applicable catalogue goal the member is not tracking yet.

    Returns the same state object when nothing was added.
    """
    member = get_member(state, name)
    tracked = {g.goal_id for g in member.growth_goals}
    added = [
        MemberGrowthGoal(goal_id=goal_id)
        for goal_id in applicable_role_goal_ids(state, member)
        if goal_id not in tracked
    ]
    if not added:
        return state, member, []

    member = member.model_copy(update={"growth_goals": [*member.growth_goals, *added]})
    logger.info("growth_goals_synced", member=member.name, added=[g.goal_id for g in added])
    return with_member(state, member, now or utcnow()), member, added


def rate_growth_goal(
    state: AppState,
    name: str,
    goal_id: str,
    rating: int,
    notes: str | None = None,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, GrowthGoalRating]:
    """Record this week's 1-5 rating for a tracked growth goal.

    Ratings are kept newest week first and the latest becomes the current
    rating.
    """
    member = get_member(state, name)
    growth_goal = next((g for g in member.growth_goals if g.goal_id == goal_id), None)
    if growth_goal is None:
        raise MemberRecordNotFoundError("growth goal", goal_id)
    now = now or utcnow()

    entry = validate_record(
        GrowthGoalRating,
        {"week_start_date": week_start(now), "rating": rating, "notes": notes or None, "created_at": now},
        "rating",
    )
    ratings = sorted([*growth_goal.ratings, entry], key=lambda r: r.week_start_date, reverse=True)
    growth_goal = growth_goal.model_copy(update={"ratings": ratings, "current_rating": entry.rating})
    member = member.model_copy(
        update={"growth_goals": [growth_goal if g.goal_id == goal_id else g for g in member.growth_goals]}
    )
    logger.info("growth_goal_rated", member=member.name, goal_id=goal_id, rating=entry.rating)
    return with_member(state, member, now), member, entry
