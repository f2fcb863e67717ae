"""Qualitative team-member data: check-ins, 1:1s, red flags and goals.

These operations back the integration endpoints. Each one looks the member
up by name, appends or patches one record list, stamps ``updatedAt`` and
returns the new board state together with what changed.
"""

from datetime import datetime
from typing import Any, Literal, TypeVar

import structlog
from pydantic import ValidationError

from pulseboard.domain.constants import RATINGS
from pulseboard.domain.records import (
    AppState,
    GoalMilestone,
    GoalNote,
    MoraleCheckIn,
    OneOnOne,
    PerformanceCheckIn,
    Record,
    RedFlag,
    TeamMemberDetails,
    TeamMemberGoal,
    utcnow,
)
from pulseboard.exceptions import GoalNotFoundError, MemberNotFoundError, ValidationFailedError

logger = structlog.get_logger()

CheckInType = Literal["morale", "performance"]
RecordT = TypeVar("RecordT", bound=Record)

SECONDS_PER_DAY = 24 * 60 * 60


def get_member(state: AppState, name: str) -> TeamMemberDetails:
    """Details record for a member; exact name first, then ignoring case."""
    member = state.team_member_details.get(name)
    if member is not None:
        return member
    wanted = name.strip().casefold()
    for key, member in state.team_member_details.items():
        if key.strip().casefold() == wanted:
            return member
    raise MemberNotFoundError(name)


def with_member(state: AppState, member: TeamMemberDetails, now: datetime) -> AppState:
    member = member.model_copy(update={"updated_at": now})
    details = {
        key: (member if value.name == member.name else value)
        for key, value in state.team_member_details.items()
    }
    return state.model_copy(update={"team_member_details": details})


def validate_record(model: type[RecordT], data: dict[str, Any], what: str) -> RecordT:
    """Build a record from client data; invalid values become a 400."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(f"Invalid {what}: {e.errors()[0]['msg']}") from e


def _check_rating(rating: str | None) -> None:
    if rating is not None and rating not in RATINGS:
        raise ValidationFailedError(f"Rating must be one of: {', '.join(RATINGS)}")


def _check_in(kind: str, rating: str, notes: str | None, date: datetime, now: datetime):
    if kind == "morale":
        return MoraleCheckIn(date=date, morale=rating, notes=notes, created_at=now)
    return PerformanceCheckIn(date=date, performance=rating, notes=notes, created_at=now)


def log_checkin(
    state: AppState,
    name: str,
    kind: CheckInType,
    rating: str,
    notes: str | None = None,
    date: datetime | None = None,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, MoraleCheckIn | PerformanceCheckIn]:
    """Append a morale or performance check-in and make it the current rating."""
    if kind not in ("morale", "performance"):
        raise ValidationFailedError('Type must be "morale" or "performance"')
    _check_rating(rating)
    member = get_member(state, name)
    now = now or utcnow()

    check_in = _check_in(kind, rating, notes or None, date or now, now)
    if kind == "morale":
        member = member.model_copy(
            update={"morale": rating, "morale_check_ins": [*member.morale_check_ins, check_in]}
        )
    else:
        member = member.model_copy(
            update={
                "performance": rating,
                "performance_check_ins": [*member.performance_check_ins, check_in],
            }
        )

    logger.info("checkin_logged", member=member.name, type=kind, rating=rating)
    return with_member(state, member, now), member, check_in


def log_one_on_one(
    state: AppState,
    name: str,
    discussion_notes: str,
    *,
    date: datetime | None = None,
    follow_ups: list[str] | None = None,
    decisions: list[str] | None = None,
    morale: str | None = None,
    performance: str | None = None,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, OneOnOne]:
    """Record a 1:1.

    A morale or performance rating given in the meeting is also logged as a
    check-in dated like the meeting, and becomes the member's current rating.
    """
    _check_rating(morale)
    _check_rating(performance)
    member = get_member(state, name)
    now = now or utcnow()
    date = date or now

    meeting = OneOnOne(
        date=date,
        discussion_notes=discussion_notes,
        follow_ups=follow_ups or [],
        decisions=decisions or [],
        morale=morale or None,
        performance=performance or None,
        created_at=now,
    )
    updates: dict[str, Any] = {"one_on_ones": [*member.one_on_ones, meeting]}
    derived_notes = f"From 1:1 on {date.date().isoformat()}"
    if morale:
        updates["morale"] = morale
        updates["morale_check_ins"] = [
            *member.morale_check_ins,
            _check_in("morale", morale, derived_notes, date, now),
        ]
    if performance:
        updates["performance"] = performance
        updates["performance_check_ins"] = [
            *member.performance_check_ins,
            _check_in("performance", performance, derived_notes, date, now),
        ]
    member = member.model_copy(update=updates)

    logger.info("one_on_one_logged", member=member.name, morale=morale, performance=performance)
    return with_member(state, member, now), member, meeting


def add_red_flag(
    state: AppState,
    name: str,
    text: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, RedFlag]:
    member = get_member(state, name)
    now = now or utcnow()
    flag = RedFlag(text=text, date=now, created_at=now)
    member = member.model_copy(update={"red_flags": [*member.red_flags, flag]})
    logger.info("red_flag_added", member=member.name, flag_id=flag.id)
    return with_member(state, member, now), member, flag


def remove_red_flag(
    state: AppState,
    name: str,
    flag: str,
    *,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, list[RedFlag]]:
    """Drop every red flag whose id or text equals ``flag``."""
    member = get_member(state, name)
    now = now or utcnow()
    removed = [f for f in member.red_flags if flag in (f.id, f.text)]
    member = member.model_copy(
        update={"red_flags": [f for f in member.red_flags if flag not in (f.id, f.text)]}
    )
    logger.info("red_flag_removed", member=member.name, flag=flag, removed=len(removed))
    return with_member(state, member, now), member, removed


def add_goal(
    state: AppState,
    name: str,
    title: str,
    *,
    description: str | None = None,
    target_date: datetime | None = None,
    milestones: list[dict[str, Any]] | None = None,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, TeamMemberGoal]:
    member = get_member(state, name)
    now = now or utcnow()
    goal = TeamMemberGoal(
        title=title,
        description=description or None,
        target_date=target_date,
        created_at=now,
        milestones=[validate_record(GoalMilestone, m, "milestone") for m in milestones or []],
    )
    member = member.model_copy(update={"goals": [*member.goals, goal]})
    logger.info("goal_added", member=member.name, goal_id=goal.id)
    return with_member(state, member, now), member, goal


def update_goal(
    state: AppState,
    name: str,
    goal_id: str,
    *,
    status: str | None = None,
    notes: str | list[dict[str, Any]] | None = None,
    milestones: list[dict[str, Any]] | None = None,
    now: datetime | None = None,
) -> tuple[AppState, TeamMemberDetails, TeamMemberGoal]:
    """Patch one goal.

    ``milestones`` replaces the list. ``notes`` replaces the list when it is
    one, and a plain string is appended as a new note. ``completedAt`` is
    stamped the first time the goal reaches ``completed``.
    """
    member = get_member(state, name)
    goal = next((g for g in member.goals if g.id == goal_id), None)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    now = now or utcnow()

    updates: dict[str, Any] = {}
    if status:
        updates["status"] = status
        if status == "completed" and goal.completed_at is None:
            updates["completed_at"] = now
    if milestones is not None:
        updates["milestones"] = milestones
    if isinstance(notes, list):
        updates["notes"] = notes
    elif notes is not None:
        updates["notes"] = [*goal.notes, GoalNote(note=notes, date=now, created_at=now)]

    # Validate so bad statuses or malformed milestones are rejected, not stored
    updated = validate_record(TeamMemberGoal, {**goal.model_dump(), **updates}, "goal update")
    member = member.model_copy(
        update={"goals": [updated if g.id == goal_id else g for g in member.goals]}
    )
    logger.info("goal_updated", member=member.name, goal_id=goal_id, status=updated.status)
    return with_member(state, member, now), member, updated


def team_pulse(state: AppState, *, now: datetime | None = None) -> list[dict[str, Any]]:
    """One summary row per member, sorted by name."""
    now = now or utcnow()
    pulse = []
    for member in sorted(state.team_member_details.values(), key=lambda m: m.name):
        days_since = None
        dates = [meeting.date or meeting.created_at for meeting in member.one_on_ones]
        if dates:
            elapsed = (now - max(dates)).total_seconds()
            days_since = int(elapsed // SECONDS_PER_DAY)
        pulse.append(
            {
                "name": member.name,
                "morale": member.morale,
                "performance": member.performance,
                "redFlags": len(member.open_red_flags()),
                "daysSinceLastOneOnOne": days_since,
                "lastUpdated": member.updated_at.isoformat(),
            }
        )
    return pulse
