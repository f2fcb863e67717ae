"""Person categories in the follow-up column.

People a task can be delegated to live as categories of the follow-up column
(``isPerson=True``). A person is either a team member or an outside contact,
and the same human must never appear twice. Every operation that can
introduce a duplicate ends with :func:`reconcile_people`.
"""

import random
from typing import Iterable

import structlog

from pulseboard.domain.constants import PERSON_COLORS
from pulseboard.domain.intents import UNASSIGN
from pulseboard.domain.records import (
    AppState,
    Category,
    Column,
    Task,
    TeamMemberDetails,
    is_active_task,
    new_id,
    utcnow,
)
from pulseboard.exceptions import CategoryNotFoundError, ValidationFailedError
from pulseboard.services.placement import relocate_task

logger = structlog.get_logger()


def person_key(name: str) -> str:
    return name.strip().casefold()


def is_assigned_to(task: Task, category: Category) -> bool:
    """Whether a task is assigned to the person behind a category.

    The stable ``assigneeId`` is authoritative; the display name is the
    fallback for tasks written before ids were tracked.
    """
    if task.assignee_id is not None:
        return task.assignee_id == category.id
    return bool(task.assigned_to) and category.matches_person(task.assigned_to)


def sort_person_categories(categories: Iterable[Category]) -> list[Category]:
    """Team members first, then by order, then by name."""
    return sorted(
        categories,
        key=lambda c: (not c.is_team_member, c.order, c.display_name.casefold()),
    )


def _require_follow_up(state: AppState) -> Column:
    column = state.follow_up_column()
    if column is None:
        raise ValidationFailedError("Board has no follow-up column")
    return column


def _require_person(state: AppState, category_id: str) -> Category:
    column = _require_follow_up(state)
    for category in column.categories:
        if category.id == category_id and category.is_person:
            return category
    raise CategoryNotFoundError(category_id)


def _with_category(state: AppState, updated: Category) -> AppState:
    column = state.find_column(updated.column_id)
    categories = [updated if c.id == updated.id else c for c in column.categories]
    return state.replace_column(column.model_copy(update={"categories": categories}))


# Details list fields whose entries carry their own ids
MEMBER_RECORD_LISTS = (
    "goals",
    "morale_check_ins",
    "performance_check_ins",
    "red_flags",
    "review_cycles",
    "one_on_ones",
)
MEMBER_PROFILE_FIELDS = ("discipline", "level", "team", "morale", "performance", "notes")


def merge_member_details(kept: TeamMemberDetails, extra: TeamMemberDetails) -> TeamMemberDetails:
    """Fold ``extra`` into ``kept``; profile fields already set on ``kept`` win."""
    updates: dict = {field: [*getattr(kept, field), *getattr(extra, field)] for field in MEMBER_RECORD_LISTS}
    known_goals = {g.goal_id for g in kept.growth_goals}
    updates["growth_goals"] = [*kept.growth_goals, *(g for g in extra.growth_goals if g.goal_id not in known_goals)]
    updates["clients"] = list(dict.fromkeys([*kept.clients, *extra.clients]))
    updates["client_details"] = {**extra.client_details, **kept.client_details}
    for field in MEMBER_PROFILE_FIELDS:
        if getattr(kept, field) is None:
            updates[field] = getattr(extra, field)
    updates["updated_at"] = max(kept.updated_at, extra.updated_at)
    return kept.model_copy(update=updates)


def _rekey_details(details: dict[str, TeamMemberDetails], renames: dict[str, str]) -> dict[str, TeamMemberDetails]:
    """Move details records to new names, merging into any record already there."""
    details = dict(details)
    for old_name, new_name in renames.items():
        if old_name == new_name or old_name not in details:
            continue
        record = details.pop(old_name)
        if new_name in details:
            details[new_name] = merge_member_details(details[new_name], record)
        else:
            details[new_name] = record.model_copy(update={"name": new_name})
    return details


# ============================================================================
# Reconciliation
# ============================================================================


def _choose_survivor(group: list[Category], preferred_id: str | None) -> Category:
    for category in group:
        if category.id == preferred_id and category.is_team_member:
            return category
    team_members = [c for c in group if c.is_team_member]
    if team_members:
        live = [c for c in team_members if not c.archived]
        return (live or team_members)[0]
    live = [c for c in group if not c.archived]
    return (live or group)[0]


def _survivors(categories: list[Category], preferred_id: str | None) -> dict[str, str]:
    """Map every person category id to the id of the category that survives."""
    groups: dict[str, list[Category]] = {}
    for category in categories:
        if category.is_person:
            groups.setdefault(person_key(category.display_name), []).append(category)

    survivor_of: dict[str, str] = {}
    for group in groups.values():
        survivor = _choose_survivor(group, preferred_id)
        for category in group:
            survivor_of[category.id] = survivor.id
    return survivor_of


def reconcile_person_categories(
    categories: list[Category],
    preferred_id: str | None = None,
) -> list[Category]:
    """Collapse person categories that name the same human into one.

    For each case-insensitive person name exactly one category survives:
    ``preferred_id`` when it is a team member, otherwise an existing team
    member, otherwise a single non-team entry. Non-person categories are
    kept as they are. Survivors keep their relative order, and the result
    is stable under repeated application.
    """
    survivor_of = _survivors(categories, preferred_id)
    return [c for c in categories if not c.is_person or survivor_of[c.id] == c.id]


def reconcile_people(state: AppState, preferred_id: str | None = None) -> AppState:
    """Deduplicate the follow-up column.

    Tasks are re-pointed at the surviving categories and details records of
    dropped entries are merged into the survivor's record.
    """
    column = state.follow_up_column()
    if column is None:
        return state

    survivor_of = _survivors(column.categories, preferred_id)
    dropped = {cid: sid for cid, sid in survivor_of.items() if cid != sid}
    if not dropped:
        return state

    by_id = {c.id: c for c in column.categories}
    tasks = []
    for task in state.tasks:
        updates = {}
        if task.category_id in dropped:
            survivor_id = dropped[task.category_id]
            updates.update(category_id=survivor_id, category=survivor_id)
        if task.assignee_id in dropped:
            survivor_id = dropped[task.assignee_id]
            updates.update(
                assignee_id=survivor_id,
                assigned_to=by_id[survivor_id].display_name,
            )
        tasks.append(task.model_copy(update=updates) if updates else task)

    # The dropped person's details follow them to the surviving name
    details = _rekey_details(
        state.team_member_details,
        {by_id[cid].display_name: by_id[sid].display_name for cid, sid in dropped.items()},
    )

    logger.info("person_categories_reconciled", merged=sorted(dropped))
    categories = reconcile_person_categories(column.categories, preferred_id)
    state = state.replace_column(column.model_copy(update={"categories": categories}))
    return state.model_copy(update={"tasks": tasks, "team_member_details": details})


# ============================================================================
# Mutations
# ============================================================================


def find_person(state: AppState, name: str) -> Category | None:
    """Any person category for this name, archived ones included."""
    column = state.follow_up_column()
    if column is None:
        return None
    matches = [c for c in column.categories if c.matches_person(name)]
    return sort_person_categories(matches)[0] if matches else None


def ensure_person_category(
    state: AppState,
    name: str,
    *,
    is_team_member: bool = False,
    rng: random.Random | None = None,
) -> tuple[AppState, Category]:
    """Return the person category for ``name``, creating it when missing.

    Matching is case-insensitive and includes archived people, so calling
    this twice never produces two entries. New people get a random color
    from the palette and sort after everyone already in the column.
    """
    name = name.strip()
    if not name:
        raise ValidationFailedError("Person name is required")

    existing = find_person(state, name)
    if existing is not None:
        return state, existing

    column = _require_follow_up(state)
    rng = rng or random
    category = Category(
        id=new_id("cat-person"),
        name=name,
        person_name=name,
        column_id=column.id,
        color=rng.choice(PERSON_COLORS),
        order=max((c.order for c in column.categories), default=-1) + 1,
        is_person=True,
        is_team_member=is_team_member,
    )
    state = state.replace_column(
        column.model_copy(update={"categories": [*column.categories, category]})
    )
    logger.info("person_added", category_id=category.id, name=name, is_team_member=is_team_member)
    return reconcile_people(state, preferred_id=category.id), category


def sync_team_member_details(state: AppState) -> AppState:
    """Give every team-member person category a details record.

    A record stored under the same name in another letter case is re-keyed
    rather than duplicated. Returns the same state object when nothing was
    missing.
    """
    column = state.follow_up_column()
    if column is None:
        return state

    team_names = [c.display_name for c in column.categories if c.is_person and c.is_team_member]
    missing = [name for name in team_names if name not in state.team_member_details]
    if not missing:
        return state

    details = dict(state.team_member_details)
    for name in missing:
        stray = next(
            (key for key in details if key not in team_names and person_key(key) == person_key(name)),
            None,
        )
        if stray is not None:
            details[name] = details.pop(stray).model_copy(update={"name": name})
        else:
            details[name] = TeamMemberDetails(name=name)
    logger.info("team_member_details_synced", names=missing)
    return state.model_copy(update={"team_member_details": details})


def set_team_member(state: AppState, category_id: str, is_team_member: bool) -> AppState:
    category = _require_person(state, category_id)
    updated = category.model_copy(update={"is_team_member": is_team_member})
    state = reconcile_people(_with_category(state, updated), preferred_id=category_id)
    logger.info("team_member_flag_set", category_id=category_id, is_team_member=is_team_member)
    return sync_team_member_details(state)


def toggle_team_member(state: AppState, category_id: str) -> AppState:
    category = _require_person(state, category_id)
    return set_team_member(state, category_id, not category.is_team_member)


def add_team_member(
    state: AppState,
    name: str,
    *,
    rng: random.Random | None = None,
) -> tuple[AppState, Category]:
    """Add someone as a team member, promoting an existing contact if present."""
    state, category = ensure_person_category(state, name, is_team_member=True, rng=rng)
    if not category.is_team_member or category.archived:
        promoted = category.model_copy(update={"is_team_member": True, "archived": False})
        state = reconcile_people(_with_category(state, promoted), preferred_id=category.id)
        category = promoted
    return sync_team_member_details(state), category


def archive_person_category(state: AppState, category_id: str, archived: bool = True) -> AppState:
    """Hide a person from pickers and views without touching their tasks."""
    category = _require_person(state, category_id)
    if category.archived == archived:
        return state
    logger.info("person_archived", category_id=category_id, archived=archived)
    return _with_category(state, category.model_copy(update={"archived": archived}))


def rename_person(state: AppState, category_id: str, new_name: str) -> AppState:
    """Rename a person everywhere they are referenced.

    Tasks follow the category through ``assigneeId`` so a rename never
    orphans an assignment; the details record is re-keyed to the new name.
    """
    new_name = new_name.strip()
    if not new_name:
        raise ValidationFailedError("Person name is required")

    category = _require_person(state, category_id)
    clash = find_person(state, new_name)
    if clash is not None and clash.id != category_id:
        raise ValidationFailedError(f"A person named {new_name} already exists")

    old_name = category.display_name
    state = _with_category(state, category.model_copy(update={"name": new_name, "person_name": new_name}))
    tasks = [
        task.model_copy(update={"assigned_to": new_name, "assignee_id": category_id})
        if is_assigned_to(task, category)
        else task
        for task in state.tasks
    ]

    details = dict(state.team_member_details)
    if old_name in details and old_name != new_name:
        record = details.pop(old_name)
        details[new_name] = record.model_copy(update={"name": new_name, "updated_at": utcnow()})

    logger.info("person_renamed", category_id=category_id, old_name=old_name, new_name=new_name)
    return state.model_copy(update={"tasks": tasks, "team_member_details": details})


def delete_person_category(state: AppState, category_id: str, *, delete_tasks: bool) -> AppState:
    """Remove a person and deal with their tasks.

    With ``delete_tasks`` the person's tasks are deleted; otherwise they are
    unassigned, which moves any still sitting in follow-up to the
    uncategorized column.
    """
    category = _require_person(state, category_id)
    affected = [task for task in state.tasks if is_assigned_to(task, category) or task.category_id == category_id]
    affected_ids = {task.id for task in affected}

    if delete_tasks:
        tasks = [task for task in state.tasks if task.id not in affected_ids]
    else:
        now = utcnow()
        tasks = [
            relocate_task(state, task, task.column_id, assignee=UNASSIGN, now=now) if task.id in affected_ids else task
            for task in state.tasks
        ]

    column = state.find_column(category.column_id)
    categories = [c for c in column.categories if c.id != category_id]
    state = state.replace_column(column.model_copy(update={"categories": categories}))
    logger.info(
        "person_deleted",
        category_id=category_id,
        name=category.display_name,
        tasks_deleted=len(affected_ids) if delete_tasks else 0,
        tasks_unassigned=0 if delete_tasks else len(affected_ids),
    )
    return state.model_copy(update={"tasks": tasks})


# ============================================================================
# Views
# ============================================================================


def assignable_people(state: AppState) -> list[Category]:
    """Non-archived people, in display order, for assignment pickers."""
    column = state.follow_up_column()
    if column is None:
        return []
    return sort_person_categories(c for c in column.categories if c.is_person and not c.archived)


def visible_person_categories(state: AppState) -> list[Category]:
    """People shown as follow-up slots: not archived and holding active work."""
    active = [task for task in state.tasks if is_active_task(task)]
    return [
        person
        for person in assignable_people(state)
        if any(is_assigned_to(task, person) for task in active)
    ]
