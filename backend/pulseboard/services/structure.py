"""Column and category CRUD.

Person categories in the follow-up column are routed through
:mod:`pulseboard.services.people` so they stay deduplicated.
"""

from typing import Any

import structlog

from pulseboard.domain.constants import DONE_COLUMN_ID, FOLLOW_UP_COLUMN_ID, UNCATEGORIZED_COLUMN_ID
from pulseboard.domain.records import AppState, Category, Column, utcnow
from pulseboard.exceptions import CategoryNotFoundError, ColumnNotFoundError, ValidationFailedError
from pulseboard.services import people

logger = structlog.get_logger()

# The board relies on these existing
PROTECTED_COLUMN_IDS = frozenset({UNCATEGORIZED_COLUMN_ID, FOLLOW_UP_COLUMN_ID, DONE_COLUMN_ID})


def _require_column(state: AppState, column_id: str) -> Column:
    column = state.find_column(column_id)
    if column is None:
        raise ColumnNotFoundError(column_id)
    return column


def _require_category(state: AppState, category_id: str) -> Category:
    category = state.find_category(category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    return category


def _is_follow_up_person(state: AppState, category: Category) -> bool:
    follow_up = state.follow_up_column()
    return category.is_person and follow_up is not None and category.column_id == follow_up.id


# ============================================================================
# Columns
# ============================================================================


def create_column(state: AppState, fields: dict[str, Any]) -> tuple[AppState, Column]:
    fields = {k: v for k, v in fields.items() if k != "categories"}
    fields.setdefault("order", max((c.order for c in state.columns), default=-1) + 1)
    column = Column.model_validate(fields)
    if state.find_column(column.id) is not None:
        raise ValidationFailedError(f"Column {column.id} already exists")
    logger.info("column_created", column_id=column.id, name=column.name)
    return state.model_copy(update={"columns": [*state.columns, column]}), column


def update_column(state: AppState, column_id: str, fields: dict[str, Any]) -> tuple[AppState, Column]:
    column = _require_column(state, column_id)
    patch = {k: v for k, v in fields.items() if k not in ("id", "categories")}
    updated = Column.model_validate({**column.model_dump(), **patch})
    logger.info("column_updated", column_id=column_id, fields=sorted(patch))
    return state.replace_column(updated), updated


def delete_column(state: AppState, column_id: str) -> AppState:
    """Remove a column; its tasks move to the uncategorized column."""
    _require_column(state, column_id)
    if column_id in PROTECTED_COLUMN_IDS:
        raise ValidationFailedError(f"Column {column_id} cannot be deleted")

    now = utcnow()
    tasks = [
        task.model_copy(
            update={
                "column_id": UNCATEGORIZED_COLUMN_ID,
                "category_id": None,
                "category": None,
                "status": "todo",
                "updated_at": now,
            }
        )
        if task.column_id == column_id
        else task
        for task in state.tasks
    ]
    logger.info("column_deleted", column_id=column_id)
    return state.model_copy(
        update={"columns": [c for c in state.columns if c.id != column_id], "tasks": tasks}
    )


# ============================================================================
# Categories
# ============================================================================


def list_categories(state: AppState) -> list[Category]:
    """Every category, by column order then category order."""
    categories = []
    for column in sorted(state.columns, key=lambda c: c.order):
        categories.extend(sorted(column.categories, key=lambda c: c.order))
    return categories


def create_category(state: AppState, fields: dict[str, Any]) -> tuple[AppState, Category]:
    column = _require_column(state, fields.get("column_id") or "")
    follow_up = state.follow_up_column()

    if fields.get("is_person") and follow_up is not None and column.id == follow_up.id:
        name = fields.get("person_name") or fields.get("name") or ""
        return people.ensure_person_category(
            state, name, is_team_member=bool(fields.get("is_team_member"))
        )

    fields = dict(fields)
    fields.setdefault("order", max((c.order for c in column.categories), default=-1) + 1)
    category = Category.model_validate(fields)
    if state.find_category(category.id) is not None:
        raise ValidationFailedError(f"Category {category.id} already exists")
    state = state.replace_column(
        column.model_copy(update={"categories": [*column.categories, category]})
    )
    logger.info("category_created", category_id=category.id, column_id=column.id)
    return state, category


def update_category(state: AppState, category_id: str, fields: dict[str, Any]) -> tuple[AppState, Category]:
    """Patch a category.

    On a person, a new name renames them everywhere and a team-member flag
    change triggers deduplication.
    """
    category = _require_category(state, category_id)
    fields = {k: v for k, v in fields.items() if k not in ("id", "column_id")}

    if _is_follow_up_person(state, category):
        new_name = fields.pop("person_name", None) or fields.pop("name", None)
        fields.pop("name", None)
        if new_name and new_name.strip() != category.display_name:
            state = people.rename_person(state, category_id, new_name)
        if "archived" in fields:
            state = people.archive_person_category(state, category_id, bool(fields.pop("archived")))
        if "is_team_member" in fields:
            is_team_member = bool(fields.pop("is_team_member"))
            if is_team_member != category.is_team_member:
                state = people.set_team_member(state, category_id, is_team_member)
        category = state.find_category(category_id)
        if category is None:
            # Merged into another entry for the same person
            raise CategoryNotFoundError(category_id)

    updated = Category.model_validate({**category.model_dump(), **fields})
    column = state.find_column(updated.column_id)
    categories = [updated if c.id == category_id else c for c in column.categories]
    logger.info("category_updated", category_id=category_id, fields=sorted(fields))
    return state.replace_column(column.model_copy(update={"categories": categories})), updated


def delete_category(state: AppState, category_id: str) -> AppState:
    """Remove a category; its tasks stay in the column without a category."""
    category = _require_category(state, category_id)
    if _is_follow_up_person(state, category):
        return people.delete_person_category(state, category_id, delete_tasks=False)

    column = state.find_column(category.column_id)
    tasks = [
        task.model_copy(update={"category_id": None, "category": None})
        if task.category_id == category_id
        else task
        for task in state.tasks
    ]
    state = state.replace_column(
        column.model_copy(update={"categories": [c for c in column.categories if c.id != category_id]})
    )
    logger.info("category_deleted", category_id=category_id, column_id=column.id)
    return state.model_copy(update={"tasks": tasks})
