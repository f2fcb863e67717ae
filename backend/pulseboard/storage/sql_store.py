"""Board persisted across relational tables through the SQLAlchemy ORM."""

from collections import defaultdict
from typing import Any

import orjson
import structlog
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pulseboard.db.base import Base
from pulseboard.domain.records import (
    Achievement,
    AppState,
    BoardSettings,
    Category,
    Column,
    DailyStats,
    Project,
    RoleGrowthGoal,
    Task,
    TeamMemberDetails,
    UserStats,
    WorkingHours,
    utcnow,
)
from pulseboard.domain.seed import default_state
from pulseboard.exceptions import StaleStateError, StorageError
from pulseboard.models import (
    AchievementRow,
    BoardColumn,
    BoardMeta,
    BoardSettingsRow,
    CategoryRow,
    DailyStatsRow,
    ProjectRow,
    RoleGrowthGoalRow,
    TaskRow,
    TeamMemberDetailsRow,
    UserStatsRow,
)
from pulseboard.models.board import SINGLETON_ID
from pulseboard.services.people import sync_team_member_details

logger = structlog.get_logger()

TEAM_JSON_FIELDS = (
    "growth_goals",
    "goals",
    "morale_check_ins",
    "performance_check_ins",
    "clients",
    "client_details",
    "red_flags",
    "review_cycles",
    "one_on_ones",
)


# ============================================================================
# Row <-> record mapping
# ============================================================================


def _column_to_row(column: Column) -> BoardColumn:
    return BoardColumn(
        id=column.id,
        name=column.name,
        position=column.order,
        color=column.color,
        max_tasks=column.max_tasks,
        allows_dynamic_categories=column.allows_dynamic_categories,
    )


def _category_to_row(category: Category) -> CategoryRow:
    return CategoryRow(**category.model_dump(exclude={"order"}), position=category.order)


def _category_from_row(row: CategoryRow) -> Category:
    data = row.to_dict()
    data["order"] = data.pop("position")
    return Category.model_validate(data)


def _task_to_row(task: Task, position: int) -> TaskRow:
    return TaskRow(**task.model_dump(exclude={"tags"}), tags=orjson.dumps(task.tags).decode(), position=position)


def _member_to_row(member: TeamMemberDetails) -> TeamMemberDetailsRow:
    dumped = member.model_dump(mode="json", by_alias=True)
    return TeamMemberDetailsRow(
        name=member.name,
        discipline=member.discipline,
        level=member.level,
        team=member.team,
        morale=member.morale,
        performance=member.performance,
        notes=member.notes,
        updated_at=member.updated_at,
        **{field: dumped[to_camel(field)] for field in TEAM_JSON_FIELDS},
    )


def _settings_to_row(settings: BoardSettings) -> BoardSettingsRow:
    return BoardSettingsRow(
        id=SINGLETON_ID,
        theme=settings.theme,
        enable_animations=settings.enable_animations,
        enable_notifications=settings.enable_notifications,
        working_hours_start=settings.working_hours.start,
        working_hours_end=settings.working_hours.end,
        daily_goal=settings.daily_goal,
    )


def _settings_from_row(row: BoardSettingsRow | None) -> BoardSettings:
    if row is None:
        return BoardSettings()
    return BoardSettings(
        theme=row.theme,
        enable_animations=row.enable_animations,
        enable_notifications=row.enable_notifications,
        working_hours=WorkingHours(start=row.working_hours_start, end=row.working_hours_end),
        daily_goal=row.daily_goal,
    )


def _user_stats_from_rows(row: UserStatsRow | None, daily: list[DailyStatsRow]) -> UserStats:
    data: dict[str, Any] = row.to_dict() if row is not None else {}
    data.pop("id", None)
    data["daily_stats"] = [DailyStats.model_validate(d.to_dict()) for d in daily]
    return UserStats.model_validate(data)


class SqlStateStore:
    """Relational store for the board snapshot.

    Each save runs in one transaction: the stored version is checked, rows
    missing from the snapshot are deleted and the rest are merged in. List
    order is kept in a ``position`` column.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def load(self) -> AppState:
        async with self.session_factory() as session:
            meta = await session.get(BoardMeta, SINGLETON_ID)
            column_rows = (await session.scalars(select(BoardColumn).order_by(BoardColumn.position))).all()
            if meta is None and not column_rows:
                logger.info("board_tables_empty_using_default")
                return default_state()

            categories_by_column: dict[str, list[Category]] = defaultdict(list)
            for row in await session.scalars(select(CategoryRow).order_by(CategoryRow.position)):
                categories_by_column[row.column_id].append(_category_from_row(row))

            columns = [
                Column(
                    id=row.id,
                    name=row.name,
                    order=row.position,
                    color=row.color,
                    max_tasks=row.max_tasks,
                    allows_dynamic_categories=row.allows_dynamic_categories,
                    categories=categories_by_column[row.id],
                )
                for row in column_rows
            ]
            tasks = [
                Task.model_validate(row.to_dict())
                for row in await session.scalars(select(TaskRow).order_by(TaskRow.position))
            ]
            projects = [
                Project.model_validate(row.to_dict())
                for row in await session.scalars(select(ProjectRow).order_by(ProjectRow.position))
            ]
            achievements = [
                Achievement.model_validate(row.to_dict())
                for row in await session.scalars(select(AchievementRow).order_by(AchievementRow.position))
            ]
            members = {
                row.name: TeamMemberDetails.model_validate(row.to_dict())
                for row in await session.scalars(select(TeamMemberDetailsRow).order_by(TeamMemberDetailsRow.name))
            }
            role_goals = [
                RoleGrowthGoal.model_validate(row.to_dict())
                for row in await session.scalars(select(RoleGrowthGoalRow).order_by(RoleGrowthGoalRow.position))
            ]
            daily = (await session.scalars(select(DailyStatsRow).order_by(DailyStatsRow.date))).all()

            state = AppState(
                version=meta.version if meta is not None else 0,
                columns=columns,
                tasks=tasks,
                projects=projects,
                achievements=achievements,
                user_stats=_user_stats_from_rows(await session.get(UserStatsRow, SINGLETON_ID), list(daily)),
                settings=_settings_from_row(await session.get(BoardSettingsRow, SINGLETON_ID)),
                team_member_details=members,
                role_growth_goals=role_goals,
            )
        return sync_team_member_details(state)

    async def save(self, state: AppState, expected_version: int | None = None) -> AppState:
        try:
            async with self.session_factory() as session, session.begin():
                meta = await session.scalar(
                    select(BoardMeta).where(BoardMeta.id == SINGLETON_ID).with_for_update()
                )
                stored_version = meta.version if meta is not None else 0
                if expected_version is not None and expected_version != stored_version:
                    raise StaleStateError(expected_version, stored_version)

                await self._write_snapshot(session, state)

                if meta is None:
                    meta = BoardMeta(id=SINGLETON_ID, version=0)
                    session.add(meta)
                meta.version = stored_version + 1
                meta.updated_at = utcnow()
        except SQLAlchemyError as e:
            logger.error("board_save_failed", error=str(e))
            raise StorageError(f"Failed to save board: {e}") from e

        logger.debug("board_saved", version=stored_version + 1, tasks=len(state.tasks))
        return state.model_copy(update={"version": stored_version + 1})

    async def _write_snapshot(self, session: AsyncSession, state: AppState) -> None:
        categories = [category for column in state.columns for category in column.categories]
        tables: list[tuple[type[Base], Any, list[Base]]] = [
            (BoardColumn, BoardColumn.id, [_column_to_row(c) for c in state.columns]),
            (CategoryRow, CategoryRow.id, [_category_to_row(c) for c in categories]),
            (TaskRow, TaskRow.id, [_task_to_row(t, i) for i, t in enumerate(state.tasks)]),
            (
                ProjectRow,
                ProjectRow.id,
                [ProjectRow(**p.model_dump(), position=i) for i, p in enumerate(state.projects)],
            ),
            (
                AchievementRow,
                AchievementRow.id,
                [AchievementRow(**a.model_dump(), position=i) for i, a in enumerate(state.achievements)],
            ),
            (
                TeamMemberDetailsRow,
                TeamMemberDetailsRow.name,
                [_member_to_row(m) for m in state.team_member_details.values()],
            ),
            (
                RoleGrowthGoalRow,
                RoleGrowthGoalRow.id,
                [RoleGrowthGoalRow(**g.model_dump(), position=i) for i, g in enumerate(state.role_growth_goals)],
            ),
            (
                DailyStatsRow,
                DailyStatsRow.date,
                [DailyStatsRow(**d.model_dump()) for d in state.user_stats.daily_stats],
            ),
            (BoardSettingsRow, BoardSettingsRow.id, [_settings_to_row(state.settings)]),
            (
                UserStatsRow,
                UserStatsRow.id,
                [UserStatsRow(id=SINGLETON_ID, **state.user_stats.model_dump(exclude={"daily_stats"}))],
            ),
        ]

        # Children first when deleting, parents first when writing
        for model, key, rows in reversed(tables):
            keep = [getattr(row, key.key) for row in rows]
            await session.execute(delete(model).where(key.not_in(keep)))
        for _, _, rows in tables:
            for row in rows:
                await session.merge(row)
            # Flush per table so parent rows exist before their children
            await session.flush()
