"""
Tests for the board state stores and the state manager.

Covers:
    - FileStateStore     — default board, round-trip, versions, bad files
    - SqlStateStore      — the same contract against SQLite (aiosqlite)
    - parse_json_value   — text, bytes, blank and native column values
    - BoardStateManager  — unchanged mutations are not written
"""

import asyncio
from datetime import timedelta

import orjson
import pytest

from pulseboard.db.session import create_engine_from_url, create_session_factory, create_tables
from pulseboard.domain.constants import DONE_COLUMN_ID, FOLLOW_UP_COLUMN_ID, TODAY_COLUMN_ID
from pulseboard.domain.intents import AssignTo
from pulseboard.domain.records import AppState, Project, RoleGrowthGoal, Task, parse_json_value
from pulseboard.exceptions import StaleStateError, StorageError
from pulseboard.services import team_details
from pulseboard.services.board_state import BoardStateManager
from pulseboard.services.placement import move_task
from pulseboard.storage import FileStateStore, SqlStateStore, StateStore

from conftest import add_task, person

TASK_FIELDS = ("id", "title", "status", "column_id", "category_id", "assigned_to", "assignee_id", "tags")


def populated(board, now) -> AppState:
    """A board touching every table: tasks, projects, people and team data."""
    state, _ = add_task(
        board,
        id="t1",
        column_id=TODAY_COLUMN_ID,
        category_id="cat-comms",
        tags=["email", "q3"],
        created_at=now - timedelta(days=2, microseconds=123000),
        due_date=now + timedelta(days=1),
    )
    state, _ = add_task(state, id="t2", column_id=TODAY_COLUMN_ID, project_id="project-1")
    state = move_task(state, "t2", FOLLOW_UP_COLUMN_ID, None, AssignTo("Alice"), now=now)
    state, _ = add_task(state, id="t3", column_id=TODAY_COLUMN_ID)
    state = move_task(state, "t3", DONE_COLUMN_ID, now=now)
    state = state.model_copy(update={"projects": [Project(id="project-1", name="Launch", created_at=now, updated_at=now)]})
    state, _, _ = team_details.log_checkin(state, "Alice", "morale", "good", "Fine", now=now)
    state, _, _ = team_details.add_red_flag(state, "Alice", "Overloaded", now=now)
    state, _, _ = team_details.add_goal(state, "Alice", "Lead", milestones=[{"title": "Plan"}], now=now)
    return state


def assert_same_board(loaded: AppState, original: AppState) -> None:
    assert [c.id for c in loaded.columns] == [c.id for c in original.columns]
    for column, expected in zip(loaded.columns, original.columns):
        assert column.categories == expected.categories

    by_id = {t.id: t for t in loaded.tasks}
    assert set(by_id) == {t.id for t in original.tasks}
    for task in original.tasks:
        copy = by_id[task.id]
        for field in TASK_FIELDS:
            assert getattr(copy, field) == getattr(task, field), field
        assert copy.created_at == task.created_at
        assert copy.completed_at == task.completed_at
        assert copy.due_date == task.due_date

    assert loaded.projects == original.projects
    assert loaded.team_member_details == original.team_member_details
    assert loaded.achievements == original.achievements
    assert loaded.settings == original.settings


# ============================================================================
# File store
# ============================================================================


class TestFileStateStore:

    def test_satisfies_contract(self, file_store):
        assert isinstance(file_store, StateStore)

    def test_missing_file_loads_default_board(self, file_store):
        state = asyncio.run(file_store.load())

        assert state.version == 0
        assert [c.id for c in state.columns][0] == "col-uncategorized"
        assert not file_store.path.exists()

    def test_round_trip(self, file_store, board, now):
        original = populated(board, now)

        saved = asyncio.run(file_store.save(original))
        loaded = asyncio.run(file_store.load())

        assert saved.version == 1
        assert loaded.version == 1
        assert_same_board(loaded, original)

    def test_writes_camel_case_json(self, file_store, board, now):
        asyncio.run(file_store.save(populated(board, now)))

        raw = orjson.loads(file_store.path.read_bytes())

        assert "teamMemberDetails" in raw
        task = next(t for t in raw["tasks"] if t["id"] == "t1")
        assert task["columnId"] == TODAY_COLUMN_ID
        assert task["createdAt"].endswith("Z")

    def test_stale_save_rejected(self, file_store, board):
        asyncio.run(file_store.save(board, expected_version=0))

        with pytest.raises(StaleStateError) as exc_info:
            asyncio.run(file_store.save(board, expected_version=0))

        assert exc_info.value.stored_version == 1
        assert asyncio.run(file_store.load()).version == 1

    def test_unreadable_file(self, file_store):
        file_store.path.write_text("{not json")

        with pytest.raises(StorageError):
            asyncio.run(file_store.load())

    def test_no_temp_files_left(self, file_store, board):
        asyncio.run(file_store.save(board))

        assert [p.name for p in file_store.path.parent.iterdir()] == [file_store.path.name]

    def test_details_synced_on_load(self, file_store, board):
        details_missing = board.model_copy(update={"team_member_details": {}})
        file_store.path.write_bytes(orjson.dumps(details_missing.to_json_dict()))

        state = asyncio.run(file_store.load())

        assert "Alice" in state.team_member_details


# ============================================================================
# SQL store
# ============================================================================


def run_with_sql_store(tmp_path, scenario):
    """Run ``scenario(store)`` against a fresh SQLite database."""

    async def main():
        engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'board.db'}")
        try:
            await create_tables(engine)
            return await scenario(SqlStateStore(create_session_factory(engine)))
        finally:
            await engine.dispose()

    return asyncio.run(main())


class TestSqlStateStore:

    def test_empty_database_loads_default_board(self, tmp_path):
        async def scenario(store):
            return await store.load()

        state = run_with_sql_store(tmp_path, scenario)

        assert state.version == 0
        assert len(state.columns) == 5

    def test_round_trip(self, tmp_path, board, now):
        original = populated(board, now)

        async def scenario(store):
            saved = await store.save(original)
            return saved, await store.load()

        saved, loaded = run_with_sql_store(tmp_path, scenario)

        assert saved.version == 1
        assert loaded.version == 1
        assert_same_board(loaded, original)

    def test_list_order_kept(self, tmp_path, board, now):
        state, _ = add_task(board, id="newer", created_at=now)
        state, _ = add_task(state, id="older", created_at=now - timedelta(days=5))
        state = state.model_copy(
            update={
                "achievements": list(reversed(state.achievements)),
                "projects": [
                    Project(id="project-z", name="Zeta", created_at=now),
                    Project(id="project-a", name="Alpha", created_at=now - timedelta(days=1)),
                ],
                "role_growth_goals": [
                    RoleGrowthGoal(id="rg-b", discipline="Design", level="Senior", title="Mentor", created_at=now),
                    RoleGrowthGoal(
                        id="rg-a",
                        discipline="Design",
                        level="Senior",
                        title="Lead",
                        created_at=now - timedelta(days=1),
                    ),
                ],
            }
        )

        async def scenario(store):
            await store.save(state)
            return await store.load()

        loaded = run_with_sql_store(tmp_path, scenario)

        assert [t.id for t in loaded.tasks] == ["newer", "older"]
        assert [p.id for p in loaded.projects] == ["project-z", "project-a"]
        assert [a.id for a in loaded.achievements] == [a.id for a in state.achievements]
        assert [g.id for g in loaded.role_growth_goals] == ["rg-b", "rg-a"]

    def test_removed_rows_are_deleted(self, tmp_path, board, now):
        original = populated(board, now)

        async def scenario(store):
            first = await store.save(original)
            alice = person(first, "Alice")
            column = first.follow_up_column()
            trimmed = first.replace_column(
                column.model_copy(update={"categories": [c for c in column.categories if c.id != alice.id]})
            )
            trimmed = trimmed.model_copy(
                update={"tasks": [t for t in trimmed.tasks if t.id != "t1"], "projects": []}
            )
            await store.save(trimmed, expected_version=first.version)
            return await store.load()

        loaded = run_with_sql_store(tmp_path, scenario)

        assert loaded.version == 2
        assert loaded.find_task("t1") is None
        assert loaded.projects == []
        assert [c.display_name for c in loaded.follow_up_column().categories] == ["Bob"]

    def test_stale_save_rejected(self, tmp_path, board):
        async def scenario(store):
            await store.save(board, expected_version=0)
            with pytest.raises(StaleStateError):
                await store.save(board, expected_version=0)
            return await store.load()

        assert run_with_sql_store(tmp_path, scenario).version == 1


# ============================================================================
# JSON-valued columns
# ============================================================================


class TestJsonColumns:

    def test_text_values_parsed(self):
        assert parse_json_value('["a", "b"]', []) == ["a", "b"]
        assert parse_json_value(b'{"Acme": {"clientName": "Acme"}}', {}) == {"Acme": {"clientName": "Acme"}}

    def test_blank_and_missing_use_default(self):
        assert parse_json_value(None, []) == []
        assert parse_json_value("  ", {}) == {}

    def test_native_values_pass_through(self):
        tags = ["x"]

        assert parse_json_value(tags, []) is tags

    def test_bad_text_rejected_by_record(self):
        with pytest.raises(ValueError):
            Task(title="x", tags="[not json")


# ============================================================================
# State manager
# ============================================================================


class TestBoardStateManager:

    def test_apply_saves_and_bumps_version(self, file_store):
        manager = BoardStateManager(file_store)

        state = asyncio.run(manager.apply(lambda s: add_task(s, id="t1")[0], action="add"))

        assert state.version == 1
        assert asyncio.run(manager.snapshot()).find_task("t1") is not None

    def test_unchanged_state_not_written(self, file_store):
        manager = BoardStateManager(file_store)

        state = asyncio.run(manager.apply(lambda s: move_task(s, "missing", DONE_COLUMN_ID)))

        assert state.version == 0
        assert not file_store.path.exists()

    def test_apply_with_result(self, file_store):
        manager = BoardStateManager(file_store)

        state, task = asyncio.run(manager.apply_with_result(lambda s: add_task(s, id="t1")))

        assert task.id == "t1"
        assert state.version == 1
