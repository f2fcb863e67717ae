"""Shared test fixtures for the board services, stores and API."""

import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from pulseboard.config import Settings
from pulseboard.domain.constants import FOLLOW_UP_COLUMN_ID, TODAY_COLUMN_ID
from pulseboard.domain.records import AppState, Category, Task
from pulseboard.domain.seed import default_state
from pulseboard.main import create_app
from pulseboard.services.people import add_team_member, ensure_person_category
from pulseboard.storage import FileStateStore

API_KEY = "test-integration-key"
API_PREFIX = "/api/v1"

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def person(state: AppState, name: str) -> Category:
    """The follow-up category for ``name``; fails the test when missing."""
    column = state.follow_up_column()
    matches = [c for c in column.categories if c.matches_person(name)]
    assert len(matches) == 1, f"expected one category for {name}, found {len(matches)}"
    return matches[0]


def add_task(state: AppState, **fields) -> tuple[AppState, Task]:
    fields.setdefault("title", "Write report")
    fields.setdefault("created_at", NOW - timedelta(hours=30))
    task = Task(**fields)
    return state.model_copy(update={"tasks": [*state.tasks, task]}), task


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture
def board(rng) -> AppState:
    """Default board with team member Alice and outside contact Bob."""
    state = default_state()
    state, _ = add_team_member(state, "Alice", rng=rng)
    state, _ = ensure_person_category(state, "Bob", rng=rng)
    return state


@pytest.fixture
def today_task(board) -> tuple[AppState, Task]:
    return add_task(board, id="t1", column_id=TODAY_COLUMN_ID)


@pytest.fixture
def assigned_task(board) -> tuple[AppState, Task]:
    alice = person(board, "Alice")
    return add_task(
        board,
        id="t2",
        column_id=FOLLOW_UP_COLUMN_ID,
        category_id=alice.id,
        category=alice.id,
        assigned_to="Alice",
        assignee_id=alice.id,
    )


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "board.json"


@pytest.fixture
def file_store(state_file) -> FileStateStore:
    return FileStateStore(state_file)


@pytest.fixture
def settings(state_file) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="file",
        state_file=state_file,
        integration_api_key=API_KEY,
        log_level="WARNING",
    )


@pytest.fixture
def client(settings, file_store):
    app = create_app(settings=settings, store=file_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": API_KEY}
