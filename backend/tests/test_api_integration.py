"""
Tests for the integration endpoints.

Covers:
    - API key checks          — 401 without/with a wrong key, optional on health
    - request validation      — missing fields, bad enums, bad JSON
    - check-ins, 1:1s, red flags, goals, team pulse, member lookup
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from pulseboard.main import create_app

from conftest import API_PREFIX


def url(path: str) -> str:
    return f"{API_PREFIX}/integration{path}"


@pytest.fixture
def team(client):
    """Board with team member Alice."""
    response = client.post(f"{API_PREFIX}/people/team-members", json={"name": "Alice"})
    assert response.status_code == 201
    return client


class TestAuth:

    def test_missing_key(self, client):
        response = client.get(url("/team-pulse"))

        assert response.status_code == 401
        assert response.json()["ok"] is False
        assert response.json()["error"] == "Invalid API key"

    def test_wrong_key(self, client):
        response = client.get(url("/team-pulse"), headers={"X-API-Key": "nope"})

        assert response.status_code == 401

    def test_health_without_key(self, client):
        body = client.get(url("/health")).json()

        assert body["ok"] is True
        assert body["data"]["status"] == "healthy"
        assert body["data"]["storage"] == "file"

    def test_health_with_wrong_key(self, client):
        assert client.get(url("/health"), headers={"X-API-Key": "nope"}).status_code == 401

    def test_unconfigured_key_rejects_everything(self, settings, file_store):
        unconfigured = settings.model_copy(update={"integration_api_key": SecretStr("")})
        with TestClient(create_app(settings=unconfigured, store=file_store)) as client:
            response = client.get(url("/team-pulse"), headers={"X-API-Key": "anything"})

        assert response.status_code == 401


class TestValidation:

    def test_missing_fields_listed(self, team, auth_headers):
        response = team.post(url("/log-checkin"), json={"name": "Alice"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: name, type, rating"

    def test_invalid_json(self, team, auth_headers):
        response = team.post(
            url("/log-checkin"),
            content=b"{nope",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_bad_type(self, team, auth_headers):
        response = team.post(
            url("/log-checkin"),
            json={"name": "Alice", "type": "mood", "rating": "good"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == 'Type must be "morale" or "performance"'

    def test_malformed_milestone(self, team, auth_headers):
        response = team.post(
            url("/add-goal"),
            json={"name": "Alice", "title": "Ship", "milestones": [{"description": "no title"}]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"
        assert response.json()["error"].startswith("Invalid milestone")
        member = team.get(url("/team-member/Alice"), headers=auth_headers).json()["data"]
        assert member["goals"] == []

    def test_unknown_member(self, team, auth_headers):
        response = team.post(
            url("/add-red-flag"),
            json={"name": "Nobody", "flag": "x"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Team member not found"


class TestEndpoints:

    def test_log_checkin(self, team, auth_headers):
        body = team.post(
            url("/log-checkin"),
            json={"name": "alice", "type": "morale", "rating": "good", "notes": "Steady"},
            headers=auth_headers,
        ).json()

        assert body["ok"] is True
        assert body["data"]["currentRating"] == "good"
        assert body["data"]["totalCheckIns"] == 1
        assert body["data"]["checkIn"]["morale"] == "good"

    def test_log_one_on_one(self, team, auth_headers):
        body = team.post(
            url("/log-one-on-one"),
            json={
                "name": "Alice",
                "date": "2026-03-01T10:00:00Z",
                "discussionNotes": "Roadmap",
                "followUps": ["Send notes"],
                "performance": "excellent",
            },
            headers=auth_headers,
        ).json()
        member = team.get(url("/team-member/Alice"), headers=auth_headers).json()["data"]

        assert body["data"]["totalOneOnOnes"] == 1
        assert body["data"]["oneOnOne"]["followUps"] == ["Send notes"]
        assert member["performance"] == "excellent"
        assert member["performanceCheckIns"][0]["notes"] == "From 1:1 on 2026-03-01"

    def test_red_flags(self, team, auth_headers):
        added = team.post(url("/add-red-flag"), json={"name": "Alice", "flag": "Late"}, headers=auth_headers).json()
        team.post(url("/add-red-flag"), json={"name": "Alice", "flag": "Quiet"}, headers=auth_headers)

        removed = team.post(
            url("/remove-red-flag"),
            json={"name": "Alice", "flag": added["data"]["redFlag"]["id"]},
            headers=auth_headers,
        ).json()

        assert added["data"]["openRedFlags"] == 1
        assert removed["data"]["totalRedFlags"] == 1
        assert removed["data"]["openRedFlags"] == 1

    def test_goals(self, team, auth_headers):
        added = team.post(
            url("/add-goal"),
            json={"name": "Alice", "title": "Lead a launch", "milestones": [{"title": "Plan"}]},
            headers=auth_headers,
        ).json()
        goal_id = added["data"]["goal"]["id"]

        updated = team.post(
            url("/update-goal"),
            json={"name": "Alice", "goalId": goal_id, "status": "completed", "notes": "Done early"},
            headers=auth_headers,
        ).json()
        bad = team.post(
            url("/update-goal"),
            json={"name": "Alice", "goalId": goal_id, "status": "abandoned"},
            headers=auth_headers,
        )
        missing = team.post(
            url("/update-goal"),
            json={"name": "Alice", "goalId": "goal-missing", "status": "completed"},
            headers=auth_headers,
        )

        goal = updated["data"]["goal"]
        assert goal["status"] == "completed"
        assert goal["completedAt"] is not None
        assert goal["notes"][0]["note"] == "Done early"
        assert updated["data"]["totalGoals"] == 1
        assert bad.status_code == 400
        assert missing.status_code == 404
        assert missing.json()["error"] == "Goal not found"

    def test_team_pulse(self, team, auth_headers):
        team.post(
            url("/log-checkin"),
            json={"name": "Alice", "type": "performance", "rating": "fair"},
            headers=auth_headers,
        )

        body = team.get(url("/team-pulse"), headers=auth_headers).json()

        assert body["ok"] is True
        [row] = body["data"]
        assert row["name"] == "Alice"
        assert row["performance"] == "fair"
        assert row["redFlags"] == 0
        assert row["daysSinceLastOneOnOne"] is None

    def test_team_member_unknown(self, team, auth_headers):
        response = team.get(url("/team-member/Nobody"), headers=auth_headers)

        assert response.status_code == 404
