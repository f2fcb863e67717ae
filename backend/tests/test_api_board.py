"""
Tests for the board CRUD API.

Covers:
    - health endpoints and request-id echo
    - tasks          — create, list filters, update, move, delete, 404s
    - people         — add, dedupe, toggle, archive, rename, delete
    - columns/categories/projects CRUD
    - board views    — snapshot, buckets, counts, team workload
"""

from conftest import API_PREFIX


def url(path: str) -> str:
    return f"{API_PREFIX}{path}"


def create_task(client, **body):
    body.setdefault("title", "Write report")
    response = client.post(url("/tasks"), json=body)
    assert response.status_code == 201, response.text
    return response.json()


def add_person(client, name, team=False):
    response = client.post(url("/people/team-members" if team else "/people"), json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    def test_health(self, client):
        response = client.get(url("/health"))

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_checks_store(self, client):
        body = client.get(url("/health/ready")).json()

        assert body["checks"] == {"store": "healthy"}

    def test_request_id_echoed(self, client):
        response = client.get(url("/health"), headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert "X-Process-Time" in response.headers

    def test_request_id_generated(self, client):
        response = client.get(url("/health"))

        assert len(response.headers["X-Request-ID"]) == 32


class TestTasksApi:

    def test_create_defaults(self, client):
        task = create_task(client)

        assert task["columnId"] == "col-uncategorized"
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["tags"] == []

    def test_create_validation_error(self, client):
        response = client.post(url("/tasks"), json={"title": ""})

        assert response.status_code == 422

    def test_create_in_unknown_column(self, client):
        response = client.post(url("/tasks"), json={"title": "x", "columnId": "col-missing"})

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Column col-missing not found", "code": "COLUMN_NOT_FOUND"}

    def test_list_filters(self, client):
        first = create_task(client, title="First", columnId="col-today")
        second = create_task(client, title="Second", columnId="col-later")
        create_task(client, title="Finished", columnId="col-done")

        all_ids = [t["id"] for t in client.get(url("/tasks")).json()]
        today = client.get(url("/tasks"), params={"columnId": "col-today"}).json()
        active = client.get(url("/tasks"), params={"active": "true"}).json()

        assert len(all_ids) == 3
        assert [t["id"] for t in today] == [first["id"]]
        assert {t["id"] for t in active} == {first["id"], second["id"]}

    def test_get_unknown(self, client):
        response = client.get(url("/tasks/task-missing"))

        assert response.status_code == 404
        assert response.json() == {"detail": "Task not found"}

    def test_update(self, client):
        task = create_task(client, columnId="col-today")

        response = client.put(url(f"/tasks/{task['id']}"), json={"title": "Edited", "tags": ["x"]})

        assert response.status_code == 200
        assert response.json()["title"] == "Edited"
        assert response.json()["tags"] == ["x"]
        assert response.json()["status"] == "today"

    def test_update_unknown(self, client):
        response = client.put(url("/tasks/task-missing"), json={"title": "x"})

        assert response.status_code == 404
        assert response.json()["code"] == "TASK_NOT_FOUND"

    def test_move_assign_and_unassign(self, client):
        alice = add_person(client, "Alice", team=True)
        task = create_task(client, columnId="col-today")

        assigned = client.post(
            url(f"/tasks/{task['id']}/move"),
            json={"columnId": "col-today", "assignedTo": "alice"},
        ).json()
        unassigned = client.post(
            url(f"/tasks/{task['id']}/move"),
            json={"columnId": "col-today", "assignedTo": ""},
        ).json()

        assert assigned["columnId"] == "col-followup"
        assert assigned["categoryId"] == alice["id"]
        assert assigned["assigneeId"] == alice["id"]
        assert unassigned["columnId"] == "col-uncategorized"
        assert unassigned["assignedTo"] is None

    def test_move_without_assignee_keeps_it(self, client):
        add_person(client, "Alice", team=True)
        task = create_task(client, assignedTo="Alice")

        moved = client.post(url(f"/tasks/{task['id']}/move"), json={"columnId": "col-done"}).json()

        assert moved["assignedTo"] == "Alice"
        assert moved["status"] == "done"
        assert moved["completedAt"] is not None

    def test_move_with_null_assignee_unassigns(self, client):
        add_person(client, "Alice", team=True)
        task = create_task(client, assignedTo="Alice")

        moved = client.post(
            url(f"/tasks/{task['id']}/move"),
            json={"columnId": "col-followup", "assignedTo": None},
        ).json()

        assert moved["assignedTo"] is None
        assert moved["assigneeId"] is None
        assert moved["columnId"] == "col-uncategorized"

    def test_update_null_vs_omitted_assignee(self, client):
        add_person(client, "Alice", team=True)
        task = create_task(client, assignedTo="Alice")

        kept = client.put(url(f"/tasks/{task['id']}"), json={"title": "Edited"}).json()
        cleared = client.put(url(f"/tasks/{task['id']}"), json={"assignedTo": None}).json()

        assert kept["assignedTo"] == "Alice"
        assert cleared["assignedTo"] is None

    def test_move_unknown(self, client):
        response = client.post(url("/tasks/task-missing/move"), json={"columnId": "col-done"})

        assert response.status_code == 404

    def test_delete(self, client):
        task = create_task(client)

        response = client.delete(url(f"/tasks/{task['id']}"))

        assert response.json() == {"message": "Task deleted successfully"}
        assert client.get(url(f"/tasks/{task['id']}")).status_code == 404


class TestPeopleApi:

    def test_add_is_idempotent(self, client):
        first = add_person(client, "Carol")
        second = add_person(client, "CAROL")

        assert first["id"] == second["id"]
        people = client.get(url("/people"), params={"includeIdle": "true"}).json()
        assert [p["personName"] for p in people] == ["Carol"]

    def test_visible_people_need_active_work(self, client):
        add_person(client, "Carol")
        add_person(client, "Dana", team=True)
        create_task(client, assignedTo="Carol")

        visible = client.get(url("/people")).json()

        assert [p["personName"] for p in visible] == ["Carol"]

    def test_toggle_team_member(self, client):
        carol = add_person(client, "Carol")

        people = client.post(url(f"/people/{carol['id']}/toggle-team-member")).json()

        assert people[0]["isTeamMember"] is True
        member = client.get(
            url("/integration/team-member/Carol"),
            headers={"X-API-Key": "test-integration-key"},
        )
        assert member.status_code == 200

    def test_toggle_unknown(self, client):
        response = client.post(url("/people/cat-missing/toggle-team-member"))

        assert response.status_code == 404
        assert response.json()["code"] == "CATEGORY_NOT_FOUND"

    def test_archive(self, client):
        carol = add_person(client, "Carol")

        archived = client.post(url(f"/people/{carol['id']}/archive"), json={"archived": True}).json()

        assert archived["archived"] is True
        assert client.get(url("/people"), params={"includeIdle": "true"}).json() == []

    def test_rename_and_clash(self, client):
        carol = add_person(client, "Carol")
        add_person(client, "Dana")
        task = create_task(client, assignedTo="Carol")

        renamed = client.patch(url(f"/people/{carol['id']}"), json={"name": "Caroline"})
        clash = client.patch(url(f"/people/{carol['id']}"), json={"name": "dana"})

        assert renamed.json()["personName"] == "Caroline"
        assert client.get(url(f"/tasks/{task['id']}")).json()["assignedTo"] == "Caroline"
        assert clash.status_code == 400

    def test_delete_unassigns_or_deletes(self, client):
        carol = add_person(client, "Carol")
        dana = add_person(client, "Dana")
        kept = create_task(client, assignedTo="Carol")
        dropped = create_task(client, assignedTo="Dana")

        client.delete(url(f"/people/{carol['id']}"))
        client.delete(url(f"/people/{dana['id']}"), params={"deleteTasks": "true"})

        kept_now = client.get(url(f"/tasks/{kept['id']}")).json()
        assert kept_now["assignedTo"] is None
        assert kept_now["columnId"] == "col-uncategorized"
        assert client.get(url(f"/tasks/{dropped['id']}")).status_code == 404


class TestStructureApi:

    def test_columns_crud(self, client):
        created = client.post(url("/columns"), json={"id": "col-waiting", "name": "Waiting"})
        assert created.status_code == 201

        task = create_task(client, columnId="col-waiting")
        assert [t["id"] for t in client.get(url("/columns/col-waiting/tasks")).json()] == [task["id"]]

        renamed = client.put(url("/columns/col-waiting"), json={"name": "On hold"}).json()
        assert renamed["name"] == "On hold"

        client.delete(url("/columns/col-waiting"))
        assert client.get(url("/columns/col-waiting")).status_code == 404
        assert client.get(url(f"/tasks/{task['id']}")).json()["columnId"] == "col-uncategorized"

    def test_protected_column(self, client):
        response = client.delete(url("/columns/col-done"))

        assert response.status_code == 400
        assert response.json()["ok"] is False

    def test_columns_listed_in_order(self, client):
        ids = [c["id"] for c in client.get(url("/columns")).json()]

        assert ids == ["col-uncategorized", "col-today", "col-followup", "col-later", "col-done"]

    def test_categories_crud(self, client):
        created = client.post(url("/categories"), json={"name": "Admin", "columnId": "col-today"}).json()

        updated = client.put(url(f"/categories/{created['id']}"), json={"isCollapsed": True}).json()
        deleted = client.delete(url(f"/categories/{created['id']}"))

        assert updated["isCollapsed"] is True
        assert deleted.status_code == 200
        assert client.get(url(f"/categories/{created['id']}")).status_code == 404

    def test_person_category_not_duplicated(self, client):
        carol = add_person(client, "Carol")

        created = client.post(
            url("/categories"),
            json={"name": "carol", "columnId": "col-followup", "isPerson": True},
        ).json()

        assert created["id"] == carol["id"]

    def test_projects_crud(self, client):
        project = client.post(url("/projects"), json={"name": "Launch"}).json()
        create_task(client, projectId=project["id"], columnId="col-done")
        create_task(client, projectId=project["id"])

        fetched = client.get(url(f"/projects/{project['id']}")).json()
        assert (fetched["totalTasks"], fetched["completedTasks"], fetched["progress"]) == (2, 1, 50)

        archived = client.put(url(f"/projects/{project['id']}"), json={"archived": True}).json()
        assert archived["archived"] is True
        assert client.get(url("/projects")).json() == []
        assert len(client.get(url("/projects"), params={"includeArchived": "true"}).json()) == 1

        client.delete(url(f"/projects/{project['id']}"))
        assert client.get(url(f"/projects/{project['id']}")).status_code == 404


class TestBoardViews:

    def test_snapshot_has_version(self, client):
        create_task(client)

        board = client.get(url("/board")).json()

        assert board["version"] == 1
        assert len(board["tasks"]) == 1

    def test_buckets_include_orphans(self, client):
        create_task(client, columnId="col-today", categoryId="cat-comms")
        create_task(client, columnId="col-today")

        buckets = client.get(url("/board/columns/col-today/buckets")).json()

        assert [b["category"]["id"] if b["category"] else None for b in buckets] == [
            "cat-standing",
            "cat-comms",
            "cat-big-tasks",
            None,
        ]
        assert len(buckets[-1]["tasks"]) == 1

    def test_buckets_unknown_column(self, client):
        assert client.get(url("/board/columns/col-missing/buckets")).status_code == 404

    def test_counts_and_team(self, client):
        add_person(client, "Alice", team=True)
        create_task(client, assignedTo="Alice")
        create_task(client, columnId="col-done")

        counts = client.get(url("/board/counts")).json()
        team = client.get(url("/board/team")).json()

        assert counts["col-followup"] == {"total": 1, "active": 1, "orphaned": 0}
        assert counts["col-done"]["active"] == 0
        assert list(team) == ["Alice"]
        assert len(team["Alice"]) == 1
