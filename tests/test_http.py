"""Tests for the FastAPI surface using the ASGI test client."""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from smart_calendar.api import ApiState
from smart_calendar.data import JsonDocumentStore
from smart_calendar.domain.defaults import default_categories
from smart_calendar.services.http import create_app
from smart_calendar.sync import AuthenticationExpiredError
from tests.conftest import FakeRemoteCalendar

pytestmark = [pytest.mark.http, pytest.mark.unit]


def _google_handler(request: httpx.Request) -> httpx.Response:
    if request.method == "GET":
        return httpx.Response(200, json={"items": []})
    if request.method == "DELETE":
        return httpx.Response(204)
    return httpx.Response(200, json={"id": "remote-1"})


@pytest.fixture
def state(settings, tmp_path) -> ApiState:
    return ApiState(
        settings=settings,
        store=JsonDocumentStore(tmp_path / "api.json"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(_google_handler)),
    )


@pytest.fixture
def client(state) -> TestClient:
    return TestClient(create_app(state))


SESSION = {"user_id": "u1", "email": "me@example.com", "access_token": "tok"}


class TestTasks:
    def test_crud_cycle(self, client):
        created = client.post("/api/tasks", json={"title": "Write report", "priority": "high", "estimated_duration": 60})
        assert created.status_code == 201
        task = created.json()
        assert task["priority_color"] == "#EF4444"

        assert client.get(f"/api/tasks/{task['id']}").json()["title"] == "Write report"
        updated = client.put(f"/api/tasks/{task['id']}", json={"title": "Write final report"})
        assert updated.status_code == 200
        assert updated.json()["created_at"] == task["created_at"]

        assert client.post(f"/api/tasks/{task['id']}/toggle").json()["completed"] is True
        assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
        assert client.get(f"/api/tasks/{task['id']}").status_code == 404
        assert client.delete(f"/api/tasks/{task['id']}").status_code == 404

    def test_validation_errors_are_400(self, client):
        assert client.post("/api/tasks", json={"title": ""}).status_code == 400
        assert client.post("/api/tasks", json={"title": "x", "estimated_duration": 0}).status_code == 400
        assert client.post("/api/tasks", json={"title": "x", "priority": "urgent"}).status_code == 400

    def test_unsupported_method_is_405(self, client):
        assert client.patch("/api/tasks").status_code == 405

    def test_filter(self, client):
        client.post("/api/tasks", json={"title": "Gym", "category_id": "health"})
        client.post("/api/tasks", json={"title": "Report", "description": "quarterly numbers"})
        response = client.get("/api/tasks/filter", params={"search": "QUARTERLY"})
        assert [task["title"] for task in response.json()] == ["Report"]
        response = client.get("/api/tasks/filter", params={"category_id": "health"})
        assert [task["title"] for task in response.json()] == ["Gym"]

    def test_schedule_drop_creates_event(self, client):
        task = client.post(
            "/api/tasks",
            json={"title": "Write report", "priority": "high", "estimated_duration": 60, "category_id": "work"},
        ).json()
        response = client.post(f"/api/tasks/{task['id']}/schedule", json={"day": "2025-03-14"})
        assert response.status_code == 201
        body = response.json()
        assert body["event"]["start"].startswith("2025-03-14T09:00:00")
        assert body["event"]["end"].startswith("2025-03-14T10:00:00")
        assert body["event"]["title"] == "Write report"
        assert body["event"]["is_remote"] is False
        assert body["task"]["scheduled_date"].startswith("2025-03-14T09:00:00")

    def test_schedule_missing_task_is_404(self, client):
        assert client.post("/api/tasks/nope/schedule", json={"day": "2025-03-14"}).status_code == 404


class TestEvents:
    def test_crud_and_move(self, client):
        payload = {"title": "Standup", "start": "2025-03-12T09:00:00Z", "end": "2025-03-12T09:15:00Z"}
        event = client.post("/api/events", json=payload).json()
        assert event["is_remote"] is False

        moved = client.post(
            f"/api/events/{event['id']}/move",
            json={"start": "2025-03-12T10:00:00Z", "end": "2025-03-12T10:15:00Z"},
        )
        assert moved.status_code == 200
        assert moved.json()["start"].startswith("2025-03-12T10:00:00")

        listed = client.get("/api/events", params={"start": "2025-03-12T00:00:00Z", "end": "2025-03-13T00:00:00Z"})
        assert [item["id"] for item in listed.json()] == [event["id"]]
        assert client.delete(f"/api/events/{event['id']}").status_code == 204
        assert client.get(f"/api/events/{event['id']}").status_code == 404

    def test_end_before_start_is_400(self, client):
        payload = {"title": "Bad", "start": "2025-03-12T10:00:00Z", "end": "2025-03-12T09:00:00Z"}
        assert client.post("/api/events", json=payload).status_code == 400

    def test_signed_in_save_is_mirrored(self, client):
        client.post("/api/auth/session", json=SESSION)
        payload = {"title": "Mirrored", "start": "2025-03-12T09:00:00Z", "end": "2025-03-12T10:00:00Z"}
        event = client.post("/api/events", json=payload).json()
        assert event["is_remote"] is True
        assert event["remote_id"] == "remote-1"


class TestCategories:
    def test_crud_and_duplicates(self, client):
        created = client.post("/api/categories", json={"name": "Errands", "color": "#123456"})
        assert created.status_code == 201
        category = created.json()
        assert client.post("/api/categories", json={"name": "errands"}).status_code == 400
        renamed = client.put(f"/api/categories/{category['id']}", json={"name": "Chores"})
        assert renamed.json()["name"] == "Chores"
        assert client.get("/api/categories/missing").status_code == 404
        assert client.delete(f"/api/categories/{category['id']}").status_code == 204

    def test_updating_missing_records_is_404(self, client):
        event = {"title": "Ghost", "start": "2025-03-12T09:00:00Z", "end": "2025-03-12T10:00:00Z"}
        assert client.put("/api/tasks/missing", json={"title": "Ghost"}).status_code == 404
        assert client.put("/api/events/missing", json=event).status_code == 404
        assert client.put("/api/categories/missing", json={"name": "Ghost"}).status_code == 404
        assert client.get("/api/tasks/missing").status_code == 404
        assert client.get("/api/categories").json() == []


class TestLifespan:
    def test_default_categories_are_seeded_without_auto_sync(self, state):
        assert state.settings.sync.auto_sync is False
        with TestClient(create_app(state)) as client:
            names = [category["name"] for category in client.get("/api/categories").json()]
        assert sorted(names) == sorted(category.name for category in default_categories())


class TestSummaryAndSuggestions:
    def test_weekly_summary(self, client):
        response = client.get("/api/summary/weekly")
        assert response.status_code == 200
        assert {"completed_tasks", "total_tasks", "completion_rate", "productive_hours", "top_category"} <= set(
            response.json()
        )

    def test_offline_suggestions(self, client):
        response = client.post("/api/suggestions", json={"goals": ["fitness"]})
        assert response.status_code == 200
        assert 3 <= len(response.json()) <= 5


class TestSessionAndSync:
    def test_sync_requires_session(self, client):
        body = client.post("/api/sync").json()
        assert body["status"] == "skipped"
        assert body["reason"] == "not authenticated"

    def test_sign_in_triggers_login_sync(self, client):
        response = client.post("/api/auth/session", json=SESSION)
        assert response.status_code == 200
        body = response.json()
        assert body["session"]["email"] == "me@example.com"
        assert "access_token" not in body["session"]
        assert body["sync"]["trigger"] == "login"
        assert body["sync"]["status"] == "completed"

        status = client.get("/api/sync").json()
        assert status["authenticated"] is True
        assert status["state"] == "idle"
        assert status["last_synced_at"] is not None

        assert client.delete("/api/auth/session").status_code == 204
        assert client.get("/api/sync").json()["authenticated"] is False

    def test_expired_authentication_maps_to_401(self, settings, tmp_path):
        state = ApiState(settings=settings, store=JsonDocumentStore(tmp_path / "expired.json"))
        remote = FakeRemoteCalendar()
        remote.list_error = AuthenticationExpiredError("expired")
        state.sync._client = remote
        client = TestClient(create_app(state))
        client.post("/api/auth/session", json=SESSION)

        response = client.post("/api/sync", json={"shortcut": True})
        assert response.status_code == 401
        assert response.json()["auth_expired"] is True

    def test_connectivity_transition(self, client):
        client.post("/api/auth/session", json=SESSION)
        offline = client.post("/api/sync/connectivity", json={"online": False}).json()
        assert offline == {"online": False, "sync": None}
        online = client.post("/api/sync/connectivity", json={"online": True}).json()
        assert online["online"] is True
        assert online["sync"]["trigger"] == "connectivity"

    def test_expired_session_cannot_sync(self, client):
        session = {**SESSION, "expires_at": "2000-01-01T00:00:00Z"}
        client.post("/api/auth/session", json=session)
        assert client.post("/api/sync").json()["reason"] == "not authenticated"
        assert client.get("/api/sync").json()["cooldown_remaining_seconds"] >= 0


def test_cooldown_is_reported(client):
    client.post("/api/auth/session", json=SESSION)
    status = client.get("/api/sync").json()
    assert 0 < status["cooldown_remaining_seconds"] <= timedelta(minutes=5).total_seconds()
