"""
API tests - FastAPI routes
==========================
Routes run against an orchestrator wired with the in-memory weather
provider (app.dependency_overrides), so no network is involved
"""

import pytest
from fastapi.testclient import TestClient

from tripzz_agent.api.dependencies import get_orchestrator
from tripzz_agent.api.main import app
from tripzz_agent.orchestrator import TurnOrchestrator


@pytest.fixture
def client(orchestrator: TurnOrchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_sse_exit_event():
    # sse-starlette caches an exit event bound to the first event loop it sees
    from sse_starlette.sse import AppStatus

    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "1.0.0", "active_contexts": 0}

    def test_active_contexts_counted(self, client: TestClient):
        client.post("/api/v1/chat", json={"userId": "u1", "message": "Hi"})

        assert client.get("/health").json()["active_contexts"] == 1


class TestChat:
    def test_greeting_turn(self, client: TestClient):
        response = client.post("/api/v1/chat", json={"userId": "u1", "message": "Hi"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stage"] == "greeting"
        assert "Where would you like to travel?" in body["response"]["text"]
        assert body["context"]["lastIntent"] == "greeting"
        assert "timestamp" in body

    def test_metadata_is_applied(self, client: TestClient):
        response = client.post(
            "/api/v1/chat",
            json={"userId": "u1", "message": "Hi", "metadata": {"destination": "Goa"}},
        )

        body = response.json()
        assert body["stage"] == "collect_dates"
        assert body["context"]["destination"] == "Goa"

    @pytest.mark.parametrize(
        "payload",
        [
            {"userId": "u1", "message": "   "},
            {"userId": "u1"},
            {"message": "Hi"},
            {"userId": "", "message": "Hi"},
        ],
    )
    def test_blank_fields_rejected(self, client: TestClient, payload: dict):
        response = client.post("/api/v1/chat", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "userId and message are required"

    def test_stream_emits_progress_then_complete(self, client: TestClient):
        response = client.post("/api/v1/chat/stream", json={"userId": "u1", "message": "Goa"})

        assert response.status_code == 200
        body = response.text
        assert "event: progress" in body
        assert "event: complete" in body
        assert body.index("event: progress") < body.index("event: complete")
        assert '"stage": "collect_dates"' in body

    def test_stream_rejects_blank_message(self, client: TestClient):
        response = client.post("/api/v1/chat/stream", json={"userId": "u1", "message": ""})

        assert response.status_code == 400


class TestContext:
    def test_get_creates_fresh_context(self, client: TestClient):
        body = client.get("/api/v1/context/u1").json()

        assert body["success"] is True
        assert body["context"]["destination"] is None
        assert body["context"]["activities"] == []

    def test_post_merges_partial_update(self, client: TestClient):
        client.post("/api/v1/context/u1", json={"destination": "Goa", "activities": ["Hiking"]})

        body = client.post("/api/v1/context/u1", json={"activities": ["Surfing"]}).json()

        assert body["context"]["destination"] == "Goa"
        assert body["context"]["activities"] == ["Surfing"]

    def test_post_null_clears_field(self, client: TestClient):
        client.post("/api/v1/context/u1", json={"destination": "Goa"})

        body = client.post("/api/v1/context/u1", json={"destination": None}).json()

        assert body["context"]["destination"] is None

    def test_invalid_dates_rejected(self, client: TestClient):
        response = client.post(
            "/api/v1/context/u1",
            json={"travelDates": {"start": "2026-11-05", "end": "2026-11-01"}},
        )

        assert response.status_code == 422

    def test_delete_clears_context(self, client: TestClient):
        client.post("/api/v1/chat", json={"userId": "u1", "message": "Goa"})

        response = client.delete("/api/v1/context/u1")

        assert response.json() == {"success": True, "message": "Conversation context cleared"}
        assert client.get("/api/v1/context/u1").json()["context"]["destination"] is None
