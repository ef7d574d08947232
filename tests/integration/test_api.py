"""HTTP and WebSocket surface tests (console wired to in-memory fakes)."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chat_console.api.deps import get_console
from chat_console.app import create_app
from chat_console.application.dto.conversation import ConversationSummary
from chat_console.application.exceptions import FetchError
from chat_console.infrastructure.transport.session import TransportSession
from chat_console.services.console import ChatConsole
from tests.conftest import (
    FakeClock,
    FakeConversationApi,
    FakeSocketClient,
    RecordingRenderer,
    at,
    make_message,
)


@pytest.fixture
def backend() -> FakeConversationApi:
    api = FakeConversationApi()
    api.summaries = [
        ConversationSummary(conversation_id="c1", title="Acme", last_activity=at(10)),
        ConversationSummary(conversation_id="c2", title="Globex", last_activity=at(20)),
    ]
    api.histories["c1"] = [make_message("m1", seconds=1), make_message("m2", seconds=2)]
    return api


@pytest.fixture
def console(backend) -> ChatConsole:
    transport = TransportSession("http://backend.test", client=FakeSocketClient())
    return ChatConsole(backend, transport, RecordingRenderer(), clock=FakeClock())


@pytest.fixture
def client(console):
    app = create_app()
    app.state.console = console
    app.dependency_overrides[get_console] = lambda: console
    return TestClient(app, raise_server_exceptions=False)


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "connection": "disconnected"}
    assert "X-Request-ID" in resp.headers


def test_refresh_and_list_conversations(client):
    resp = client.post("/api/v1/console/conversations/refresh")
    assert resp.status_code == 200
    assert [c["conversation_id"] for c in resp.json()] == ["c2", "c1"]

    listed = client.get("/api/v1/console/conversations").json()
    assert listed[0]["title"] == "Globex"
    assert listed[0]["badge_visible"] is False


def test_activate_returns_thread(client):
    resp = client.post("/api/v1/console/conversations/c1/activate")
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"] == "loaded"
    assert [m["id"] for m in data["messages"]] == ["m1", "m2"]

    thread = client.get("/api/v1/console/thread").json()
    assert thread["conversation_id"] == "c1"


def test_reload_refetches_history(client, backend):
    client.post("/api/v1/console/conversations/c1/activate")
    resp = client.post("/api/v1/console/conversations/c1/reload")

    assert resp.status_code == 200
    assert backend.history_calls == ["c1", "c1"]


def test_send_message(client, backend):
    client.post("/api/v1/console/conversations/c1/activate")

    resp = client.post("/api/v1/console/conversations/c1/messages", json={"content": "quote attached"})

    assert resp.status_code == 201
    data = resp.json()
    assert data["content"] == "quote attached"
    assert data["status"] == "sent"
    assert data["role"] == "user"
    assert backend.sent == [("c1", "quote attached")]


def test_send_to_inactive_conversation_is_rejected(client):
    client.post("/api/v1/console/conversations/c1/activate")

    resp = client.post("/api/v1/console/conversations/c2/messages", json={"content": "hi"})

    assert resp.status_code == 422


def test_send_empty_content_is_rejected(client):
    client.post("/api/v1/console/conversations/c1/activate")

    resp = client.post("/api/v1/console/conversations/c1/messages", json={"content": ""})

    assert resp.status_code == 422


def test_send_backend_failure_maps_to_bad_gateway(client, backend):
    client.post("/api/v1/console/conversations/c1/activate")
    backend.send_error = FetchError("boom", status_code=500)

    resp = client.post("/api/v1/console/conversations/c1/messages", json={"content": "hi"})

    assert resp.status_code == 502
    assert resp.json()["detail"] == "boom"


def test_delete_message(client, backend):
    client.post("/api/v1/console/conversations/c1/activate")

    resp = client.delete("/api/v1/console/conversations/c1/messages/m1")
    assert resp.status_code == 204
    assert backend.deleted == [("c1", "m1")]

    missing = client.delete("/api/v1/console/conversations/c1/messages/m1")
    assert missing.status_code == 404


def test_connection_and_reconnect(client):
    resp = client.get("/api/v1/console/connection")
    assert resp.json() == {"state": "disconnected", "attempts": 0, "exhausted": False}

    resp = client.post("/api/v1/console/connection/reconnect")
    assert resp.status_code == 200
    assert resp.json()["state"] == "connected"


def test_websocket_initial_frames_and_ping(client):
    with client.websocket_connect("/ws/console") as ws:
        assert ws.receive_json()["type"] == "connection.status"
        assert ws.receive_json()["type"] == "conversations.listed"

        ws.send_text('{"type": "ping"}')
        assert ws.receive_json() == {"type": "pong", "data": {}}

        ws.send_text("not json")
        assert ws.receive_json()["data"]["code"] == "invalid_payload"

        ws.send_text('{"type": "typing"}')
        assert ws.receive_json()["data"] == {"code": "unknown_type", "type": "typing"}


def test_websocket_select_activates_conversation(client, console):
    with client.websocket_connect("/ws/console") as ws:
        ws.receive_json()
        ws.receive_json()
        ws.send_text('{"type": "select", "data": {"conversation_id": "c1"}}')
        ws.send_text('{"type": "ping"}')
        assert ws.receive_json()["type"] == "pong"

    assert console.active_conversation() == "c1"
