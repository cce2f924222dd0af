# Tests for API v1 chat router.
# Created: 2026-10-07

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from fireflies.api.serve import create_api_app
from fireflies.chat import prompts
from fireflies.chat.history import InMemoryChatHistory
from fireflies.chat.service import ChatService
from fireflies.config import MemoryConfigStore, Settings
from fireflies.errors import SessionBusyError

AUTH = {"Authorization": "Bearer token-budi"}


@pytest.fixture
def service(proxy):
    return ChatService(proxy, InMemoryChatHistory(), MemoryConfigStore())


@pytest.fixture
def client(service):
    settings = Settings(auth_tokens={"token-budi": {"user_id": "u1", "email": "budi@example.com"}})
    app = create_api_app(settings)
    app.state.chat_service = service
    return TestClient(app)


class TestChatSend:
    def test_requires_login(self, client, proxy):
        resp = client.post("/api/v1/chat", json={"content": "halo"})

        assert resp.status_code == 401
        proxy.generate.assert_not_awaited()

    def test_unknown_token_is_anonymous(self, client):
        resp = client.post(
            "/api/v1/chat", json={"content": "halo"}, headers={"Authorization": "Bearer nope"}
        )
        assert resp.status_code == 401

    def test_plain_chat(self, client):
        resp = client.post("/api/v1/chat", json={"content": "halo"}, headers=AUTH)

        assert resp.status_code == 200
        data = resp.json()
        assert data["command"] == "chat"
        assert data["state"] == "completed"
        assert data["user_message"]["content"] == "halo"
        assert data["reply"]["role"] == "assistant"
        assert data["reply"]["content"] == "Jawaban model."
        assert data["session_id"]

    def test_usage_hint(self, client):
        resp = client.post("/api/v1/chat", json={"content": "/web"}, headers=AUTH)

        assert resp.status_code == 200
        assert resp.json()["command"] == "web"
        assert resp.json()["reply"]["content"] == prompts.WEB_URL_USAGE

    def test_empty_message(self, client):
        resp = client.post("/api/v1/chat", json={"content": "   "}, headers=AUTH)
        assert resp.status_code == 400

    def test_busy(self, client, service):
        service.send_message = AsyncMock(side_effect=SessionBusyError("busy"))

        resp = client.post(
            "/api/v1/chat", json={"content": "halo", "session_id": "c1"}, headers=AUTH
        )
        assert resp.status_code == 409


class TestChatMessages:
    def test_lists_messages(self, client):
        sent = client.post("/api/v1/chat", json={"content": "halo"}, headers=AUTH).json()

        resp = client.get(f"/api/v1/chat/{sent['session_id']}/messages", headers=AUTH)

        assert resp.status_code == 200
        assert [m["role"] for m in resp.json()] == ["user", "assistant"]

    def test_unknown_session(self, client):
        resp = client.get("/api/v1/chat/missing/messages", headers=AUTH)
        assert resp.status_code == 404

    def test_requires_login(self, client):
        assert client.get("/api/v1/chat/missing/messages").status_code == 401


class TestChatStop:
    def test_requires_session_id(self, client):
        assert client.post("/api/v1/chat/stop", headers=AUTH).status_code == 400

    def test_nothing_to_stop(self, client):
        resp = client.post("/api/v1/chat/stop", params={"session_id": "c1"}, headers=AUTH)
        assert resp.status_code == 404

    def test_stops_generation(self, client, service):
        service.stop = AsyncMock(return_value=True)

        resp = client.post("/api/v1/chat/stop", params={"session_id": "c1"}, headers=AUTH)

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "session_id": "c1"}
        service.stop.assert_awaited_once_with("c1")


class TestCommands:
    def test_lists_commands(self, client):
        resp = client.get("/api/v1/commands")

        assert resp.status_code == 200
        assert [c["command"] for c in resp.json()] == ["/clear", "/cari", "/web", "/kalkulator"]


class TestChatSessions:
    def test_requires_login(self, client):
        assert client.get("/api/v1/chat").status_code == 401
        assert client.delete("/api/v1/chat/c1").status_code == 401

    def test_lists_own_sessions(self, client):
        client.post("/api/v1/chat", json={"content": "halo", "session_id": "c1"}, headers=AUTH)

        resp = client.get("/api/v1/chat", headers=AUTH)

        assert resp.status_code == 200
        sessions = resp.json()
        assert [s["id"] for s in sessions] == ["c1"]
        assert sessions[0]["title"] == "halo"
        assert sessions[0]["message_count"] == 2

    def test_delete_session(self, client, service):
        client.post("/api/v1/chat", json={"content": "halo", "session_id": "c1"}, headers=AUTH)

        resp = client.delete("/api/v1/chat/c1", headers=AUTH)

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "session_id": "c1"}
        assert client.get("/api/v1/chat", headers=AUTH).json() == []
        assert client.get("/api/v1/chat/c1/messages", headers=AUTH).status_code == 404
        assert "c1" not in service._controllers

    def test_delete_unknown_session(self, client):
        assert client.delete("/api/v1/chat/missing", headers=AUTH).status_code == 404
