# Tests for API v1 proxy router.
# Created: 2026-10-07

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fireflies.api.v1.proxy import router
from fireflies.config import Settings

SERVICE_TOKEN = "svc-token"


@pytest.fixture
def app():
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.state.settings = Settings(auth_tokens={"token-budi": {"user_id": "u1"}})
    app.state.proxy_token = SERVICE_TOKEN
    return app


@pytest.fixture
def client(app):
    return TestClient(app, headers={"Authorization": f"Bearer {SERVICE_TOKEN}"})


class TestProxyEndpoint:
    def test_health(self, client):
        resp = client.get("/api/v1/proxy/test")

        assert resp.status_code == 200
        assert resp.json()["status"] == "working"

    @pytest.mark.parametrize("body", [b"", b"not json", b"[1, 2]"])
    def test_invalid_body(self, client, body):
        resp = client.post(
            "/api/v1/proxy", content=body, headers={"Content-Type": "application/json"}
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON in request body"}

    def test_missing_prompt(self, client):
        resp = client.post("/api/v1/proxy", json={"model": "FireFlies:latest"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Prompt is required"}

    @patch("fireflies.api.v1.proxy.handle_action", new_callable=AsyncMock)
    def test_dispatches_action(self, mock_handle, client):
        mock_handle.return_value = (200, {"content": "isi", "success": True})

        resp = client.post("/api/v1/proxy", json={"action": "web", "url": "https://a"})

        assert resp.status_code == 200
        assert resp.json() == {"content": "isi", "success": True}
        assert mock_handle.call_args.args[0] == {"action": "web", "url": "https://a"}

    @patch("fireflies.api.v1.proxy.handle_action", new_callable=AsyncMock)
    def test_passes_status_through(self, mock_handle, client):
        mock_handle.return_value = (502, {"error": "Ollama error: 502 - bad gateway"})

        resp = client.post("/api/v1/proxy", json={"prompt": "halo"})
        assert resp.status_code == 502

    def test_malformed_url_is_a_scrape_failure(self, client):
        resp = client.post("/api/v1/proxy", json={"action": "web", "url": "http://[::1"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["content"] is None
        assert body["error"].startswith("Web scraping failed")


class TestProxyAuth:
    def test_rejects_missing_token(self, app):
        resp = TestClient(app).post("/api/v1/proxy", json={"prompt": "halo"})

        assert resp.status_code == 401

    def test_rejects_wrong_token(self, app):
        client = TestClient(app, headers={"Authorization": "Bearer nope"})

        resp = client.post("/api/v1/proxy", json={"prompt": "halo"})
        assert resp.status_code == 401

    @patch("fireflies.api.v1.proxy.handle_action", new_callable=AsyncMock)
    def test_accepts_user_token(self, mock_handle, app):
        mock_handle.return_value = (200, {"models": []})
        client = TestClient(app, headers={"Authorization": "Bearer token-budi"})

        resp = client.post("/api/v1/proxy", json={"action": "get_models"})
        assert resp.status_code == 200

    @patch("fireflies.api.v1.proxy.handle_action", new_callable=AsyncMock)
    def test_configured_token_without_app_token(self, mock_handle):
        mock_handle.return_value = (200, {"models": []})
        app = FastAPI()
        app.include_router(router, prefix="/api/v1")
        app.state.settings = Settings(proxy_token="from-config")
        client = TestClient(app, headers={"Authorization": "Bearer from-config"})

        resp = client.post("/api/v1/proxy", json={"action": "get_models"})
        assert resp.status_code == 200
        mock_handle.assert_awaited_once()

    def test_health_check_is_open(self, app):
        assert TestClient(app).get("/api/v1/proxy/test").status_code == 200
