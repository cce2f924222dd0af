# Shared fixtures for the FireFlies tests.
# Created: 2026-10-08

from unittest.mock import AsyncMock

import pytest

from fireflies.config import get_settings
from fireflies.llm.client import ProxyClient


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.fireflies."""
    monkeypatch.setenv("FIREFLIES_CONFIG_DIR", str(tmp_path / "fireflies"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def proxy():
    mock = AsyncMock(spec=ProxyClient)
    mock.generate.return_value = "Jawaban model."
    mock.search.return_value = {"urls": [], "urlsWithContent": []}
    mock.web.return_value = {"content": None, "error": "not configured", "success": False}
    mock.get_models.return_value = []
    return mock
