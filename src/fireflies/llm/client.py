"""Proxy client for search, scraping and Ollama inference.

Every backend call goes through one proxy endpoint, selected by the ``action``
field of the JSON body. This module owns the HTTP side of that contract;
callers get plain dicts/strings back or a ``ProxyError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from fireflies.config import Settings
from fireflies.errors import ProxyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyClient:
    """Immutable descriptor for the proxy endpoint.

    Created via ``resolve_proxy_client()`` in application code; tests build it
    directly.
    """

    url: str
    timeout: float = 60.0  # search / web / get_models
    inference_timeout: float = 120.0  # generation
    token: str | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def call(self, payload: dict[str, Any], *, timeout: float | None = None) -> dict:
        """POST *payload* to the proxy and return the decoded JSON object.

        Raises ``ProxyError`` on transport failures, non-2xx responses and
        bodies that are not a JSON object.
        """
        action = payload.get("action", "generate")
        try:
            async with httpx.AsyncClient(timeout=timeout or self.timeout) as client:
                resp = await client.post(self.url, json=payload, headers=self._headers())
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ProxyError(f"Proxy {action} returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise ProxyError(f"Proxy {action} request failed: {e}") from e
        except ValueError as e:
            raise ProxyError(f"Proxy {action} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise ProxyError(f"Proxy {action} returned {type(data).__name__}, expected object")
        return data

    # -- actions --

    async def search(self, query: str) -> dict:
        return await self.call({"action": "search", "query": query})

    async def web(self, url: str) -> dict:
        return await self.call({"action": "web", "url": url})

    async def get_models(self, base_url: str | None = None) -> list[dict]:
        payload: dict[str, Any] = {"action": "get_models"}
        if base_url:
            payload["baseUrl"] = base_url
        data = await self.call(payload)
        models = data.get("models") or []
        if data.get("error"):
            logger.warning("Model listing reported: %s", data["error"])
        return [m for m in models if isinstance(m, dict)]

    async def generate(
        self,
        prompt: str,
        model: str,
        *,
        history: list[dict[str, str]] | None = None,
        image: str | None = None,
        base_url: str | None = None,
    ) -> str:
        """Run inference and return the response text (may be empty)."""
        payload: dict[str, Any] = {"prompt": prompt, "model": model}
        if history:
            payload["history"] = history
        if image:
            payload["action"] = "generate"
            payload["image"] = image
        if base_url:
            payload["baseUrl"] = base_url

        data = await self.call(payload, timeout=self.inference_timeout)
        if data.get("error"):
            raise ProxyError(str(data["error"]))
        response = data.get("response")
        return response if isinstance(response, str) else ""


def resolve_proxy_client(settings: Settings, *, token: str | None = None) -> ProxyClient:
    """Build a ``ProxyClient`` from settings.

    *token* overrides ``settings.proxy_token`` (the app passes its per-process
    token when none is configured).
    """
    return ProxyClient(
        url=settings.proxy_endpoint,
        timeout=settings.proxy_timeout,
        inference_timeout=settings.inference_timeout,
        token=token or settings.proxy_token,
    )
