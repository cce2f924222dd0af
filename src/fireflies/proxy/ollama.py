"""Ollama forwarding for the proxy.

Text prompts with history go to ``/api/chat``; single prompts and image
prompts go to ``/api/generate``. Nothing is streamed.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class OllamaError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


async def list_models(base_url: str, timeout: float = 10.0) -> list[dict]:
    async with httpx.AsyncClient(timeout=timeout) as client:
        resp = await client.get(f"{base_url.rstrip('/')}/api/tags")
        resp.raise_for_status()
        data = resp.json()
    return data.get("models") or []


def _chat_messages(prompt: str, history: list[dict]) -> list[dict]:
    messages = [
        {"role": m["role"], "content": m["content"]}
        for m in history
        if isinstance(m, dict) and m.get("role") in ("user", "assistant", "system") and m.get("content")
    ]
    # History usually already ends with the prompt being answered
    if not messages or messages[-1] != {"role": "user", "content": prompt}:
        messages.append({"role": "user", "content": prompt})
    return messages


async def generate(
    base_url: str,
    model: str,
    prompt: str,
    *,
    history: list[dict] | None = None,
    image: str | None = None,
    timeout: float = 120.0,
) -> str:
    """Run one non-streaming completion and return the response text."""
    base_url = base_url.rstrip("/")
    if history and not image:
        url = f"{base_url}/api/chat"
        body: dict = {"model": model, "messages": _chat_messages(prompt, history), "stream": False}
    else:
        url = f"{base_url}/api/generate"
        body = {"model": model, "prompt": prompt, "stream": False}
        if image:
            body["images"] = [image]

    logger.info("Forwarding to %s (model=%s)", url, model)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(url, json=body)
            if resp.status_code >= 400:
                raise OllamaError(f"Ollama error: {resp.status_code} - {resp.text}")
            data = resp.json()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise OllamaError(f"Network error: {e}") from e
    except ValueError as e:
        raise OllamaError(f"Invalid response from Ollama: {e}", status_code=502) from e

    if not isinstance(data, dict):
        raise OllamaError("Invalid response from Ollama", status_code=502)

    if "message" in data:
        return (data.get("message") or {}).get("content", "")
    return data.get("response", "")
