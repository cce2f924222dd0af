# Proxy action dispatch.
# Created: 2026-10-06
#
# One JSON body, one ``action`` field. search / web / get_models always answer
# 200 with an ``error`` field on failure; inference answers 400/500 instead.

from __future__ import annotations

import logging
from typing import Any

import httpx

from fireflies.config import Settings
from fireflies.proxy import ollama, web

logger = logging.getLogger(__name__)


async def _search(body: dict[str, Any], settings: Settings) -> tuple[int, dict]:
    query = str(body.get("query") or "").strip()
    if not query:
        return 200, {"urls": [], "urlsWithContent": [], "error": "Query is required for search"}
    return 200, await web.search_and_fetch(query, settings)


async def _web(body: dict[str, Any], settings: Settings) -> tuple[int, dict]:
    return 200, await web.scrape(str(body.get("url") or ""), settings)


async def _get_models(body: dict[str, Any], settings: Settings) -> tuple[int, dict]:
    base_url = body.get("baseUrl") or settings.ollama_host
    try:
        models = await ollama.list_models(base_url)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.error("Models fetch error from %s: %s", base_url, e)
        return 200, {"models": [], "error": "Failed to fetch models"}
    logger.info("Fetched %d models from %s", len(models), base_url)
    return 200, {"models": models}


async def _generate(body: dict[str, Any], settings: Settings) -> tuple[int, dict]:
    prompt = body.get("prompt")
    if not prompt:
        return 400, {"error": "Prompt is required"}

    history = body.get("history")
    try:
        response = await ollama.generate(
            body.get("baseUrl") or settings.ollama_host,
            body.get("model") or settings.default_model,
            prompt,
            history=history if isinstance(history, list) else None,
            image=body.get("image") or None,
            timeout=settings.inference_timeout,
        )
    except ollama.OllamaError as e:
        logger.error("%s", e)
        return e.status_code, {"error": str(e)}
    return 200, {"response": response}


_ACTIONS = {
    "search": _search,
    "web": _web,
    "get_models": _get_models,
}


async def handle_action(body: dict[str, Any], settings: Settings) -> tuple[int, dict]:
    """Run the proxy action named in *body*; returns ``(status_code, payload)``.

    Unknown or missing actions (including ``generate``) fall through to inference.
    """
    action = body.get("action")
    logger.debug("Proxy action=%s model=%s", action, body.get("model"))
    handler = _ACTIONS.get(action, _generate) if isinstance(action, str) else _generate
    return await handler(body, settings)
