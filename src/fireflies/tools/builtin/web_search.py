# Web Search tool — /cari: search the web through the proxy, answer from the pages.
# Created: 2026-10-03

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fireflies.chat import prompts
from fireflies.errors import ErrorKind, ProxyError, Result
from fireflies.llm.client import ProxyClient
from fireflies.tools.protocol import BaseTool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    url: str
    content: str


class SearchClient:
    """Resolves a query to ``SearchResult``s with one proxy ``search`` call.

    The proxy picks the candidate URLs, fetches and extracts each page and
    truncates it; this client only keeps the successful records.
    """

    def __init__(self, proxy: ProxyClient):
        self._proxy = proxy

    async def search_with_status(self, query: str) -> Result[list[SearchResult]]:
        try:
            data = await self._proxy.search(query)
        except ProxyError as e:
            logger.warning("Search failed for %r: %s", query, e)
            return Result.failure(ErrorKind.TRANSPORT_FAILURE, str(e))

        if data.get("error"):
            logger.warning("Proxy search error for %r: %s", query, data["error"])

        records = data.get("urlsWithContent")
        if not isinstance(records, list):
            records = []

        results: list[SearchResult] = []
        for item in records:
            if not isinstance(item, dict):
                continue
            url = item.get("url")
            content = item.get("content")
            if item.get("success") is True and url and content:
                results.append(SearchResult(url=str(url), content=str(content)))
            else:
                logger.debug("Skipped %s: %s", url, item.get("error") or "no content")

        if not results:
            return Result.failure(
                ErrorKind.INSUFFICIENT_CONTENT, data.get("error") or "No usable content"
            )
        logger.info("Search for %r returned %d sources", query, len(results))
        return Result.success(results)

    async def search(self, query: str) -> list[SearchResult]:
        """Return usable results, or ``[]`` on any failure."""
        result = await self.search_with_status(query)
        return result.value if result.ok else []


class WebSearchTool(BaseTool):
    """Answer a question from freshly searched web pages."""

    def __init__(
        self,
        proxy: ProxyClient,
        *,
        max_content_chars: int = prompts.PROMPT_CONTENT_CHARS,
        source_chars: int = prompts.SEARCH_SOURCE_CHARS,
    ):
        self._proxy = proxy
        self._client = SearchClient(proxy)
        self._max_content_chars = max_content_chars
        self._source_chars = source_chars

    @property
    def name(self) -> str:
        return "cari"

    @property
    def description(self) -> str:
        return (
            "Search the web for current information and answer from the "
            "downloaded pages, listing every source."
        )

    @property
    def usage(self) -> str:
        return prompts.SEARCH_USAGE

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query"},
                "model": {"type": "string", "description": "Model used for the answer"},
            },
            "required": ["query", "model"],
        }

    async def execute(self, query: str, model: str, base_url: str | None = None) -> str:
        results = await self._client.search(query)
        if not results:
            return prompts.NO_SEARCH_RESULTS

        prompt = prompts.build_search_prompt(
            results,
            query,
            source_chars=self._source_chars,
            max_content_chars=self._max_content_chars,
        )
        logger.debug("Search prompt for %r is %d chars", query, len(prompt))

        try:
            answer = await self._proxy.generate(prompt, model, base_url=base_url)
        except ProxyError as e:
            logger.error("Inference failed for search %r: %s", query, e)
            answer = f"Maaf, tidak dapat terhubung ke AI: {e}"
        if not answer:
            answer = prompts.NO_AI_RESPONSE

        return prompts.format_search_answer(answer, [r.url for r in results])
