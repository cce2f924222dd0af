# URL Extract tool — /web: fetch one page through the proxy and answer from it.
# Created: 2026-10-03

from __future__ import annotations

import logging
from typing import Any

from fireflies.chat import prompts
from fireflies.errors import ErrorKind, ProxyError, Result
from fireflies.llm.client import ProxyClient
from fireflies.tools.protocol import BaseTool

logger = logging.getLogger(__name__)

_MIN_CONTENT_CHARS = 50
_MAX_CONTENT_CHARS = 5000


class ScrapeClient:
    """Fetches the extracted text of a single URL via the proxy ``web`` action."""

    def __init__(
        self,
        proxy: ProxyClient,
        *,
        min_chars: int = _MIN_CONTENT_CHARS,
        max_chars: int = _MAX_CONTENT_CHARS,
    ):
        self._proxy = proxy
        self._min_chars = min_chars
        self._max_chars = max_chars

    async def scrape_with_status(self, url: str) -> Result[str]:
        try:
            data = await self._proxy.web(url)
        except ProxyError as e:
            logger.warning("Scrape failed for %s: %s", url, e)
            return Result.failure(ErrorKind.TRANSPORT_FAILURE, str(e))

        content = data.get("content")
        if not isinstance(content, str) or len(content) < self._min_chars:
            error = str(data.get("error") or "Insufficient content extracted")
            kind = (
                ErrorKind.INSUFFICIENT_CONTENT
                if "insufficient" in error.lower() or not data.get("error")
                else ErrorKind.TRANSPORT_FAILURE
            )
            logger.info("No usable content from %s: %s", url, error)
            return Result.failure(kind, error)

        logger.info("Scraped %d chars from %s", len(content), url)
        return Result.success(content[: self._max_chars])

    async def scrape(self, url: str) -> str | None:
        """Return page text, or ``None`` on any failure."""
        result = await self.scrape_with_status(url)
        return result.value if result.ok else None


class UrlExtractTool(BaseTool):
    """Answer a question about the content of one URL."""

    def __init__(
        self,
        proxy: ProxyClient,
        *,
        min_chars: int = _MIN_CONTENT_CHARS,
        max_chars: int = _MAX_CONTENT_CHARS,
    ):
        self._proxy = proxy
        self._client = ScrapeClient(proxy, min_chars=min_chars, max_chars=max_chars)
        self._max_chars = max_chars

    @property
    def name(self) -> str:
        return "web"

    @property
    def description(self) -> str:
        return "Read a web page and answer a question about its content."

    @property
    def usage(self) -> str:
        return prompts.WEB_URL_USAGE

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "question": {"type": "string", "description": "Question about the page"},
                "url": {"type": "string", "description": "Page to read"},
                "model": {"type": "string", "description": "Model used for the answer"},
            },
            "required": ["question", "url", "model"],
        }

    async def execute(
        self, question: str, url: str, model: str, base_url: str | None = None
    ) -> str:
        content = await self._client.scrape(url)
        if not content:
            return prompts.SCRAPE_FAILED

        try:
            answer = await self._proxy.generate(
                prompts.build_scrape_prompt(content, question, source_chars=self._max_chars),
                model,
                base_url=base_url,
            )
        except ProxyError as e:
            logger.error("Inference failed for %s: %s", url, e)
            answer = f"Maaf, tidak dapat terhubung ke AI: {e}"
        if not answer:
            answer = prompts.NO_AI_RESPONSE

        return prompts.format_scrape_answer(answer, url)
