# Tool registry for the chat command handlers.
# Created: 2026-10-04


from __future__ import annotations

import logging
from typing import Any

from fireflies.chat.prompts import PROMPT_CONTENT_CHARS, SCRAPE_SOURCE_CHARS, SEARCH_SOURCE_CHARS
from fireflies.llm.client import ProxyClient
from fireflies.tools.protocol import ToolProtocol

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry of command handlers, keyed by command name.

    Usage:
        registry = ToolRegistry()
        registry.register(WebSearchTool(proxy))

        reply = await registry.execute("cari", query="cuaca jakarta", model="FireFlies:latest")
    """

    def __init__(self):
        self._tools: dict[str, ToolProtocol] = {}

    def register(self, tool: ToolProtocol) -> None:
        """Register a tool."""
        self._tools[tool.name] = tool
        logger.debug(f"🔧 Registered command: /{tool.name}")

    def get(self, name: str) -> ToolProtocol | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def get_definitions(self) -> list[dict[str, Any]]:
        """Describe every registered command."""
        return [tool.definition.to_dict() for tool in self._tools.values()]

    async def execute(self, name: str, **params: Any) -> str:
        """Execute a tool by name.

        Returns the reply string. Unexpected handler exceptions become an
        error reply; cancellation still propagates.
        """
        tool = self._tools.get(name)

        if not tool:
            return f"Error: Command '/{name}' not found. Available: {self.tool_names}"

        try:
            logger.debug(f"🔧 Executing /{name} with {params}")
            result = await tool.execute(**params)

            log_result = result[:200] + "..." if len(result) > 200 else result
            logger.debug(f"🔧 /{name} result: {log_result}")
            return result
        except Exception as e:
            logger.error(f"🔧 /{name} failed: {e}")
            return f"Error executing /{name}: {str(e)}"

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)


def build_default_registry(
    proxy: ProxyClient,
    *,
    max_content_chars: int = PROMPT_CONTENT_CHARS,
    search_source_chars: int = SEARCH_SOURCE_CHARS,
    scrape_min_chars: int = 50,
    scrape_max_chars: int = SCRAPE_SOURCE_CHARS,
) -> ToolRegistry:
    """Registry with the built-in /cari, /web, /kalkulator and /clear handlers.

    The limits mirror the proxy-side Settings so both ends truncate alike.
    """
    from fireflies.tools.builtin import (
        CalculatorTool,
        ClearContextTool,
        UrlExtractTool,
        WebSearchTool,
    )

    registry = ToolRegistry()
    for tool in (
        ClearContextTool(proxy),
        WebSearchTool(
            proxy, max_content_chars=max_content_chars, source_chars=search_source_chars
        ),
        UrlExtractTool(proxy, min_chars=scrape_min_chars, max_chars=scrape_max_chars),
        CalculatorTool(proxy),
    ):
        registry.register(tool)
    return registry
