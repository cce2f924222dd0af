# Clear Context tool — /clear: ask the model to drop its conversational context.
# Created: 2026-10-04

import logging

from fireflies.chat import prompts
from fireflies.errors import ProxyError
from fireflies.llm.client import ProxyClient
from fireflies.tools.protocol import BaseTool

logger = logging.getLogger(__name__)


class ClearContextTool(BaseTool):
    def __init__(self, proxy: ProxyClient):
        self._proxy = proxy

    @property
    def name(self) -> str:
        return "clear"

    @property
    def description(self) -> str:
        return "Reset the model's conversational context for this chat."

    async def execute(self, model: str, base_url: str | None = None) -> str:
        try:
            await self._proxy.generate("/clear", model, base_url=base_url)
        except ProxyError as e:
            logger.warning("Clear context failed: %s", e)
            return prompts.CONTEXT_CLEAR_FAILED
        return prompts.CONTEXT_CLEARED
