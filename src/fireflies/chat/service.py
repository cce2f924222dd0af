# Chat service — entry point for a submitted message.
# Created: 2026-10-05
#
# Routes the message, runs the matching command handler or a generation
# session, and appends every reply to chat history. Failures always end up
# as an assistant message; only AuthRequiredError and SessionBusyError are
# raised, both before any backend work.

from __future__ import annotations

import logging
from dataclasses import dataclass

from fireflies.chat import prompts
from fireflies.chat.commands import (
    Calculate,
    ClearContext,
    Command,
    PlainChat,
    Scrape,
    Search,
    UsageHint,
    route,
)
from fireflies.chat.history import ChatHistory, ChatMessage, ChatSession, Role
from fireflies.chat.session import GenerationController, SessionState
from fireflies.chat.subscription import Profile
from fireflies.config import DEFAULT_VISION_MODEL, ChatConfig, ConfigStore
from fireflies.errors import AuthRequiredError, SessionBusyError
from fireflies.llm.client import ProxyClient
from fireflies.tools.registry import ToolRegistry, build_default_registry

logger = logging.getLogger(__name__)


@dataclass
class ChatTurn:
    """Outcome of one submitted message."""

    chat_id: str
    command: str
    user_message: ChatMessage
    reply: ChatMessage
    state: SessionState = SessionState.COMPLETED


def command_name(command: Command) -> str:
    if isinstance(command, ClearContext):
        return "clear"
    if isinstance(command, Search):
        return "cari"
    if isinstance(command, Scrape):
        return "web"
    if isinstance(command, Calculate):
        return "kalkulator"
    if isinstance(command, UsageHint):
        return command.command
    return "chat"


class ChatService:
    """Handles messages for any number of chat views, one generation each."""

    def __init__(
        self,
        proxy: ProxyClient,
        history: ChatHistory,
        config_store: ConfigStore,
        *,
        registry: ToolRegistry | None = None,
        vision_model: str = DEFAULT_VISION_MODEL,
    ):
        self._proxy = proxy
        self._history = history
        self._config_store = config_store
        self._registry = registry or build_default_registry(proxy)
        self._vision_model = vision_model
        self._config = config_store.load()
        self._controllers: dict[str, GenerationController] = {}

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def history(self) -> ChatHistory:
        return self._history

    @property
    def proxy(self) -> ProxyClient:
        return self._proxy

    def update_config(self, config: ChatConfig) -> ChatConfig:
        """Persist new preferences and apply them to later generations."""
        self._config_store.save(config)
        self._config = config
        for controller in self._controllers.values():
            controller.config = config
        logger.info("Chat config updated (model=%s)", config.model)
        return config

    def controller(self, chat_id: str) -> GenerationController:
        controller = self._controllers.get(chat_id)
        if controller is None:
            controller = GenerationController(
                self._proxy,
                self._history,
                self._config,
                vision_model=self._vision_model,
            )
            self._controllers[chat_id] = controller
        return controller

    def is_generating(self, chat_id: str) -> bool:
        controller = self._controllers.get(chat_id)
        return controller is not None and controller.busy

    async def stop(self, chat_id: str) -> bool:
        controller = self._controllers.get(chat_id)
        if controller is None:
            return False
        return await controller.stop()

    async def list_chats(self, profile: Profile) -> list[ChatSession]:
        return await self._history.sessions(profile.user_id)

    async def delete_chat(self, profile: Profile, chat_id: str) -> None:
        """Stop any running generation and drop the chat with its controller.

        Raises KeyError when the chat does not exist or belongs to someone else.
        """
        owned = {s.id for s in await self._history.sessions(profile.user_id)}
        if chat_id not in owned:
            raise KeyError(f"Unknown chat session: {chat_id}")
        controller = self._controllers.pop(chat_id, None)
        if controller is not None and await controller.stop():
            await controller.wait()
        await self._history.delete_session(chat_id)
        logger.info("Chat %s deleted by user %s", chat_id, profile.user_id)

    async def send_message(
        self,
        profile: Profile | None,
        content: str,
        *,
        chat_id: str | None = None,
        image: bytes | str | None = None,
    ) -> ChatTurn:
        if profile is None:
            raise AuthRequiredError("Please log in to use the chat.")
        if chat_id and self.is_generating(chat_id):
            raise SessionBusyError("A response is already being generated")

        text = content
        if image is not None and not text.strip():
            text = prompts.DEFAULT_IMAGE_PROMPT

        chat_id = await self._ensure_session(chat_id, text, profile.user_id)
        is_first = not await self._history.messages(chat_id)
        user_message = await self._history.add_message(chat_id, Role.USER, text)
        if is_first:
            await self._history.update_title(chat_id, prompts.chat_title(text))

        command = route(text, image)
        name = command_name(command)
        logger.info("Chat %s: handling %s for user %s", chat_id, name, profile.user_id)

        if isinstance(command, PlainChat):
            outcome = await self.controller(chat_id).submit(chat_id, command.text, command.image)
            return ChatTurn(chat_id, name, user_message, outcome.message, outcome.state)

        reply_text = await self._run_command(command)
        reply = await self._history.add_message(chat_id, Role.ASSISTANT, reply_text)
        if isinstance(command, ClearContext) and reply_text == prompts.CONTEXT_CLEARED:
            await self._history.reset_context(chat_id)
        return ChatTurn(chat_id, name, user_message, reply)

    async def _ensure_session(self, chat_id: str | None, text: str, user_id: str) -> str:
        if chat_id and await self._history.has_session(chat_id):
            return chat_id
        return await self._history.create_session(
            prompts.chat_title(text), chat_id=chat_id, user_id=user_id
        )

    async def _run_command(self, command: Command) -> str:
        model = self._config.model
        base_url = self._config.ollama_base_url

        if isinstance(command, UsageHint):
            return command.message
        if isinstance(command, ClearContext):
            return await self._registry.execute("clear", model=model, base_url=base_url)
        if isinstance(command, Search):
            return await self._registry.execute(
                "cari", query=command.query, model=model, base_url=base_url
            )
        if isinstance(command, Scrape):
            return await self._registry.execute(
                "web", question=command.question, url=command.url, model=model, base_url=base_url
            )
        if isinstance(command, Calculate):
            return await self._registry.execute(
                "kalkulator", expression=command.expression, model=model, base_url=base_url
            )
        raise TypeError(f"Unhandled command: {command!r}")
