# Generation sessions — one in-flight plain-chat inference per chat view.
# Created: 2026-10-05
#
# IDLE -> SENDING -> STREAMING -> {COMPLETED | CANCELLED | ERRORED} -> IDLE
#
# The inference call runs in its own asyncio.Task so stop() can cancel it.
# The assistant placeholder is written exactly once: with the response, the
# stop notice, or the fallback error.

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from enum import Enum

from fireflies.chat import prompts
from fireflies.chat.history import ChatHistory, ChatMessage, Role
from fireflies.config import DEFAULT_VISION_MODEL, ChatConfig
from fireflies.errors import SessionBusyError
from fireflies.llm.client import ProxyClient

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERRORED = "errored"


_ACTIVE = (SessionState.SENDING, SessionState.STREAMING)


def encode_image(image: bytes | str) -> str:
    """Base64 payload for the proxy; data-URL prefixes are stripped."""
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


@dataclass
class GenerationSession:
    chat_id: str
    target_model: str
    is_vision: bool
    state: SessionState = SessionState.SENDING
    cancel_requested: bool = False
    task: asyncio.Task | None = field(default=None, repr=False)
    message_id: str | None = None
    done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)


@dataclass
class GenerationOutcome:
    state: SessionState
    message: ChatMessage


class GenerationController:
    """Runs plain-chat generations for a single chat view."""

    def __init__(
        self,
        proxy: ProxyClient,
        history: ChatHistory,
        config: ChatConfig,
        *,
        vision_model: str = DEFAULT_VISION_MODEL,
    ):
        self._proxy = proxy
        self._history = history
        self.config = config
        self.vision_model = vision_model
        self._session: GenerationSession | None = None
        self.last_state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.IDLE
        return self._session.state

    @property
    def busy(self) -> bool:
        return self.state in _ACTIVE

    @property
    def session(self) -> GenerationSession | None:
        return self._session

    async def submit(
        self, chat_id: str, text: str, image: bytes | str | None = None
    ) -> GenerationOutcome:
        """Generate the assistant reply for a plain-chat message.

        The user message must already be in history. Raises
        ``SessionBusyError`` if a generation is in flight.
        """
        if self.busy:
            raise SessionBusyError("A response is already being generated")

        is_vision = image is not None
        session = GenerationSession(
            chat_id=chat_id,
            target_model=self.vision_model if is_vision else self.config.model,
            is_vision=is_vision,
        )
        self._session = session
        logger.info(
            "Generation started (chat=%s, model=%s, vision=%s)",
            chat_id,
            session.target_model,
            is_vision,
        )

        try:
            placeholder = await self._history.add_message(chat_id, Role.ASSISTANT, "")
            session.message_id = placeholder.id

            if is_vision:
                prompt = text or prompts.DEFAULT_IMAGE_PROMPT
                call = self._proxy.generate(
                    prompt,
                    session.target_model,
                    image=encode_image(image),
                    base_url=self.config.ollama_base_url,
                )
            else:
                history = await self._history.history_for_ai(chat_id)
                call = self._proxy.generate(
                    text,
                    session.target_model,
                    history=history,
                    base_url=self.config.ollama_base_url,
                )

            if session.cancel_requested:
                call.close()
                return await self._finish(session, SessionState.CANCELLED, prompts.GENERATION_STOPPED)

            session.task = asyncio.create_task(call)
            session.state = SessionState.STREAMING
            try:
                response = await session.task
            except asyncio.CancelledError:
                if not session.cancel_requested:
                    raise
                logger.info("Generation stopped by user (chat=%s)", chat_id)
                return await self._finish(session, SessionState.CANCELLED, prompts.GENERATION_STOPPED)

            return await self._finish(
                session, SessionState.COMPLETED, response or prompts.NO_AI_RESPONSE
            )
        except asyncio.CancelledError:
            if session.task is not None and not session.task.done():
                session.task.cancel()
            self._session = None
            self.last_state = SessionState.CANCELLED
            raise
        except Exception as e:
            logger.error("Generation failed (chat=%s): %s", chat_id, e, exc_info=True)
            if session.message_id is None:
                message = await self._history.add_message(
                    chat_id, Role.ASSISTANT, prompts.GENERATION_FAILED
                )
                self._reset(SessionState.ERRORED)
                return GenerationOutcome(SessionState.ERRORED, message)
            return await self._finish(session, SessionState.ERRORED, prompts.GENERATION_FAILED)
        finally:
            session.done.set()

    async def _finish(
        self, session: GenerationSession, state: SessionState, content: str
    ) -> GenerationOutcome:
        session.state = state
        try:
            await self._history.update_message(session.chat_id, session.message_id, content)
            messages = await self._history.messages(session.chat_id)
        finally:
            self._reset(state)
        message = next(m for m in messages if m.id == session.message_id)
        return GenerationOutcome(state, message)

    def _reset(self, state: SessionState) -> None:
        self.last_state = state
        self._session = None

    async def wait(self) -> None:
        """Wait until the in-flight generation, if any, has written its reply."""
        session = self._session
        if session is not None:
            await session.done.wait()

    async def stop(self) -> bool:
        """Cancel the in-flight generation.

        Returns False when idle or when the inference call already finished.
        """
        session = self._session
        if session is None or session.state not in _ACTIVE:
            return False
        if session.task is not None and session.task.done():
            return False
        session.cancel_requested = True
        if session.task is not None:
            session.task.cancel()
        return True
