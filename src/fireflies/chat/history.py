# Chat history — the persistence collaborator the chat service writes through.
# Created: 2026-10-04
#
# The production store (Supabase chat_sessions / chat_messages) lives outside
# this package; InMemoryChatHistory implements the same protocol for the
# bundled server and for tests.

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def generate_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ChatMessage:
    role: Role
    content: str
    id: str = field(default_factory=generate_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ChatSession:
    id: str
    title: str
    messages: list[ChatMessage] = field(default_factory=list)
    # Index of the first message the model should still see (moved by /clear)
    context_start: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    user_id: str | None = None


class ChatHistory(Protocol):
    async def create_session(
        self, title: str = "New Chat", chat_id: str | None = None, user_id: str | None = None
    ) -> str: ...

    async def has_session(self, chat_id: str) -> bool: ...

    async def add_message(self, chat_id: str, role: Role, content: str) -> ChatMessage: ...

    async def update_message(self, chat_id: str, message_id: str, content: str) -> None: ...

    async def messages(self, chat_id: str) -> list[ChatMessage]: ...

    async def history_for_ai(self, chat_id: str) -> list[dict[str, str]]: ...

    async def reset_context(self, chat_id: str) -> None: ...

    async def update_title(self, chat_id: str, title: str) -> None: ...

    async def sessions(self, user_id: str | None = None) -> list[ChatSession]: ...

    async def delete_session(self, chat_id: str) -> None: ...


class InMemoryChatHistory:
    """Process-local chat history."""

    def __init__(self):
        self._sessions: dict[str, ChatSession] = {}

    def _get(self, chat_id: str) -> ChatSession:
        try:
            return self._sessions[chat_id]
        except KeyError:
            raise KeyError(f"Unknown chat session: {chat_id}") from None

    async def create_session(
        self, title: str = "New Chat", chat_id: str | None = None, user_id: str | None = None
    ) -> str:
        chat_id = chat_id or generate_id()
        self._sessions[chat_id] = ChatSession(id=chat_id, title=title, user_id=user_id)
        logger.debug("Created chat session %s (%s)", chat_id, title)
        return chat_id

    async def has_session(self, chat_id: str) -> bool:
        return chat_id in self._sessions

    async def add_message(self, chat_id: str, role: Role, content: str) -> ChatMessage:
        session = self._get(chat_id)
        message = ChatMessage(role=role, content=content)
        session.messages.append(message)
        session.updated_at = message.timestamp
        return message

    async def update_message(self, chat_id: str, message_id: str, content: str) -> None:
        for message in self._get(chat_id).messages:
            if message.id == message_id:
                message.content = content
                return
        raise KeyError(f"Unknown message {message_id} in chat {chat_id}")

    async def messages(self, chat_id: str) -> list[ChatMessage]:
        return list(self._get(chat_id).messages)

    async def history_for_ai(self, chat_id: str) -> list[dict[str, str]]:
        session = self._get(chat_id)
        return [
            {"role": m.role.value, "content": m.content}
            for m in session.messages[session.context_start :]
            if m.content
        ]

    async def reset_context(self, chat_id: str) -> None:
        session = self._get(chat_id)
        session.context_start = len(session.messages)

    async def update_title(self, chat_id: str, title: str) -> None:
        self._get(chat_id).title = title

    async def title(self, chat_id: str) -> str:
        return self._get(chat_id).title

    async def sessions(self, user_id: str | None = None) -> list[ChatSession]:
        """Sessions owned by *user_id* (all when None), most recently active first."""
        found = [s for s in self._sessions.values() if user_id is None or s.user_id == user_id]
        return sorted(found, key=lambda s: s.updated_at, reverse=True)

    async def delete_session(self, chat_id: str) -> None:
        self._get(chat_id)
        del self._sessions[chat_id]
        logger.debug("Deleted chat session %s", chat_id)
