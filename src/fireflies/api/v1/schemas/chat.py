# Chat schemas.
# Created: 2026-10-07

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Send a message for processing."""

    content: str = Field("", max_length=100000)
    session_id: str | None = None
    # Base64 image or data URL; switches plain chat to the vision model
    image: str | None = None


class ChatMessageOut(BaseModel):
    id: str
    role: str
    content: str
    timestamp: datetime


class ChatSessionOut(BaseModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int


class ChatResponse(BaseModel):
    """Complete chat response."""

    session_id: str
    command: str
    state: str
    user_message: ChatMessageOut
    reply: ChatMessageOut


class CommandInfo(BaseModel):
    name: str
    command: str
    description: str
    usage: str
