# Chat router — send, stop, sessions, history, command listing.
# Created: 2026-10-07
#
# One generation per session_id at a time: a second send while one is in
# flight gets 409, and /chat/stop cancels the in-flight call.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from fireflies.api.deps import get_chat_service, get_profile, require_profile
from fireflies.api.v1.schemas.chat import (
    ChatMessageOut,
    ChatRequest,
    ChatResponse,
    ChatSessionOut,
    CommandInfo,
)
from fireflies.chat.history import ChatMessage
from fireflies.chat.service import ChatService
from fireflies.chat.subscription import Profile
from fireflies.errors import AuthRequiredError, SessionBusyError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


def _message_out(message: ChatMessage) -> ChatMessageOut:
    return ChatMessageOut(**message.to_dict())


@router.post("/chat", response_model=ChatResponse)
async def chat_send(
    body: ChatRequest,
    profile: Profile | None = Depends(get_profile),
    service: ChatService = Depends(get_chat_service),
):
    """Send a message and get the complete reply."""
    if not body.content.strip() and not body.image:
        raise HTTPException(status_code=400, detail="content or image is required")

    try:
        turn = await service.send_message(
            profile, body.content, chat_id=body.session_id, image=body.image
        )
    except AuthRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ChatResponse(
        session_id=turn.chat_id,
        command=turn.command,
        state=turn.state.value,
        user_message=_message_out(turn.user_message),
        reply=_message_out(turn.reply),
    )


@router.post("/chat/stop", dependencies=[Depends(require_profile)])
async def chat_stop(session_id: str = "", service: ChatService = Depends(get_chat_service)):
    """Cancel an in-flight generation."""
    if not session_id:
        raise HTTPException(status_code=400, detail="session_id is required")

    if not await service.stop(session_id):
        raise HTTPException(status_code=404, detail="No active generation for this session")
    return {"status": "ok", "session_id": session_id}


@router.get("/chat", response_model=list[ChatSessionOut])
async def chat_sessions(
    profile: Profile = Depends(require_profile),
    service: ChatService = Depends(get_chat_service),
):
    """List the caller's chat sessions, most recently active first."""
    return [
        ChatSessionOut(
            id=s.id,
            title=s.title,
            created_at=s.created_at,
            updated_at=s.updated_at,
            message_count=len(s.messages),
        )
        for s in await service.list_chats(profile)
    ]


@router.delete("/chat/{session_id}")
async def chat_delete(
    session_id: str,
    profile: Profile = Depends(require_profile),
    service: ChatService = Depends(get_chat_service),
):
    """Delete a chat session, stopping any generation still running in it."""
    try:
        await service.delete_chat(profile, session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return {"status": "ok", "session_id": session_id}


@router.get(
    "/chat/{session_id}/messages",
    response_model=list[ChatMessageOut],
    dependencies=[Depends(require_profile)],
)
async def chat_messages(session_id: str, service: ChatService = Depends(get_chat_service)):
    """List the messages of a chat session."""
    try:
        messages = await service.history.messages(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return [_message_out(m) for m in messages]


@router.get("/commands", response_model=list[CommandInfo])
async def list_commands(service: ChatService = Depends(get_chat_service)):
    """Describe the chat commands."""
    return [CommandInfo(**d) for d in service.registry.get_definitions()]
