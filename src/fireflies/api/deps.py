# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-07

from __future__ import annotations

import logging
import secrets

from fastapi import HTTPException, Request

from fireflies.chat.service import ChatService
from fireflies.chat.subscription import Profile
from fireflies.config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings attached to the app, falling back to the cached global ones."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_chat_service(request: Request) -> ChatService:
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Chat service is not initialised")
    return service


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_profile(request: Request) -> Profile | None:
    """Resolve the caller's profile from a bearer token, or ``None``."""
    token = _bearer_token(request)
    if not token:
        return None
    data = get_app_settings(request).auth_tokens.get(token)
    if data is None:
        logger.info("Rejected unknown bearer token")
        return None
    return Profile.from_dict(data)


async def require_profile(request: Request) -> Profile:
    """FastAPI dependency that refuses unauthenticated callers.

    Usage::

        @router.post("/chat")
        async def chat_send(profile: Profile = Depends(require_profile)): ...
    """
    profile = await get_profile(request)
    if profile is None:
        raise HTTPException(status_code=401, detail="Please log in to use the chat.")
    return profile


async def require_proxy_access(request: Request) -> None:
    """Admit the app's own chat service token or any logged-in user token."""
    token = _bearer_token(request)
    if token:
        service_token = getattr(request.app.state, "proxy_token", None)
        settings = get_app_settings(request)
        service_token = service_token or settings.proxy_token
        if service_token and secrets.compare_digest(token, service_token):
            return
        if token in settings.auth_tokens:
            return
    logger.info("Rejected proxy request without a valid token")
    raise HTTPException(status_code=401, detail="Invalid or missing proxy token")
