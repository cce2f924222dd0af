# Settings router — chat config, model listing, subscription status.
# Created: 2026-10-07

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, replace

from fastapi import APIRouter, Depends, HTTPException

from fireflies.api.deps import get_chat_service, get_profile, require_profile
from fireflies.api.v1.schemas.settings import (
    ChatConfigModel,
    ChatConfigUpdate,
    ModelInfo,
    ModelsResponse,
    SubscriptionResponse,
)
from fireflies.chat.service import ChatService
from fireflies.chat.subscription import Profile, resolve_subscription
from fireflies.errors import ProxyError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settings"])

# Protects config read-modify-write from concurrent clients
_config_lock = asyncio.Lock()


@router.get("/config", response_model=ChatConfigModel)
async def get_config(service: ChatService = Depends(get_chat_service)):
    return ChatConfigModel(**asdict(service.config))


@router.put(
    "/config", response_model=ChatConfigModel, dependencies=[Depends(require_profile)]
)
async def update_config(body: ChatConfigUpdate, service: ChatService = Depends(get_chat_service)):
    """Update the selected model and/or Ollama URL. Only provided fields change."""
    changes = body.model_dump(exclude_none=True)
    async with _config_lock:
        config = service.update_config(replace(service.config, **changes))
    return ChatConfigModel(**asdict(config))


@router.get("/models", response_model=ModelsResponse)
async def list_models(service: ChatService = Depends(get_chat_service)):
    """Models available on the configured Ollama server."""
    try:
        models = await service.proxy.get_models(service.config.ollama_base_url)
    except ProxyError as e:
        logger.warning("Model listing failed: %s", e)
        raise HTTPException(status_code=502, detail="Failed to fetch models")
    return ModelsResponse(
        models=[ModelInfo(**m) for m in models if m.get("name")],
        selected=service.config.model,
    )


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(profile: Profile | None = Depends(get_profile)):
    """Subscription plan of the caller; anonymous callers are on the free plan."""
    return SubscriptionResponse(**resolve_subscription(profile))
