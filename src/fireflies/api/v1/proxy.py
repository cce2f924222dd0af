# Proxy router — the single action-dispatched endpoint used by ProxyClient.
# Created: 2026-10-07

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from fireflies.api.deps import get_app_settings, require_proxy_access
from fireflies.config import Settings
from fireflies.proxy import handle_action

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Proxy"])


@router.get("/proxy/test")
async def proxy_test():
    return {"status": "working", "timestamp": datetime.now(UTC).isoformat()}


@router.post("/proxy", dependencies=[Depends(require_proxy_access)])
async def proxy(request: Request, settings: Settings = Depends(get_app_settings)):
    """Run a proxy action (search, web, get_models) or an inference call."""
    raw = await request.body()
    try:
        if not raw.strip():
            raise ValueError("Empty request body")
        body = json.loads(raw)
        if not isinstance(body, dict):
            raise ValueError("Request body must be an object")
    except ValueError as e:
        logger.warning("Rejected proxy request: %s", e)
        return JSONResponse(status_code=400, content={"error": "Invalid JSON in request body"})

    status, payload = await handle_action(body, settings)
    return JSONResponse(status_code=status, content=payload)
