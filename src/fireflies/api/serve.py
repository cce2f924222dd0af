"""API server for ``fireflies serve``.

Builds the FastAPI app with the versioned ``/api/v1/`` routers and CORS, and
wires one ``ChatService`` into ``app.state``.
"""

from __future__ import annotations

import logging
import os
import secrets

from fireflies.chat.history import ChatHistory
from fireflies.config import ConfigStore, Settings, get_settings

logger = logging.getLogger(__name__)


def create_api_app(
    settings: Settings | None = None,
    *,
    history: ChatHistory | None = None,
    config_store: ConfigStore | None = None,
):
    """Build the FastAPI application."""
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from fireflies import __version__
    from fireflies.api.v1 import mount_v1_routers
    from fireflies.chat.history import InMemoryChatHistory
    from fireflies.chat.service import ChatService
    from fireflies.config import ChatConfig, FileConfigStore
    from fireflies.llm.client import resolve_proxy_client
    from fireflies.tools.registry import build_default_registry

    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="FireFlies API",
        description="Chat with Ollama models, web search and page reading commands.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    # --- CORS -----------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_allowed_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Client-Info", "Apikey"],
    )

    # --- Services -------------------------------------------------------
    app.state.settings = settings
    app.state.proxy_token = settings.proxy_token or secrets.token_urlsafe(32)
    proxy = resolve_proxy_client(settings, token=app.state.proxy_token)
    logger.info("Chat service uses proxy at %s", proxy.url)
    app.state.chat_service = ChatService(
        proxy,
        history or InMemoryChatHistory(),
        config_store or FileConfigStore(default=ChatConfig.from_settings(settings)),
        registry=build_default_registry(
            proxy,
            max_content_chars=settings.prompt_max_chars,
            search_source_chars=settings.search_content_chars,
            scrape_min_chars=settings.scrape_min_content,
            scrape_max_chars=settings.scrape_content_chars,
        ),
        vision_model=settings.vision_model,
    )

    # --- Mount all /api/v1/ routers -------------------------------------
    mount_v1_routers(app)

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    dev: bool = False,
) -> None:
    """Start the API server."""
    import uvicorn

    print("\n" + "=" * 50)
    print("\U0001f525 FIREFLIES API SERVER")
    print("=" * 50)
    print(f"\n\U0001f310 API docs: http://{'localhost' if host == '127.0.0.1' else host}:{port}/api/v1/docs\n")

    if dev:
        import pathlib

        # The reloader builds the app in a child process from env settings
        os.environ["FIREFLIES_WEB_HOST"] = host
        os.environ["FIREFLIES_WEB_PORT"] = str(port)
        get_settings.cache_clear()

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "fireflies.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        settings = get_settings().model_copy(update={"web_host": host, "web_port": port})
        app = create_api_app(settings)
        uvicorn.run(app, host=host, port=port)
