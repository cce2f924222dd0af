# Configuration — environment-driven settings plus the persisted chat preferences.
# Created: 2026-10-02
#
# Settings come from FIREFLIES_* env vars and ~/.fireflies/config.json.
# ChatConfig (selected model + Ollama URL) is handed to the chat layer
# explicitly and persisted through a ConfigStore.

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "FireFlies:latest"
DEFAULT_VISION_MODEL = "gemma3:4b"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"


def get_config_dir() -> Path:
    """Get/create the config directory (``FIREFLIES_CONFIG_DIR`` or ~/.fireflies)."""
    override = os.environ.get("FIREFLIES_CONFIG_DIR")
    d = Path(override) if override else Path.home() / ".fireflies"
    d.mkdir(parents=True, exist_ok=True)
    return d


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


class Settings(BaseSettings):
    """FireFlies settings."""

    model_config = SettingsConfigDict(env_prefix="FIREFLIES_", extra="ignore")

    # Proxy (search / scrape / inference forwarding)
    # Unset: the proxy served by this app at web_host:web_port
    proxy_url: str | None = None
    # Bearer token the chat service sends to the proxy; generated per process when unset
    proxy_token: str | None = None
    proxy_timeout: float = 60.0
    inference_timeout: float = 120.0

    # Ollama
    ollama_host: str = DEFAULT_OLLAMA_HOST
    default_model: str = DEFAULT_MODEL
    vision_model: str = DEFAULT_VISION_MODEL

    # Retrieval limits
    search_max_urls: int = 3
    search_fetch_timeout: float = 10.0
    scrape_timeout: float = 15.0
    search_content_chars: int = 2000
    scrape_content_chars: int = 5000
    search_min_content: int = 100
    scrape_min_content: int = 50
    prompt_max_chars: int = 8000

    # Web server
    web_host: str = "127.0.0.1"
    web_port: int = 8000
    api_cors_allowed_origins: list[str] = Field(default_factory=list)

    # Bearer token -> profile dict (user_id, email, full_name, subscription_plan, ...)
    auth_tokens: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @property
    def proxy_endpoint(self) -> str:
        """The configured proxy URL, or this server's own /api/v1/proxy."""
        if self.proxy_url:
            return self.proxy_url
        host = "127.0.0.1" if self.web_host in ("", "0.0.0.0", "::") else self.web_host
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.web_port}/api/v1/proxy"

    @classmethod
    def load(cls) -> Settings:
        """Load settings from config.json, with env vars filling the rest."""
        path = get_config_path()
        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text())
            except Exception as e:
                logger.warning("Failed to read %s: %s", path, e)
                data = {}
        return cls(**data)

    def save(self) -> None:
        """Persist settings to config.json."""
        path = get_config_path()
        path.write_text(json.dumps(self.model_dump(), indent=2))
        logger.info("Saved settings to %s", path)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings.load()


@dataclass
class ChatConfig:
    """Per-user chat preferences passed to the chat service at construction."""

    model: str = DEFAULT_MODEL
    ollama_base_url: str = DEFAULT_OLLAMA_HOST

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatConfig:
        return cls(model=settings.default_model, ollama_base_url=settings.ollama_host)


class ConfigStore(Protocol):
    """Persistence for ChatConfig."""

    def load(self) -> ChatConfig: ...

    def save(self, config: ChatConfig) -> None: ...


class MemoryConfigStore:
    """Keeps ChatConfig in memory only."""

    def __init__(self, config: ChatConfig | None = None):
        self._config = config or ChatConfig()

    def load(self) -> ChatConfig:
        return ChatConfig(**asdict(self._config))

    def save(self, config: ChatConfig) -> None:
        self._config = ChatConfig(**asdict(config))


class FileConfigStore:
    """ChatConfig stored as JSON, by default at ~/.fireflies/chat_config.json."""

    def __init__(self, path: Path | None = None, default: ChatConfig | None = None):
        self._path = path
        self._default = default or ChatConfig()

    @property
    def path(self) -> Path:
        return self._path or get_config_dir() / "chat_config.json"

    def load(self) -> ChatConfig:
        path = self.path
        if not path.exists():
            return ChatConfig(**asdict(self._default))
        try:
            data = json.loads(path.read_text())
            return ChatConfig(
                model=data.get("model") or self._default.model,
                ollama_base_url=data.get("ollama_base_url") or self._default.ollama_base_url,
            )
        except Exception as e:
            logger.warning("Failed to load chat config from %s: %s", path, e)
            return ChatConfig(**asdict(self._default))

    def save(self, config: ChatConfig) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(config), indent=2))
        logger.info("Saved chat config (model=%s)", config.model)
