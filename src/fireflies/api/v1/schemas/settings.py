# Config, model and subscription schemas.
# Created: 2026-10-07

from __future__ import annotations

from pydantic import BaseModel


class ChatConfigModel(BaseModel):
    model: str
    ollama_base_url: str


class ChatConfigUpdate(BaseModel):
    """Only provided fields are changed."""

    model: str | None = None
    ollama_base_url: str | None = None


class ModelInfo(BaseModel):
    name: str
    model: str | None = None
    modified_at: str | None = None
    size: int | None = None


class ModelsResponse(BaseModel):
    models: list[ModelInfo]
    selected: str


class SubscriptionResponse(BaseModel):
    subscription_plan: str
    subscription_status: str
    isProUser: bool
