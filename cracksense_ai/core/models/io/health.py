"""Service status models."""

from __future__ import annotations

from typing import List, Literal

from pydantic import Field

from .base import ApiSchema


class HealthResponse(ApiSchema):
    """Reachability of the API and its database."""

    status: Literal["ok", "degraded"]
    database: Literal["ok", "unavailable"]
    ai_configured: bool = Field(description="Whether an OpenRouter key is set")


class VersionResponse(ApiSchema):
    version: str
    api_version: str = "v1"
    chat_models: List[str]
