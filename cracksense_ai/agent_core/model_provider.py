"""
Model Provider.

Creates Pydantic AI models backed by OpenRouter's OpenAI-compatible API and
turns image URLs into Pydantic AI user content.

When no OpenRouter API key is configured every factory returns ``None`` and
callers fall back to their deterministic answers.
"""

from __future__ import annotations

import base64
import logging
from typing import List, Optional, Sequence, Union

from pydantic_ai import BinaryContent, ImageUrl, ModelSettings
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.providers.openrouter import OpenRouterProvider

from cracksense_ai.server.core.config import settings

logger = logging.getLogger(__name__)

OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

ImagePart = Union[ImageUrl, BinaryContent]


def is_llm_configured() -> bool:
    """Whether an OpenRouter API key is available."""
    return bool(settings.openrouter.api_key)


def create_chat_model(
    model_name: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> Optional[Model]:
    """
    Create an OpenRouter chat model.

    Args:
        model_name: OpenRouter model id (e.g. ``google/gemini-2.5-flash``).
        temperature: Sampling temperature, provider default when None.
        max_tokens: Completion token limit, provider default when None.

    Returns:
        The model, or None when no API key is configured.
    """
    config = settings.openrouter
    if not config.api_key:
        logger.debug(f"OPENROUTER_API_KEY is not set, no model created for {model_name}")
        return None

    model_settings = ModelSettings()
    if temperature is not None:
        model_settings["temperature"] = temperature
    if max_tokens is not None:
        model_settings["max_tokens"] = max_tokens

    if config.base_url.rstrip("/") == OPENROUTER_DEFAULT_BASE_URL:
        provider = OpenRouterProvider(api_key=config.api_key)
    else:
        provider = OpenAIProvider(base_url=config.base_url, api_key=config.api_key)

    logger.debug(f"Creating OpenRouter model: {model_name}")
    return OpenAIChatModel(model_name, provider=provider, settings=model_settings)


def create_agent_model(temperature: Optional[float] = None, max_tokens: Optional[int] = None) -> Optional[Model]:
    """Model used by the inspection, recommendation and chat agents."""
    return create_chat_model(settings.openrouter.agent_model, temperature=temperature, max_tokens=max_tokens)


def create_classifier_model() -> Optional[Model]:
    """Model used to classify intents the keyword tables cannot decide."""
    return create_chat_model(settings.openrouter.classifier_model, temperature=0.1, max_tokens=50)


def image_part(url: str) -> ImagePart:
    """
    Convert an image reference into Pydantic AI user content.

    ``data:`` URLs are decoded into binary content; anything else is passed
    through as an image URL.
    """
    if url.startswith("data:"):
        header, _, payload = url.partition(",")
        media_type = header[len("data:") :].split(";")[0] or "image/jpeg"
        return BinaryContent(data=base64.b64decode(payload), media_type=media_type)
    return ImageUrl(url=url)


def image_parts(urls: Sequence[str]) -> List[ImagePart]:
    return [image_part(url) for url in urls]
