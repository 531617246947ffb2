"""Base schema for request and response envelopes exchanged with the web client."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiSchema(BaseModel):
    """Envelope schema serialized with camelCase keys.

    Both the camelCase alias and the snake_case field name are accepted on
    input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def camelize_keys(value: Any) -> Any:
    """Rename every dict key to camelCase, recursing into nested dicts and lists."""
    if isinstance(value, dict):
        return {to_camel(key): camelize_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize_keys(item) for item in value]
    return value
