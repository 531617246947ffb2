"""Shared pydantic base schema for domain and I/O models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base class for all non-table pydantic models."""

    model_config = ConfigDict(use_enum_values=False, populate_by_name=True)
