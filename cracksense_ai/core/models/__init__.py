"""Core models and schemas for centralized data management."""

from __future__ import annotations

from .base import BaseSchema

__all__ = ["BaseSchema"]
