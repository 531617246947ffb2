"""Crack record I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cracksense_ai.core.models.domain import Severity

from .base import ApiSchema


class CrackRecordRead(BaseModel):
    """Schema for reading a crack record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    description: str
    image_urls: List[str] = Field(default_factory=list)
    ai_notes: str = ""
    expert_notes: Optional[str] = None
    risk_level: str
    created_at: datetime


class CrackRecordCreate(ApiSchema):
    """Schema for logging a crack."""

    description: str = Field(default="", description="What the crack looks like")
    image_urls: List[str] = Field(default_factory=list, description="1 to 3 photo URLs")
    ai_notes: str = Field(default="", description="Notes from an AI analysis")
    expert_notes: Optional[str] = Field(default=None, description="Notes from a professional")
    risk_level: Severity = Field(default=Severity.low, description="low, moderate or high")


class CrackRecordUpdate(ApiSchema):
    """Schema for editing a crack record. Omitted fields stay unchanged."""

    description: Optional[str] = None
    image_urls: Optional[List[str]] = None
    ai_notes: Optional[str] = None
    expert_notes: Optional[str] = None
    risk_level: Optional[Severity] = None


class CrackListResponse(ApiSchema):
    cracks: List[CrackRecordRead]


class CrackResponse(ApiSchema):
    crack: CrackRecordRead
