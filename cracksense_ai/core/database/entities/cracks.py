"""
Crack record entity model.

A crack record is a user-maintained log entry (photos, notes and a risk
level) independent of the AI analysis pipeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class CrackRecord(Base, table=True):
    """User-owned crack log entry.

    Table: cracks
    """

    __tablename__ = "cracks"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, index=True)
    description: str = Field()
    image_urls: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    ai_notes: str = Field(default="")
    expert_notes: Optional[str] = Field(default=None)
    risk_level: str = Field(default="low", max_length=16)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"CrackRecord(id={self.id}, user_id={self.user_id}, risk_level={self.risk_level})"
