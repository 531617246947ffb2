"""
Crack cause template entity.

Templates hold the reference description and standard recommendations for
each crack cause category.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, utc_now


class CrackCauseTemplate(Base, table=True):
    """Reference text for one crack cause category.

    Table: crack_cause_templates
    """

    __tablename__ = "crack_cause_templates"

    id: Optional[int] = Field(default=None, primary_key=True)
    category: str = Field(max_length=32, index=True)
    title: str = Field(max_length=255)
    description: str = Field()
    typical_characteristics: str = Field(default="")
    risk_indicators: str = Field(default="")
    standard_recommendations: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    severity_factors: str = Field(default="")

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"CrackCauseTemplate(id={self.id}, category={self.category})"
