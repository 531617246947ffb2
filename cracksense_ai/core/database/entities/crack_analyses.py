"""
Crack analysis entity models.

This module contains the database entities for homeowner crack analyses and
the PDF exports that charge credits against them. An analysis is free to
create; the export row is what makes it billable.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class CrackAnalysis(Base, table=True):
    """Entity for a single homeowner crack analysis.

    Stores the structured assessment produced from up to three photos,
    together with the model that produced it.

    Table: crack_analyses
    """

    __tablename__ = "crack_analyses"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, index=True)

    crack_type: Optional[str] = Field(default=None)
    crack_cause: Optional[str] = Field(default=None)
    crack_width: Optional[str] = Field(default=None, max_length=64)
    crack_length: Optional[str] = Field(default=None, max_length=64)
    repair_steps: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    risk_level: Optional[str] = Field(default=None, max_length=16, index=True)

    image_urls: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    processed_image_url: Optional[str] = Field(default=None)
    model_used: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"CrackAnalysis(id={self.id}, user_id={self.user_id}, risk_level={self.risk_level})"


class PdfExport(Base, table=True):
    """Entity recording that an analysis was exported (and paid for).

    At most one export exists per user and analysis.

    Table: pdf_exports
    """

    __tablename__ = "pdf_exports"
    __table_args__ = (UniqueConstraint("user_id", "analysis_id", name="uq_pdf_exports_user_analysis"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, index=True)
    analysis_id: str = Field(foreign_key="crack_analyses.id", max_length=64, index=True)
    model_used: str = Field(max_length=128)
    credits_charged: int = Field()
    exported_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"PdfExport(id={self.id}, analysis_id={self.analysis_id}, credits_charged={self.credits_charged})"
