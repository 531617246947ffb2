"""
Crack analysis I/O models for API requests and responses.

This module contains the schemas of the homeowner analysis, analysis history
and PDF export endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cracksense_ai.services.crack_analysis import CrackCauseSection
from cracksense_ai.services.homeowner_analysis import DEFAULT_ANALYSIS_MODEL

from .base import ApiSchema


class AnalyzeHomeownerRequest(ApiSchema):
    """Schema for requesting a homeowner photo analysis."""

    image_urls: List[str] = Field(default_factory=list, description="Public or data: URLs of up to 3 photos")
    description: Optional[str] = Field(default=None, description="Homeowner's description of the crack")
    model: str = Field(default=DEFAULT_ANALYSIS_MODEL, description="Vision model to analyze with")


class CrackAnalysisRead(BaseModel):
    """Schema for reading a stored crack analysis."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    crack_type: Optional[str] = None
    crack_cause: Optional[str] = None
    crack_width: Optional[str] = None
    crack_length: Optional[str] = None
    repair_steps: List[str] = Field(default_factory=list)
    risk_level: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    processed_image_url: Optional[str] = None
    model_used: Optional[str] = None
    created_at: datetime


class CrackAnalysisDetail(CrackAnalysisRead):
    """Analysis detail with the crack cause split into display sections."""

    crack_cause_sections: List[CrackCauseSection] = Field(default_factory=list)


class AnalyzeHomeownerResponse(ApiSchema):
    success: bool = True
    analysis: CrackAnalysisRead
    analysis_id: str
    model_used: str
    credits_required: int
    message: str


class AnalysisListResponse(ApiSchema):
    success: bool = True
    analyses: List[CrackAnalysisRead]


class ExportPdfRequest(ApiSchema):
    """Schema for exporting (and paying for) an analysis report."""

    analysis_id: Optional[str] = Field(default=None, description="Analysis to export")


class PdfExportRead(BaseModel):
    """Schema for reading a PDF export record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    analysis_id: str
    model_used: str
    credits_charged: int
    exported_at: datetime


class ExportPdfResponse(ApiSchema):
    success: bool = True
    message: str
    already_exported: bool = False
    credits_charged: int = 0
    remaining_credits: Optional[int] = None
    export: PdfExportRead
