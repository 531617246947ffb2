"""Professional finder I/O models for API requests and responses."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from cracksense_ai.agent_core.agents.professional_finder import ProfessionalListing
from cracksense_ai.core.models.domain import EmergencyLevel

from .base import ApiSchema

DEFAULT_MAX_DISTANCE = 50


class ProfessionalFinderRequest(ApiSchema):
    """Schema for searching professionals for an analysis."""

    crack_analysis_id: Optional[str] = Field(default=None, description="Analysis the search is for")
    zip_code: Optional[str] = Field(default=None, description="US zip code (5 or 9 digits)")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    max_distance: float = Field(default=DEFAULT_MAX_DISTANCE, description="Search radius in miles")
    emergency_level: Optional[EmergencyLevel] = Field(default=None, description="Urgency shown to the user")


class ProfessionalDisplay(ProfessionalListing):
    """A professional listing with its markdown card."""

    formatted_display: str


class SearchMetadata(BaseModel):
    search_location: str
    results_count: int
    emergency_level: EmergencyLevel
    max_distance: float


class ProfessionalSearchData(BaseModel):
    recommendation_message: str
    professionals: List[ProfessionalDisplay]
    search_metadata: SearchMetadata


class ProfessionalFinderResponse(ApiSchema):
    success: bool = True
    data: ProfessionalSearchData


class ProfessionalDetailResponse(ApiSchema):
    success: bool = True
    data: ProfessionalDisplay
