"""
Professional finder agent.

Finds structural engineers near a user for cracks that need professional
attention. Urgency follows the analysis risk level; the location comes from
a city id, a zip code or coordinates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.entities.professionals import Professional, ProfessionalSearchLog, UsCity
from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.database.repositories.professionals import (
    ProfessionalRepository,
    ProfessionalSearchLogRepository,
    UsCityRepository,
)
from cracksense_ai.core.errors import AnalysisNotFoundError, ProfessionalNotFoundError
from cracksense_ai.core.models import BaseSchema
from cracksense_ai.core.models.domain import EmergencyLevel
from cracksense_ai.services.location import LocationService, calculate_distance

logger = logging.getLogger(__name__)

SERVICE_TYPE = "structural-engineering"
SEARCH_QUERY = "structural-engineer"
MAX_RESULTS = 20

# risk level -> (emergency level, max response minutes, min rating)
RISK_SEARCH_PARAMS = {
    "critical": (EmergencyLevel.critical, 60, 4.5),
    "high": (EmergencyLevel.high, 120, 4.0),
    "medium": (EmergencyLevel.medium, 480, 3.5),
}
DEFAULT_SEARCH_PARAMS = (EmergencyLevel.low, None, 3.0)

EMERGENCY_MESSAGES = {
    EmergencyLevel.critical: (
        "⚠️ **Critical Issue** - Serious structural problems detected. Contact a professional structural "
        "engineer immediately for assessment. Avoid the affected area for safety."
    ),
    EmergencyLevel.high: (
        "🔶 **High Priority** - Structural issues requiring professional attention found. Contact a "
        "structural engineer within 24 hours for inspection."
    ),
    EmergencyLevel.medium: (
        "🔷 **Needs Attention** - Recommend contacting a professional structural engineer for evaluation "
        "to determine if repairs are needed."
    ),
}
DEFAULT_EMERGENCY_MESSAGE = (
    "💡 **Professional Consultation** - If you need professional advice, these engineers can provide "
    "consultation services."
)


class ProfessionalSearchParams(BaseSchema):
    """Where to search and how urgent the search is."""

    zip_code: Optional[str] = None
    city_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    service_type: Optional[str] = None
    emergency_level: Optional[EmergencyLevel] = None
    max_distance: Optional[float] = None
    min_rating: Optional[float] = None
    max_response_time: Optional[int] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class PrimaryCity(BaseSchema):
    city_name: str = "Unknown"
    state_code: str = "Unknown"
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ProfessionalListing(BaseSchema):
    """A professional with its city and, for coordinate searches, the distance in miles."""

    id: int
    company_name: str
    rating: float = 0.0
    review_count: int = 0
    hire_count: int = 0
    is_top_pro: bool = False
    is_licensed: bool = False
    response_time_minutes: Optional[int] = None
    estimate_fee_amount: Optional[float] = None
    estimate_fee_waived_if_hired: bool = False
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website_url: Optional[str] = None
    thumbtack_url: Optional[str] = None
    primary_city: PrimaryCity = Field(default_factory=PrimaryCity)
    distance: Optional[float] = None

    @classmethod
    def from_entity(
        cls, professional: Professional, city: Optional[UsCity], distance: Optional[float] = None
    ) -> "ProfessionalListing":
        primary_city = (
            PrimaryCity(
                city_name=city.city_name,
                state_code=city.state_code,
                latitude=city.latitude,
                longitude=city.longitude,
            )
            if city is not None
            else PrimaryCity()
        )
        data = professional.model_dump(
            exclude={"primary_city_id", "is_active", "created_at", "updated_at"},
        )
        return cls(**data, primary_city=primary_city, distance=distance)


@dataclass
class _ResolvedLocation:
    city_id: Optional[int]
    zip_code: Optional[str]


def search_params_for_risk(risk_level: Optional[str], location: ProfessionalSearchParams) -> ProfessionalSearchParams:
    """Urgency, response time and rating thresholds for an analysis risk level."""
    emergency_level, max_response_time, min_rating = RISK_SEARCH_PARAMS.get(
        risk_level or "medium", DEFAULT_SEARCH_PARAMS
    )
    return location.model_copy(
        update={
            "service_type": SERVICE_TYPE,
            "emergency_level": emergency_level,
            "max_response_time": max_response_time,
            "min_rating": min_rating,
        }
    )


def get_emergency_recommendation_message(level: Optional[EmergencyLevel | str]) -> str:
    try:
        emergency_level = EmergencyLevel(level) if level is not None else None
    except ValueError:
        emergency_level = None
    return EMERGENCY_MESSAGES.get(emergency_level, DEFAULT_EMERGENCY_MESSAGE)


def format_professional_for_display(professional: ProfessionalListing) -> str:
    """Markdown card for a professional."""
    rating = f"⭐ {professional.rating}/5.0" if professional.rating else "No rating yet"
    reviews = f"({professional.review_count} reviews)" if professional.review_count else ""
    response_time = (
        f"Responds in about {professional.response_time_minutes} minutes"
        if professional.response_time_minutes
        else "Response time unknown"
    )

    badges = []
    if professional.is_top_pro:
        badges.append("🏆 Top Pro")
    if professional.is_licensed:
        badges.append("📜 Licensed")

    city = professional.primary_city
    location = f"{city.city_name}, {city.state_code}"
    fee = f"${professional.estimate_fee_amount:g}" if professional.estimate_fee_amount else "Free"
    waived = "(waived if hired)" if professional.estimate_fee_waived_if_hired else ""
    website = f"🌐 Website: {professional.website_url}" if professional.website_url else ""

    lines = [
        f"**{professional.company_name}**",
        " ".join(part for part in (rating, reviews, " ".join(badges)) if part),
        f"📍 Service area: {location}",
        f"⏱️ {response_time}",
        f"💰 On-site estimate: {fee} {waived}".rstrip(),
        "",
        professional.description or "Professional structural engineering services",
        "",
        f"📞 Contact: {professional.phone or 'Contact through the platform'}",
    ]
    if website:
        lines.append(website)
    return "\n".join(lines)


class ProfessionalFinderAgent:
    """
    Search the professional directory.

    Args:
        session: Database session
        http_client: HTTP client for geocoding lookups of unknown locations
    """

    def __init__(self, session: AsyncSession, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.session = session
        self.location = LocationService(session, client=http_client)
        self.analyses = CrackAnalysisRepository(session)
        self.cities = UsCityRepository(session)
        self.professionals = ProfessionalRepository(session)
        self.search_logs = ProfessionalSearchLogRepository(session)

    async def aclose(self) -> None:
        await self.location.aclose()

    async def __aenter__(self) -> ProfessionalFinderAgent:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def find_professionals_for_analysis(
        self,
        analysis_id: str,
        location: ProfessionalSearchParams,
        user_id: Optional[str] = None,
    ) -> List[ProfessionalListing]:
        """
        Find professionals for a stored analysis.

        Raises:
            AnalysisNotFoundError: ``analysis_id`` does not exist
        """
        analysis = await self.analyses.get_by_id(analysis_id)
        if analysis is None:
            raise AnalysisNotFoundError(analysis_id)

        params = search_params_for_risk(analysis.risk_level, location)
        professionals = await self.search_professionals(params)
        await self._log_search(params, len(professionals), user_id=user_id, analysis_id=analysis_id)
        return professionals

    async def search_professionals(self, params: ProfessionalSearchParams) -> List[ProfessionalListing]:
        """
        Active professionals in the searched city.

        Ordered by top-pro status, rating and hire count. Returns an empty
        list when the location cannot be resolved to a city.
        """
        resolved = await self._resolve_location(params)
        if resolved.city_id is None:
            logger.info(f"No city found for search {params.model_dump(exclude_none=True)}")
            return []

        professionals = await self.professionals.list_active_in_city(resolved.city_id, limit=MAX_RESULTS)
        if not professionals:
            return []

        city = await self.cities.get_by_id(resolved.city_id)
        distance = None
        if params.has_coordinates and city is not None and city.latitude is not None and city.longitude is not None:
            distance = round(calculate_distance(params.latitude, params.longitude, city.latitude, city.longitude), 1)

        logger.debug(f"Found {len(professionals)} professionals in city {resolved.city_id}")
        return [ProfessionalListing.from_entity(p, city, distance) for p in professionals]

    async def get_professional_details(self, professional_id: int) -> ProfessionalListing:
        """
        Raises:
            ProfessionalNotFoundError: No professional with that id
        """
        professional = await self.professionals.get_by_id(professional_id)
        if professional is None:
            raise ProfessionalNotFoundError(professional_id)
        city = await self.cities.get_by_id(professional.primary_city_id) if professional.primary_city_id else None
        return ProfessionalListing.from_entity(professional, city)

    async def _resolve_location(self, params: ProfessionalSearchParams) -> _ResolvedLocation:
        if params.city_id is not None:
            return _ResolvedLocation(city_id=params.city_id, zip_code=params.zip_code)
        if params.zip_code:
            city = await self.location.get_city_from_zip_code(params.zip_code)
            return _ResolvedLocation(city_id=city.id if city else None, zip_code=params.zip_code)
        if params.has_coordinates:
            info = await self.location.get_zip_code_from_coordinates(params.latitude, params.longitude)
            if info is not None:
                return _ResolvedLocation(city_id=info.city.id, zip_code=info.zip_code)
        return _ResolvedLocation(city_id=None, zip_code=None)

    async def _log_search(
        self,
        params: ProfessionalSearchParams,
        results_count: int,
        user_id: Optional[str] = None,
        analysis_id: Optional[str] = None,
    ) -> None:
        context: Dict[str, Any] = params.model_dump(mode="json", exclude_none=True)
        if analysis_id is not None:
            context["crack_analysis_id"] = analysis_id
        await self.search_logs.create(
            ProfessionalSearchLog(
                user_id=user_id,
                search_query=SEARCH_QUERY,
                zip_code=params.zip_code,
                city_id=params.city_id,
                results_count=results_count,
                search_context=context,
            )
        )
