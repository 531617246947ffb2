"""
Professional Finder Endpoints.

Find structural engineers near the user for a crack analysis, with an
urgency message matched to the requested emergency level.
"""

from fastapi import APIRouter, HTTPException, status

from cracksense_ai.agent_core.agents.professional_finder import (
    ProfessionalFinderAgent,
    ProfessionalListing,
    ProfessionalSearchParams,
    format_professional_for_display,
    get_emergency_recommendation_message,
)
from cracksense_ai.core.errors import AnalysisNotFoundError, ProfessionalNotFoundError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import EmergencyLevel
from cracksense_ai.core.models.io import (
    ProfessionalDetailResponse,
    ProfessionalDisplay,
    ProfessionalFinderRequest,
    ProfessionalFinderResponse,
    ProfessionalSearchData,
    SearchMetadata,
)
from cracksense_ai.server.services.deps import CurrentUserDep, HttpClientDep, SessionDep
from cracksense_ai.services.location import is_valid_us_zip_code, normalize_zip_code

logger = get_logger(__name__)
router = APIRouter()


def _display(listing: ProfessionalListing) -> ProfessionalDisplay:
    return ProfessionalDisplay(**listing.model_dump(), formatted_display=format_professional_for_display(listing))


@router.post(
    "",
    response_model=ProfessionalFinderResponse,
    summary="Find Professionals",
    description="Find structural engineers for a crack analysis by ZIP code or coordinates.",
    responses={
        400: {"description": "Missing analysis ID, invalid ZIP code or no location"},
        404: {"description": "Crack analysis not found"},
    },
)
async def find_professionals(
    request: ProfessionalFinderRequest,
    user_id: CurrentUserDep,
    session: SessionDep,
    http_client: HttpClientDep,
) -> ProfessionalFinderResponse:
    """
    Find professionals for an analysis.

    - **crackAnalysisId**: The analysis the search is for.
    - **zipCode**: US ZIP code, 5 or 9 digits; takes precedence over coordinates.
    - **latitude** / **longitude**: Used when no ZIP code is given.
    - **emergencyLevel**: Urgency of the message shown with the results (default medium).
    - **maxDistance**: Search radius in miles (default 50).
    """
    if not request.crack_analysis_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Crack analysis ID is required")

    if request.zip_code:
        if not is_valid_us_zip_code(request.zip_code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ZIP code format")
        location = ProfessionalSearchParams(zip_code=normalize_zip_code(request.zip_code))
        search_location = location.zip_code
    elif request.latitude is not None and request.longitude is not None:
        location = ProfessionalSearchParams(latitude=request.latitude, longitude=request.longitude)
        search_location = f"{request.latitude}, {request.longitude}"
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Either ZIP code or coordinates are required"
        )

    emergency_level = request.emergency_level or EmergencyLevel.medium
    location = location.model_copy(update={"max_distance": request.max_distance})

    agent = ProfessionalFinderAgent(session, http_client=http_client)
    try:
        professionals = await agent.find_professionals_for_analysis(
            request.crack_analysis_id, location, user_id=user_id
        )
    except AnalysisNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Crack analysis not found")

    logger.info(f"Found {len(professionals)} professionals near {search_location} for user {user_id}")
    return ProfessionalFinderResponse(
        data=ProfessionalSearchData(
            recommendation_message=get_emergency_recommendation_message(emergency_level),
            professionals=[_display(p) for p in professionals],
            search_metadata=SearchMetadata(
                search_location=search_location,
                results_count=len(professionals),
                emergency_level=emergency_level,
                max_distance=request.max_distance,
            ),
        )
    )


@router.get(
    "/{professional_id}",
    response_model=ProfessionalDetailResponse,
    summary="Get Professional",
    description="Retrieve one professional with its city and display card.",
    responses={404: {"description": "Professional not found"}},
)
async def get_professional(
    professional_id: int, user_id: CurrentUserDep, session: SessionDep, http_client: HttpClientDep
) -> ProfessionalDetailResponse:
    agent = ProfessionalFinderAgent(session, http_client=http_client)
    try:
        professional = await agent.get_professional_details(professional_id)
    except ProfessionalNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Professional not found")
    return ProfessionalDetailResponse(data=_display(professional))
