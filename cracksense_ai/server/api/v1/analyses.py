"""
Crack Analysis Endpoints.

Homeowner photo analysis and the user's analysis history.

Producing an analysis is free; the credit check only makes sure the user can
afford to export it later (see the export endpoint).
"""

from fastapi import APIRouter, HTTPException, status

from cracksense_ai.core.database.entities.crack_analyses import CrackAnalysis
from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.errors import CreditsNotInitializedError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.io import (
    AnalysisListResponse,
    AnalyzeHomeownerRequest,
    AnalyzeHomeownerResponse,
    CrackAnalysisDetail,
    CrackAnalysisRead,
)
from cracksense_ai.server.services.deps import CurrentUserDep, HomeownerClientDep, SessionDep
from cracksense_ai.services.crack_analysis import format_crack_cause
from cracksense_ai.services.credits import CreditsService
from cracksense_ai.services.homeowner_analysis import is_allowed_model
from cracksense_ai.services.pricing import get_credit_cost

logger = get_logger(__name__)
router = APIRouter()

MAX_IMAGES = 3

ANALYSIS_COMPLETED_MESSAGE = "Analysis completed. Credits will be charged only when you export to PDF."
INSUFFICIENT_CREDITS_MESSAGE = (
    "Insufficient credits for PDF export. Credits will only be charged when you export the analysis as PDF."
)


@router.post(
    "/analyze-homeowner",
    response_model=AnalyzeHomeownerResponse,
    summary="Analyze Crack Photos",
    description="Assess up to three crack photos and save the analysis. No credits are charged.",
    response_description="The saved analysis and the credits its export will cost.",
    responses={
        400: {"description": "Missing or too many images, unknown model, or credits not initialized"},
        402: {"description": "Balance cannot cover the export of this analysis"},
    },
)
async def analyze_homeowner(
    request: AnalyzeHomeownerRequest,
    user_id: CurrentUserDep,
    session: SessionDep,
    client: HomeownerClientDep,
) -> AnalyzeHomeownerResponse:
    """
    Analyze crack photos for a homeowner.

    - **imageUrls**: 1 to 3 photo URLs.
    - **description**: Optional context from the homeowner.
    - **model**: One of the supported vision models.
    """
    if not request.image_urls:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image URLs are required")
    if len(request.image_urls) > MAX_IMAGES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Maximum 3 images allowed")
    if not is_allowed_model(request.model):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid model specified")

    required_credits = get_credit_cost(request.model)
    try:
        check = await CreditsService(session).check_credits(user_id, required_credits)
    except CreditsNotInitializedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not check.has_enough_credits:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "error": INSUFFICIENT_CREDITS_MESSAGE,
                "requiredCredits": required_credits,
                "currentCredits": check.current_credits,
            },
        )

    logger.info(
        f"Homeowner analysis request: user={user_id} model={request.model} "
        f"images={len(request.image_urls)} has_description={bool(request.description)}"
    )
    assessment = await client.analyze_for_homeowner(request.image_urls, request.description, model=request.model)

    analysis = await CrackAnalysisRepository(session).create(
        CrackAnalysis(
            user_id=user_id,
            crack_type=assessment.crack_type,
            crack_cause=assessment.crack_cause,
            crack_width=assessment.crack_width,
            crack_length=assessment.crack_length,
            repair_steps=assessment.repair_steps,
            risk_level=assessment.risk_level.value,
            image_urls=request.image_urls,
            model_used=request.model,
        )
    )

    return AnalyzeHomeownerResponse(
        analysis=CrackAnalysisRead.model_validate(analysis),
        analysis_id=analysis.id,
        model_used=request.model,
        credits_required=required_credits,
        message=ANALYSIS_COMPLETED_MESSAGE,
    )


@router.get(
    "/analyses",
    response_model=AnalysisListResponse,
    summary="List Analyses",
    description="Retrieve the caller's crack analyses, newest first.",
)
async def list_analyses(user_id: CurrentUserDep, session: SessionDep) -> AnalysisListResponse:
    analyses = await CrackAnalysisRepository(session).list_for_user(user_id)
    return AnalysisListResponse(analyses=[CrackAnalysisRead.model_validate(a) for a in analyses])


@router.get(
    "/analyses/{analysis_id}",
    response_model=CrackAnalysisDetail,
    summary="Get Analysis",
    description="Retrieve one analysis with its crack cause split into sections.",
    responses={404: {"description": "Analysis not found"}},
)
async def get_analysis(analysis_id: str, user_id: CurrentUserDep, session: SessionDep) -> CrackAnalysisDetail:
    analysis = await CrackAnalysisRepository(session).get_for_user(analysis_id, user_id)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return CrackAnalysisDetail(
        **CrackAnalysisRead.model_validate(analysis).model_dump(),
        crack_cause_sections=format_crack_cause(analysis.crack_cause),
    )


@router.delete(
    "/analyses/{analysis_id}",
    summary="Delete Analysis",
    description="Delete one of the caller's analyses. Credit history is kept.",
    responses={404: {"description": "Analysis not found"}},
)
async def delete_analysis(analysis_id: str, user_id: CurrentUserDep, session: SessionDep):
    repository = CrackAnalysisRepository(session)
    analysis = await repository.get_for_user(analysis_id, user_id)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    await repository.delete_with_exports(analysis)
    logger.info(f"Deleted analysis {analysis_id} of user {user_id}")
    return {"success": True, "message": "Analysis deleted successfully"}
