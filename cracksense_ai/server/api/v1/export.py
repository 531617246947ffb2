"""
PDF Export Endpoint.

Exporting an analysis is the only operation that charges credits. Each user
pays for an analysis once; repeated exports are free.
"""

from fastapi import APIRouter, HTTPException, status

from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.errors import CreditsNotInitializedError, InsufficientCreditsError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.io import ExportPdfRequest, ExportPdfResponse, PdfExportRead
from cracksense_ai.server.services.deps import CurrentUserDep, SessionDep
from cracksense_ai.services.credits import CreditsService
from cracksense_ai.services.homeowner_analysis import DEFAULT_ANALYSIS_MODEL
from cracksense_ai.services.pricing import get_credit_cost

logger = get_logger(__name__)
router = APIRouter()

ALREADY_EXPORTED_MESSAGE = "PDF was already exported for this analysis. No additional credits charged."


@router.post(
    "/export-pdf",
    response_model=ExportPdfResponse,
    summary="Export Analysis",
    description="Record a PDF export of an analysis and charge its credit cost once.",
    responses={
        400: {"description": "Analysis ID is missing"},
        402: {"description": "Credits could not be charged"},
        403: {"description": "Analysis belongs to another user"},
        404: {"description": "Analysis not found"},
    },
)
async def export_pdf(request: ExportPdfRequest, user_id: CurrentUserDep, session: SessionDep) -> ExportPdfResponse:
    """
    Export an analysis as PDF.

    - **analysisId**: The analysis to export.
    """
    if not request.analysis_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Analysis ID is required")

    analysis = await CrackAnalysisRepository(session).get_by_id(request.analysis_id)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found or access denied")
    if analysis.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Access denied - analysis belongs to another user"
        )

    model_used = analysis.model_used or DEFAULT_ANALYSIS_MODEL
    credits_required = get_credit_cost(model_used)

    try:
        result = await CreditsService(session).export_pdf_and_deduct_credits(
            user_id, analysis.id, model_used, credits_required
        )
    except (CreditsNotInitializedError, InsufficientCreditsError) as e:
        logger.info(f"PDF export refused for user {user_id}: {e}")
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e))

    if result.already_exported:
        return ExportPdfResponse(
            message=ALREADY_EXPORTED_MESSAGE,
            already_exported=True,
            credits_charged=0,
            export=PdfExportRead.model_validate(result.export),
        )

    logger.info(f"PDF exported: user={user_id} analysis={analysis.id} credits={credits_required}")
    return ExportPdfResponse(
        message=f"PDF export successful. {credits_required} credits charged.",
        already_exported=False,
        credits_charged=credits_required,
        remaining_credits=result.remaining_credits,
        export=PdfExportRead.model_validate(result.export),
    )
