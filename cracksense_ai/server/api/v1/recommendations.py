"""
Product Recommendation Endpoints.

Recommend repair products for a stored analysis (``analysis_based``), for a
DIY repair of it (``diy_focused``) or for a free-text question
(``chat_based``), and track what users do with the recommendations.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from cracksense_ai.core.database.repositories.products import ProductRecommendationRepository
from cracksense_ai.core.errors import AnalysisNotFoundError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import InteractionType, RecommendationType
from cracksense_ai.core.models.io import (
    ProductRecommendationRead,
    RecommendationRequest,
    RecommendationResponse,
    StoredRecommendationRead,
    StoredRecommendationsResponse,
    TrackInteractionRequest,
)
from cracksense_ai.server.services.deps import CurrentUserDep, SessionDep
from cracksense_ai.services.product_recommendations import (
    ProductMatch,
    ProductRecommendationService,
    RecommendationContext,
)

logger = get_logger(__name__)
router = APIRouter()


def _response(matches: List[ProductMatch]) -> RecommendationResponse:
    recommendations = [ProductRecommendationRead.from_match(match) for match in matches]
    return RecommendationResponse(recommendations=recommendations, total=len(recommendations))


async def _recommend(
    service: ProductRecommendationService,
    recommendation_type: str,
    context: RecommendationContext,
) -> List[ProductMatch]:
    if recommendation_type in (RecommendationType.analysis_based.value, RecommendationType.diy_focused.value):
        if not context.analysis_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Analysis ID is required for analysis-based recommendations",
            )
        try:
            if recommendation_type == RecommendationType.diy_focused.value:
                return await service.get_diy_recommendations(context.analysis_id, context)
            return await service.get_analysis_based_recommendations(context.analysis_id, context)
        except AnalysisNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")

    if recommendation_type == RecommendationType.chat_based.value:
        if not context.user_query:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User query is required for chat-based recommendations",
            )
        return await service.get_chat_based_recommendations(context.user_query, context)

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid recommendation type")


@router.post(
    "",
    response_model=RecommendationResponse,
    summary="Recommend Products",
    description="Recommend repair products for an analysis or a question and record them for tracking.",
    responses={
        400: {"description": "Missing analysis ID or query, or unknown recommendation type"},
        404: {"description": "Analysis not found"},
    },
)
async def create_recommendations(
    request: RecommendationRequest, user_id: CurrentUserDep, session: SessionDep
) -> RecommendationResponse:
    context = RecommendationContext(
        user_id=user_id,
        analysis_id=request.analysis_id,
        conversation_id=request.conversation_id,
        user_query=request.user_query,
        crack_severity=request.crack_severity,
        crack_type=request.crack_type,
        budget=request.budget,
        preferred_skill_level=request.preferred_skill_level,
    )
    matches = await _recommend(ProductRecommendationService(session), request.recommendation_type, context)
    logger.info(f"{len(matches)} {request.recommendation_type} recommendations for user {user_id}")
    return _response(matches)


@router.get(
    "",
    response_model=RecommendationResponse,
    summary="Get Recommendations",
    description="Recommend products for an analysis (type=analysis_based) or a query (type=chat_based).",
    responses={400: {"description": "Parameters do not match the requested type"}},
)
async def get_recommendations(
    user_id: CurrentUserDep,
    session: SessionDep,
    type: str = Query(default=RecommendationType.analysis_based.value),
    analysis_id: Optional[str] = Query(default=None, alias="analysisId"),
    conversation_id: Optional[str] = Query(default=None, alias="conversationId"),
    query: Optional[str] = Query(default=None),
) -> RecommendationResponse:
    service = ProductRecommendationService(session)
    if type == RecommendationType.chat_based.value and query:
        context = RecommendationContext(user_id=user_id, conversation_id=conversation_id, user_query=query)
        return _response(await service.get_chat_based_recommendations(query, context))
    if type == RecommendationType.analysis_based.value and analysis_id:
        context = RecommendationContext(user_id=user_id, analysis_id=analysis_id, conversation_id=conversation_id)
        try:
            return _response(await service.get_analysis_based_recommendations(analysis_id, context))
        except AnalysisNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid parameters for GET request")


@router.get(
    "/history",
    response_model=StoredRecommendationsResponse,
    summary="Recommendation History",
    description="Retrieve recommendations previously shown to the caller, newest first.",
)
async def recommendation_history(
    user_id: CurrentUserDep,
    session: SessionDep,
    analysis_id: Optional[str] = Query(default=None, alias="analysisId"),
    limit: int = Query(default=20, ge=1, le=100),
) -> StoredRecommendationsResponse:
    stored = await ProductRecommendationRepository(session).list_for_user(user_id, analysis_id=analysis_id, limit=limit)
    return StoredRecommendationsResponse(recommendations=[StoredRecommendationRead.model_validate(r) for r in stored])


@router.post(
    "/track",
    summary="Track Interaction",
    description="Record that a recommendation was viewed, clicked or purchased.",
    responses={400: {"description": "Missing ID or unknown interaction type"}, 404: {"description": "Not found"}},
)
async def track_interaction(request: TrackInteractionRequest, user_id: CurrentUserDep, session: SessionDep):
    if not request.recommendation_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Recommendation ID is required")
    if request.interaction_type not in {t.value for t in InteractionType}:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid interaction type. Must be: view, click, or purchase",
        )

    tracked = await ProductRecommendationService(session).track_interaction(
        request.recommendation_id, InteractionType(request.interaction_type)
    )
    if not tracked:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recommendation not found")
    return {"success": True, "message": f"{request.interaction_type} tracked successfully"}
