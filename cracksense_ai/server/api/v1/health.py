"""
Health Check Endpoints.

``/health`` runs a trivial query against the database and reports whether the
OpenRouter key is configured. A database failure answers 503. ``/version``
reports the package version and the accepted chat models.
"""

from fastapi import APIRouter, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cracksense_ai import __version__
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.io import CHAT_MODELS, HealthResponse, VersionResponse
from cracksense_ai.server.core.config import settings
from cracksense_ai.server.services.deps import SessionDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check the API server and its database connection.",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(session: SessionDep, response: Response) -> HealthResponse:
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database query failed: {e}")
        database = "unavailable"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        ai_configured=bool(settings.openrouter.api_key),
    )


@router.get(
    "/version",
    response_model=VersionResponse,
    summary="Get Version",
    description="Retrieve the API version and the chat models it accepts.",
)
async def version() -> VersionResponse:
    return VersionResponse(version=__version__, chat_models=list(CHAT_MODELS))
