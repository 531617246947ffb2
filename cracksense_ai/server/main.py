"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cracksense_ai import __version__
from cracksense_ai.core.database import init_db
from cracksense_ai.core.logging_config import get_logger, setup_logging
from cracksense_ai.core.monitoring import initialize_logfire

from .api.v1 import (
    analyses,
    chat,
    conversations,
    cracks,
    credits,
    export,
    health,
    professional_finder,
    recommendations,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the database tables on startup. A database failure is logged and
    does not stop the server from starting.
    """
    # Startup
    try:
        logger.info("Starting up CrackSense-AI Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down CrackSense-AI Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    CrackSense-AI Server API

    Backend of the crack inspection service: homeowner photo analysis, credits
    and PDF exports, the agent-driven chat, repair product recommendations and
    the structural engineer directory.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)


app.include_router(health.router, prefix=constant.API_V1_STR, tags=["health"])
app.include_router(analyses.router, prefix=constant.API_V1_STR, tags=["analyses"])
app.include_router(export.router, prefix=constant.API_V1_STR, tags=["export"])
app.include_router(credits.router, prefix=f"{constant.API_V1_STR}/credits", tags=["credits"])
app.include_router(chat.router, prefix=constant.API_V1_STR, tags=["chat"])
app.include_router(conversations.router, prefix=f"{constant.API_V1_STR}/conversations", tags=["conversations"])
app.include_router(cracks.router, prefix=f"{constant.API_V1_STR}/cracks", tags=["cracks"])
app.include_router(
    recommendations.router, prefix=f"{constant.API_V1_STR}/recommendations", tags=["recommendations"]
)
app.include_router(
    professional_finder.router, prefix=f"{constant.API_V1_STR}/professional-finder", tags=["professional-finder"]
)
