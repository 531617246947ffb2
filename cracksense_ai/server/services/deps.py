"""
Request Dependencies.

Annotated dependency aliases shared by the API endpoints: the database
session, the calling user, and the process-wide agent, analysis and chat
services.
"""

from typing import Annotated, AsyncGenerator, Optional

import httpx
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cracksense_ai.agent_core import AgentManager, get_agent_manager
from cracksense_ai.core.database import async_session_maker, get_session
from cracksense_ai.server.core.config import settings
from cracksense_ai.services.general_chat import GeneralChatService
from cracksense_ai.services.homeowner_analysis import (
    HomeownerAnalysisClient,
    get_homeowner_analysis_client,
)


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Identify the caller from the ``X-User-Id`` header set by the auth gateway.

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id.strip()


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for geocoding lookups, closed when the request ends."""
    async with httpx.AsyncClient(timeout=settings.location.timeout_seconds, follow_redirects=True) as client:
        yield client


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that outlives the request, such as streamed responses."""
    return async_session_maker


def get_general_chat_service() -> GeneralChatService:
    return GeneralChatService()


SessionDep = Annotated[AsyncSession, Depends(get_session)]
SessionMakerDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]
CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
AgentManagerDep = Annotated[AgentManager, Depends(get_agent_manager)]
HomeownerClientDep = Annotated[HomeownerAnalysisClient, Depends(get_homeowner_analysis_client)]
GeneralChatDep = Annotated[GeneralChatService, Depends(get_general_chat_service)]
