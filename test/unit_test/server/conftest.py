from typing import AsyncGenerator
from unittest.mock import MagicMock, patch

import httpx
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cracksense_ai.agent_core import get_agent_manager
from cracksense_ai.core.database import get_session
from cracksense_ai.server.main import app
from cracksense_ai.server.services.deps import (
    get_general_chat_service,
    get_http_client,
    get_session_maker,
)
from cracksense_ai.services.general_chat import GeneralChatService
from cracksense_ai.services.homeowner_analysis import (
    HomeownerAnalysisClient,
    get_homeowner_analysis_client,
)
from test.settings import test_settings


def _geocoding_not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, json={})


@pytest_asyncio.fixture
async def agent_manager() -> MagicMock:
    """Agent manager stub; tests set its return values as needed."""
    manager = MagicMock()
    manager.should_use_agents.return_value = False
    return manager


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession,
    session_maker: async_sessionmaker[AsyncSession],
    agent_manager: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    async def get_http_client_override() -> AsyncGenerator[httpx.AsyncClient, None]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_geocoding_not_found)) as http_client:
            yield http_client

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[get_http_client] = get_http_client_override
    app.dependency_overrides[get_agent_manager] = lambda: agent_manager
    app.dependency_overrides[get_general_chat_service] = lambda: GeneralChatService(model_factory=lambda name: None)
    app.dependency_overrides[get_homeowner_analysis_client] = lambda: HomeownerAnalysisClient(
        model_factory=lambda name: None, retry_delay=0
    )

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("cracksense_ai.server.main.lifespan", mock_lifespan):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://localhost",
            headers={"X-User-Id": test_settings.user_id},
        ) as client:
            yield client

    app.dependency_overrides.clear()
