from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from cracksense_ai import __version__
from cracksense_ai.core.database import get_session
from cracksense_ai.server.core.config import settings
from cracksense_ai.server.main import app

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok", "aiConfigured": False}


async def test_health_reports_ai_key(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "openrouter_api_key", "sk-or-test")

    response = await client.get("/api/v1/health")

    assert response.json()["aiConfigured"] is True


async def test_health_with_database_down(client: AsyncClient):
    broken = MagicMock()
    broken.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))

    async def broken_session():
        yield broken

    app.dependency_overrides[get_session] = broken_session

    response = await client.get("/api/v1/health")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "database": "unavailable", "aiConfigured": False}


async def test_version(client: AsyncClient):
    response = await client.get("/api/v1/version")
    assert response.status_code == 200
    assert response.json() == {
        "version": __version__,
        "apiVersion": "v1",
        "chatModels": ["gemini-2.0-flash", "gemini-2.5-flash"],
    }


async def test_process_time_header(client: AsyncClient):
    response = await client.get("/api/v1/health")
    assert float(response.headers["X-Process-Time"]) >= 0
