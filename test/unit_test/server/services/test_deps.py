"""Unit tests for the request dependencies."""

import httpx
import pytest
from fastapi import HTTPException

from cracksense_ai.core.database import async_session_maker
from cracksense_ai.server.services.deps import (
    get_current_user_id,
    get_general_chat_service,
    get_http_client,
    get_session_maker,
)
from cracksense_ai.services.general_chat import GeneralChatService

pytestmark = pytest.mark.asyncio


class TestGetCurrentUserId:
    async def test_returns_stripped_header(self):
        assert await get_current_user_id(" user_1 ") == "user_1"

    @pytest.mark.parametrize("header", [None, "", "   "])
    async def test_missing_header_is_unauthorized(self, header):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(header)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Unauthorized"


async def test_http_client_is_closed_after_request():
    generator = get_http_client()
    client = await generator.__anext__()

    assert isinstance(client, httpx.AsyncClient)
    assert client.follow_redirects is True

    with pytest.raises(StopAsyncIteration):
        await generator.__anext__()
    assert client.is_closed


async def test_session_maker():
    assert get_session_maker() is async_session_maker


async def test_general_chat_service():
    assert isinstance(get_general_chat_service(), GeneralChatService)
