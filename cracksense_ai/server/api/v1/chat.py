"""
Chat Endpoint.

Streams the answer to a chat message as Server-Sent Events. Messages about
cracks, repairs or photos go through the agent system; everything else, and
any message the agents do not pick up, gets a general chat reply.

Event sequence: ``chat_start``, optional ``agent_result``, one or more
``chat_chunk`` events, then ``{"done": true}``. A failure mid-stream ends the
stream with ``{"error": ...}``.
"""

from typing import Any, AsyncIterator, Dict, Optional, Union

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sse_starlette.sse import EventSourceResponse

from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.io import (
    CHAT_MODELS,
    AgentResultEvent,
    ChatChunkEvent,
    ChatDoneEvent,
    ChatErrorEvent,
    ChatRequest,
    ChatStartEvent,
)
from cracksense_ai.core.monitoring import log_error
from cracksense_ai.server.services.chat_persistence import ChatPersistenceService
from cracksense_ai.server.services.deps import (
    AgentManagerDep,
    CurrentUserDep,
    GeneralChatDep,
    SessionDep,
    SessionMakerDep,
)
from cracksense_ai.services.credits import CreditsService

logger = get_logger(__name__)
router = APIRouter()

MIN_CHAT_CREDITS = 1
CHAT_FAILED_MESSAGE = "Chat failed. Please try again."
NO_CHAT_CREDITS_MESSAGE = (
    "You need at least 1 credit to use chat features. Credits are only charged when exporting analysis to PDF."
)

ChatEvent = Union[ChatStartEvent, ChatChunkEvent, AgentResultEvent, ChatDoneEvent, ChatErrorEvent]


def serialize_event(event: ChatEvent) -> str:
    """Serialize a chat event to its camelCase JSON form."""
    return event.model_dump_json(by_alias=True)


@router.post(
    "/chat",
    summary="Chat",
    description="Stream the reply to a chat message as Server-Sent Events. No credits are charged.",
    response_description="An SSE stream of chat events.",
    responses={
        400: {"description": "Empty message or unsupported model"},
        402: {"description": "Balance below 1 credit"},
    },
)
async def chat(
    chat_request: ChatRequest,
    request: Request,
    user_id: CurrentUserDep,
    session: SessionDep,
    session_maker: SessionMakerDep,
    agent_manager: AgentManagerDep,
    general_chat: GeneralChatDep,
):
    """
    Chat about cracks and repairs.

    - **message**: The user's message.
    - **model**: ``gemini-2.0-flash`` (default) or ``gemini-2.5-flash``.
    - **conversationId**: Conversation the exchange is saved to (optional).
    """
    message = (chat_request.message or "").strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    if chat_request.model not in CHAT_MODELS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid model specified")

    credits = await CreditsService(session).get_user_credits(user_id)
    current_credits = credits.credits_remaining if credits is not None else 0
    if current_credits < MIN_CHAT_CREDITS:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"error": NO_CHAT_CREDITS_MESSAGE, "currentCredits": current_credits},
        )

    async def agent_events(analysis_data: Dict[str, Any]) -> AsyncIterator[ChatEvent]:
        result = await agent_manager.process_message(
            message, user_id, conversation_id=chat_request.conversation_id, has_images=chat_request.has_images
        )
        if not result.is_agent_triggered:
            logger.debug(f"Agents not triggered for intent {result.intent.value}, using general chat")
            return
        analysis_data.update(result.model_dump(mode="json"))
        yield AgentResultEvent(
            intent=result.intent.value,
            agent_responses=analysis_data["agent_responses"],
            errors=result.errors,
        )
        yield ChatChunkEvent(content=result.final_response)

    async def event_generator() -> AsyncIterator[str]:
        yield serialize_event(ChatStartEvent())
        full_response = ""
        analysis_data: Dict[str, Any] = {}
        try:
            if agent_manager.should_use_agents(message):
                async for event in agent_events(analysis_data):
                    if isinstance(event, ChatChunkEvent):
                        full_response += event.content
                    yield serialize_event(event)

            if not full_response:
                async for chunk in general_chat.stream_reply(message, model=chat_request.model):
                    if await request.is_disconnected():
                        logger.info(f"Client disconnected from chat stream: user={user_id}")
                        return
                    full_response += chunk
                    yield serialize_event(ChatChunkEvent(content=chunk))

            if chat_request.conversation_id and full_response:
                await _save_exchange(
                    session_maker,
                    chat_request.conversation_id,
                    message,
                    full_response,
                    analysis_data or None,
                )
            yield serialize_event(ChatDoneEvent())
        except Exception as e:
            logger.error(f"Error in chat stream for user {user_id}: {e}", exc_info=True)
            log_error(type(e).__name__, str(e), {"user_id": user_id, "path": "/chat"})
            yield serialize_event(ChatErrorEvent(error=CHAT_FAILED_MESSAGE))

    return EventSourceResponse(event_generator())


async def _save_exchange(
    session_maker: async_sessionmaker[AsyncSession],
    conversation_id: str,
    message: str,
    reply: str,
    analysis_data: Optional[Dict[str, Any]],
) -> None:
    async with session_maker() as session:
        await ChatPersistenceService(session).save_exchange(conversation_id, message, reply, analysis_data)

