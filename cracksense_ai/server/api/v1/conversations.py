"""
Conversation Endpoints.

Conversations group a user's chat messages. Messages are written by the chat
endpoint; these endpoints list, create and read them.
"""

from fastapi import APIRouter, HTTPException, status

from cracksense_ai.core.database.entities.conversations import Conversation
from cracksense_ai.core.database.repositories.conversations import ConversationRepository
from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.models.io import (
    AnalysisListResponse,
    ConversationCreate,
    ConversationListResponse,
    ConversationMessageRead,
    ConversationMessagesResponse,
    ConversationRead,
    ConversationResponse,
    CrackAnalysisRead,
)
from cracksense_ai.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter()

DEFAULT_TITLE = "New Conversation"


async def _get_owned_conversation(repository: ConversationRepository, conversation_id: str, user_id: str):
    conversation = await repository.get_by_id(conversation_id)
    if conversation is None or conversation.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


@router.get(
    "",
    response_model=ConversationListResponse,
    summary="List Conversations",
    description="Retrieve the caller's conversations, most recently updated first.",
)
async def list_conversations(user_id: CurrentUserDep, session: SessionDep) -> ConversationListResponse:
    conversations = await ConversationRepository(session).list_for_user(user_id)
    return ConversationListResponse(conversations=[ConversationRead.model_validate(c) for c in conversations])


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Conversation",
    description="Start a new conversation. The title defaults to 'New Conversation'.",
)
async def create_conversation(
    request: ConversationCreate, user_id: CurrentUserDep, session: SessionDep
) -> ConversationResponse:
    title = (request.title or "").strip() or DEFAULT_TITLE
    conversation = await ConversationRepository(session).create(Conversation(user_id=user_id, title=title))
    return ConversationResponse(conversation=ConversationRead.model_validate(conversation))


@router.get(
    "/{conversation_id}/messages",
    response_model=ConversationMessagesResponse,
    summary="Get Conversation Messages",
    description="Retrieve the messages of one of the caller's conversations in chronological order.",
    responses={404: {"description": "Conversation not found"}},
)
async def get_conversation_messages(
    conversation_id: str, user_id: CurrentUserDep, session: SessionDep
) -> ConversationMessagesResponse:
    repository = ConversationRepository(session)
    await _get_owned_conversation(repository, conversation_id, user_id)
    messages = await repository.get_messages(conversation_id)
    return ConversationMessagesResponse(messages=[ConversationMessageRead.model_validate(m) for m in messages])


@router.get(
    "/{conversation_id}/analyses",
    response_model=AnalysisListResponse,
    summary="Get Conversation Analyses",
    description="Retrieve the caller's analyses in creation order, for display alongside a conversation.",
    responses={404: {"description": "Conversation not found"}},
)
async def get_conversation_analyses(
    conversation_id: str, user_id: CurrentUserDep, session: SessionDep
) -> AnalysisListResponse:
    await _get_owned_conversation(ConversationRepository(session), conversation_id, user_id)
    analyses = await CrackAnalysisRepository(session).list_for_user(user_id, newest_first=False)
    return AnalysisListResponse(analyses=[CrackAnalysisRead.model_validate(a) for a in analyses])
