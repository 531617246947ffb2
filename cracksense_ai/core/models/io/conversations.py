"""
Conversation and chat I/O models for API requests and responses.

Conversations group the chat messages of a user; the chat request drives
the streaming chat endpoint.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from cracksense_ai.core.database.entities.conversations import MessageType

from .base import ApiSchema, camelize_keys

CHAT_MODELS = ("gemini-2.0-flash", "gemini-2.5-flash")
DEFAULT_CHAT_MODEL = "gemini-2.0-flash"


class ConversationRead(BaseModel):
    """Schema for reading a conversation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationCreate(ApiSchema):
    """Schema for starting a conversation."""

    title: Optional[str] = Field(default=None, description="Conversation title")


class ConversationMessageRead(BaseModel):
    """Schema for reading a conversation message."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    message_type: MessageType
    content: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    analysis_data: Optional[Dict[str, Any]] = None
    created_at: datetime


class ConversationListResponse(ApiSchema):
    success: bool = True
    conversations: List[ConversationRead]


class ConversationResponse(ApiSchema):
    success: bool = True
    conversation: ConversationRead


class ConversationMessagesResponse(ApiSchema):
    success: bool = True
    messages: List[ConversationMessageRead]


class ChatRequest(ApiSchema):
    """Schema for a streamed chat turn."""

    message: Optional[str] = Field(default=None, description="User message")
    model: str = Field(default=DEFAULT_CHAT_MODEL, description="Chat model")
    conversation_id: Optional[str] = Field(default=None, description="Conversation to save the exchange in")
    has_images: bool = Field(default=False, description="Whether the user attached photos")


class ChatStartEvent(ApiSchema):
    type: Literal["chat_start"] = "chat_start"


class ChatChunkEvent(ApiSchema):
    type: Literal["chat_chunk"] = "chat_chunk"
    content: str


class AgentResultEvent(ApiSchema):
    """Structured results of the agents that answered a chat message.

    The agent payloads use camelCase keys like the rest of the event.
    """

    type: Literal["agent_result"] = "agent_result"
    intent: str
    agent_responses: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @field_serializer("agent_responses")
    def _camelize_responses(self, responses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return camelize_keys(responses)


class ChatDoneEvent(ApiSchema):
    done: bool = True


class ChatErrorEvent(ApiSchema):
    error: str
