"""
Conversation entity models.

This module contains the database entities for chat conversations and the
messages exchanged in them, including any analysis payload attached to an
assistant reply.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class MessageType(str, Enum):
    """Sender of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class Conversation(Base, table=True):
    """A user's chat conversation.

    Table: conversations
    """

    __tablename__ = "conversations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, index=True)
    title: str = Field(default="New Conversation", max_length=255)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Conversation(id={self.id}, user_id={self.user_id}, title={self.title})"


class ConversationMessage(Base, table=True):
    """Individual message within a conversation.

    Table: conversation_messages
    """

    __tablename__ = "conversation_messages"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    conversation_id: str = Field(foreign_key="conversations.id", max_length=64, index=True)
    message_type: MessageType = Field(description="Message sender")
    content: Optional[str] = Field(default=None)
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    analysis_data: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ConversationMessage(id={self.id}, type={self.message_type}, conversation_id={self.conversation_id})"
