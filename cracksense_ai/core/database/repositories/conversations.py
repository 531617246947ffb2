"""
Conversation repository implementation.

This module provides data access operations for chat conversations and their
message history.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.conversations import Conversation, ConversationMessage
from .base import CrudRepository


class ConversationRepository(CrudRepository[Conversation]):
    """Repository for conversation data access operations."""

    order_by = "updated_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Conversation)

    async def update(self, conversation: Conversation) -> Conversation:
        conversation.updated_at = utc_now()
        return await super().update(conversation)

    async def list_for_user(self, user_id: str) -> List[Conversation]:
        """Get a user's conversations, most recently updated first."""
        stmt = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())  # type: ignore
        )
        return await self._all(stmt)

    async def add_message(self, message: ConversationMessage) -> ConversationMessage:
        """Append a message and bump the conversation's ``updated_at``.

        Args:
            message: Message to persist; ``conversation_id`` must be set

        Returns:
            Persisted ConversationMessage
        """
        conversation = await self.session.get(Conversation, message.conversation_id)
        if conversation is not None:
            conversation.updated_at = utc_now()
            self.session.add(conversation)
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def get_messages(self, conversation_id: str) -> List[ConversationMessage]:
        """Get all messages of a conversation in chronological order."""
        stmt = (
            select(ConversationMessage)
            .where(ConversationMessage.conversation_id == conversation_id)
            .order_by(ConversationMessage.created_at.asc())  # type: ignore
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
