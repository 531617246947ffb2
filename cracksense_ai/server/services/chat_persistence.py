"""
Service for persisting chat exchanges.

Saves the user's message and the assistant's reply to a conversation once a
chat turn has finished streaming.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.entities.conversations import (
    ConversationMessage,
    MessageType,
)
from cracksense_ai.core.database.repositories.conversations import ConversationRepository

logger = logging.getLogger(__name__)


class ChatPersistenceService:
    """Service for persisting chat messages to conversations."""

    def __init__(self, session: AsyncSession):
        """Initialize chat persistence service with database session."""
        self.session = session
        self.conversations = ConversationRepository(session)

    async def add_user_message(
        self, conversation_id: str, content: str, images: Optional[List[str]] = None
    ) -> ConversationMessage:
        """
        Add a user message to a conversation.

        Args:
            conversation_id: The conversation ID
            content: Message content
            images: Photo URLs attached to the message

        Returns:
            Created ConversationMessage object
        """
        message = ConversationMessage(
            conversation_id=conversation_id,
            message_type=MessageType.USER,
            content=content,
            images=images or [],
        )
        message = await self.conversations.add_message(message)
        logger.debug(f"Added user message to conversation {conversation_id}")
        return message

    async def add_assistant_message(
        self,
        conversation_id: str,
        content: str,
        analysis_data: Optional[Dict[str, Any]] = None,
    ) -> ConversationMessage:
        """
        Add an assistant reply to a conversation.

        Args:
            conversation_id: The conversation ID
            content: Reply text
            analysis_data: Structured agent results shown with the reply

        Returns:
            Created ConversationMessage object
        """
        message = ConversationMessage(
            conversation_id=conversation_id,
            message_type=MessageType.ASSISTANT,
            content=content,
            analysis_data=analysis_data,
        )
        message = await self.conversations.add_message(message)
        logger.debug(f"Added assistant message to conversation {conversation_id}")
        return message

    async def save_exchange(
        self,
        conversation_id: str,
        user_message: str,
        assistant_message: str,
        analysis_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Save one chat turn. Unknown conversations are skipped with a warning."""
        conversation = await self.conversations.get_by_id(conversation_id)
        if conversation is None:
            logger.warning(f"Conversation {conversation_id} not found, chat exchange not saved")
            return
        await self.add_user_message(conversation_id, user_message)
        await self.add_assistant_message(conversation_id, assistant_message, analysis_data)
