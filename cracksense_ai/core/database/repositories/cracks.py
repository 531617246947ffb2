"""
Crack record repository implementation.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.cracks import CrackRecord
from .base import CrudRepository


class CrackRecordRepository(CrudRepository[CrackRecord]):
    """Repository for user crack records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CrackRecord)

    async def list_for_user(self, user_id: str) -> List[CrackRecord]:
        """Get a user's crack records, newest first."""
        stmt = (
            select(CrackRecord)
            .where(CrackRecord.user_id == user_id)
            .order_by(CrackRecord.created_at.desc())  # type: ignore
        )
        return await self._all(stmt)
