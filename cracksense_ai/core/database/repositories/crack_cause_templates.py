"""
Crack cause template repository implementation.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.crack_cause_templates import CrackCauseTemplate
from .base import CrudRepository


class CrackCauseTemplateRepository(CrudRepository[CrackCauseTemplate]):
    """Repository for crack cause templates."""

    order_by = None

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CrackCauseTemplate)

    async def list_ordered(self) -> List[CrackCauseTemplate]:
        """Get all templates ordered by category."""
        stmt = select(CrackCauseTemplate).order_by(CrackCauseTemplate.category.asc())  # type: ignore
        return await self._all(stmt)

    async def get_by_category(self, category: str) -> Optional[CrackCauseTemplate]:
        stmt = select(CrackCauseTemplate).where(CrackCauseTemplate.category == category)
        return await self._first(stmt)
