"""
Crack analysis repository implementation.

This module provides data access operations for homeowner crack analyses and
their PDF exports.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.crack_analyses import CrackAnalysis, PdfExport
from .base import CrudRepository


class CrackAnalysisRepository(CrudRepository[CrackAnalysis]):
    """Repository for crack analysis data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CrackAnalysis)

    async def list_for_user(self, user_id: str, newest_first: bool = True) -> List[CrackAnalysis]:
        """Get all analyses owned by a user.

        Args:
            user_id: Owner identifier
            newest_first: Order by creation time descending when True

        Returns:
            List of CrackAnalysis instances
        """
        order = CrackAnalysis.created_at.desc() if newest_first else CrackAnalysis.created_at.asc()  # type: ignore
        stmt = select(CrackAnalysis).where(CrackAnalysis.user_id == user_id).order_by(order)
        return await self._all(stmt)

    async def get_for_user(self, analysis_id: str, user_id: str) -> Optional[CrackAnalysis]:
        """Get an analysis only when it belongs to ``user_id``."""
        stmt = select(CrackAnalysis).where(CrackAnalysis.id == analysis_id, CrackAnalysis.user_id == user_id)
        return await self._first(stmt)

    async def delete_with_exports(self, analysis: CrackAnalysis) -> None:
        """Delete an analysis together with its PDF export rows in one commit.

        Credit transactions that reference the analysis are kept as history.
        """
        exports = await self.session.execute(select(PdfExport).where(PdfExport.analysis_id == analysis.id))
        for export in exports.scalars().all():
            await self.session.delete(export)
        await self.session.flush()
        await self.session.delete(analysis)
        await self.session.commit()


class PdfExportRepository(CrudRepository[PdfExport]):
    """Repository for PDF export records."""

    order_by = "exported_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PdfExport)

    async def get_for_user_and_analysis(self, user_id: str, analysis_id: str) -> Optional[PdfExport]:
        """Get the export of ``analysis_id`` by ``user_id``, if any."""
        stmt = select(PdfExport).where(PdfExport.user_id == user_id, PdfExport.analysis_id == analysis_id)
        return await self._first(stmt)
