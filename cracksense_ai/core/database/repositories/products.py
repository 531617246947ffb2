"""
Product catalog repository implementation.

This module provides data access operations for the repair product catalog
and the recommendations shown to users.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.products import ProductRecommendation, RepairProduct
from .base import CrudRepository


class RepairProductRepository(CrudRepository[RepairProduct]):
    """Repository for repair products."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, RepairProduct)

    async def list_rated_at_least(self, min_rating: float) -> List[RepairProduct]:
        """Get products with a rating of at least ``min_rating``, best rated first."""
        stmt = (
            select(RepairProduct)
            .where(RepairProduct.rating >= min_rating)  # type: ignore
            .order_by(RepairProduct.rating.desc())  # type: ignore
        )
        return await self._all(stmt)

    async def list_for_severity(
        self, severity: str, skill_level: Optional[str] = None, limit: Optional[int] = None
    ) -> List[RepairProduct]:
        """Get products suitable for a severity, best rated first.

        JSON list membership is checked in Python so the query runs the same
        on every backend.

        Args:
            severity: low, moderate or high
            skill_level: Restrict to this skill level when given
            limit: Maximum number of products

        Returns:
            List of RepairProduct instances
        """
        stmt = select(RepairProduct).order_by(RepairProduct.rating.desc())  # type: ignore
        if skill_level is not None:
            stmt = stmt.where(RepairProduct.skill_level == skill_level)
        products = [p for p in await self._all(stmt) if severity in (p.suitable_for_severity or [])]
        return products[:limit] if limit is not None else products


class ProductRecommendationRepository(CrudRepository[ProductRecommendation]):
    """Repository for product recommendations and their interaction timestamps."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProductRecommendation)

    async def create_many(self, recommendations: List[ProductRecommendation]) -> List[ProductRecommendation]:
        """Persist several recommendations in one commit."""
        self.session.add_all(recommendations)
        await self.session.commit()
        for recommendation in recommendations:
            await self.session.refresh(recommendation)
        return recommendations

    async def list_for_user(
        self, user_id: str, analysis_id: Optional[str] = None, limit: int = 20
    ) -> List[ProductRecommendation]:
        """Get recommendations shown to a user, newest first."""
        stmt = select(ProductRecommendation).where(ProductRecommendation.user_id == user_id)
        if analysis_id is not None:
            stmt = stmt.where(ProductRecommendation.analysis_id == analysis_id)
        stmt = stmt.order_by(ProductRecommendation.created_at.desc()).limit(limit)  # type: ignore
        return await self._all(stmt)
