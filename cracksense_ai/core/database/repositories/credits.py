"""
Credits repository implementation.

This module provides data access operations for user credit balances and the
credit transaction ledger.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.credits import CreditTransaction, UserCredits
from .base import CrudRepository


class UserCreditsRepository(CrudRepository[UserCredits]):
    """Repository for per-user credit balances."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserCredits)

    async def get_by_user_id(self, user_id: str) -> Optional[UserCredits]:
        """Get the balance row of a user.

        Args:
            user_id: User identifier

        Returns:
            UserCredits instance or None when the user was never initialized
        """
        stmt = select(UserCredits).where(UserCredits.user_id == user_id)
        return await self._first(stmt)

    async def debit(self, user_id: str, amount: int) -> Optional[UserCredits]:
        """Subtract ``amount`` with one conditional UPDATE.

        The balance check and the subtraction both happen in the database.

        Args:
            user_id: User identifier
            amount: Credits to subtract

        Returns:
            The reloaded balance row, or None when the user has no row or the
            balance is lower than ``amount``
        """
        stmt = (
            update(UserCredits)
            .where(UserCredits.user_id == user_id, UserCredits.credits_remaining >= amount)  # type: ignore
            .values(credits_remaining=UserCredits.credits_remaining - amount, updated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        reload = (
            select(UserCredits)
            .where(UserCredits.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return await self._first(reload)


class CreditTransactionRepository(CrudRepository[CreditTransaction]):
    """Repository for the append-only credit ledger."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CreditTransaction)

    async def list_for_user(self, user_id: str, limit: int = 50) -> List[CreditTransaction]:
        """Get the most recent transactions of a user, newest first.

        Args:
            user_id: User identifier
            limit: Maximum number of entries

        Returns:
            List of CreditTransaction instances
        """
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())  # type: ignore
            .limit(limit)
        )
        return await self._all(stmt)
