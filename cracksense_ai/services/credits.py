"""
Credits ledger service.

Keeps each user's credit balance and the transaction history that explains
it. PDF exports are the only operation that charges credits; an export row,
the balance deduction and the ledger entry are committed together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.base import utc_now
from cracksense_ai.core.database.entities.crack_analyses import PdfExport
from cracksense_ai.core.database.entities.credits import CreditTransaction, UserCredits
from cracksense_ai.core.database.repositories.crack_analyses import PdfExportRepository
from cracksense_ai.core.database.repositories.credits import (
    CreditTransactionRepository,
    UserCreditsRepository,
)
from cracksense_ai.core.errors import CreditsNotInitializedError, InsufficientCreditsError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import TransactionType
from cracksense_ai.core.monitoring import log_credit_event

logger = get_logger(__name__)

DEFAULT_INITIAL_CREDITS = 20


@dataclass(frozen=True)
class CreditCheck:
    """Result of comparing a balance against a required amount."""

    has_enough_credits: bool
    current_credits: int


@dataclass(frozen=True)
class ExportResult:
    """Result of a PDF export request."""

    export: PdfExport
    already_exported: bool
    remaining_credits: Optional[int] = None


class CreditsService:
    """Credit balance and ledger operations for one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.balances = UserCreditsRepository(session)
        self.transactions = CreditTransactionRepository(session)
        self.exports = PdfExportRepository(session)

    async def get_user_credits(self, user_id: str) -> Optional[UserCredits]:
        """Return the user's balance row, or None when never initialized."""
        return await self.balances.get_by_user_id(user_id)

    async def initialize_user_credits(
        self, user_id: str, initial_credits: int = DEFAULT_INITIAL_CREDITS
    ) -> UserCredits:
        """
        Create the balance row of a new user with free starter credits.

        An existing row is returned unchanged, so the call is safe to repeat.
        """
        existing = await self.balances.get_by_user_id(user_id)
        if existing is not None:
            return existing

        credits = UserCredits(user_id=user_id, credits_remaining=initial_credits)
        self.session.add(credits)
        self.session.add(
            CreditTransaction(
                user_id=user_id,
                transaction_type=TransactionType.initial.value,
                amount=initial_credits,
                description="Welcome credits",
            )
        )
        await self.session.commit()
        await self.session.refresh(credits)

        logger.info(f"Initialized {initial_credits} credits for new user: {user_id}")
        log_credit_event(user_id, TransactionType.initial.value, initial_credits, credits.credits_remaining)
        return credits

    async def check_credits(self, user_id: str, required_credits: int) -> CreditCheck:
        """
        Compare the user's balance with ``required_credits``.

        Raises:
            CreditsNotInitializedError: The user has no balance row
        """
        credits = await self.balances.get_by_user_id(user_id)
        if credits is None:
            logger.warning(f"User credits not found, initialization may have failed: {user_id}")
            raise CreditsNotInitializedError(user_id)
        return CreditCheck(
            has_enough_credits=credits.credits_remaining >= required_credits,
            current_credits=credits.credits_remaining,
        )

    async def deduct_credits(self, user_id: str, credits_to_deduct: int) -> int:
        """
        Subtract credits from the balance.

        Returns:
            The remaining balance

        Raises:
            CreditsNotInitializedError: The user has no balance row
            InsufficientCreditsError: The balance is lower than the amount
        """
        credits = await self._debit(user_id, credits_to_deduct)
        await self.session.commit()
        log_credit_event(user_id, TransactionType.deduct.value, credits_to_deduct, credits.credits_remaining)
        return credits.credits_remaining

    async def add_credits(self, user_id: str, credits_to_add: int, creem_id: Optional[str] = None) -> int:
        """
        Add purchased credits, creating the balance row when missing.

        Returns:
            The new balance
        """
        credits = await self._credit(user_id, credits_to_add, creem_id)
        await self.session.commit()
        log_credit_event(user_id, TransactionType.add.value, credits_to_add, credits.credits_remaining)
        return credits.credits_remaining

    async def refund_credits(
        self, user_id: str, credits_to_refund: int, description: str, related_analysis_id: Optional[str] = None
    ) -> int:
        """Give credits back and record a refund entry. Returns the new balance."""
        credits = await self._credit(user_id, credits_to_refund)
        self.session.add(
            CreditTransaction(
                user_id=user_id,
                transaction_type=TransactionType.refund.value,
                amount=credits_to_refund,
                description=description,
                related_analysis_id=related_analysis_id,
            )
        )
        await self.session.commit()
        log_credit_event(user_id, TransactionType.refund.value, credits_to_refund, credits.credits_remaining)
        return credits.credits_remaining

    async def record_transaction(
        self,
        user_id: str,
        transaction_type: TransactionType,
        amount: int,
        description: str,
        related_analysis_id: Optional[str] = None,
        pdf_export_id: Optional[str] = None,
        model_used: Optional[str] = None,
    ) -> CreditTransaction:
        """Append an entry to the user's credit history."""
        transaction = CreditTransaction(
            user_id=user_id,
            transaction_type=TransactionType(transaction_type).value,
            amount=amount,
            description=description,
            related_analysis_id=related_analysis_id,
            pdf_export_id=pdf_export_id,
            model_used=model_used,
        )
        return await self.transactions.create(transaction)

    async def get_transaction_history(self, user_id: str, limit: int = 50) -> List[CreditTransaction]:
        """Return the user's most recent transactions, newest first."""
        return await self.transactions.list_for_user(user_id, limit=limit)

    async def check_pdf_export_exists(self, user_id: str, analysis_id: str) -> Optional[PdfExport]:
        """Return the existing export of this analysis by this user, if any."""
        return await self.exports.get_for_user_and_analysis(user_id, analysis_id)

    async def export_pdf_and_deduct_credits(
        self, user_id: str, analysis_id: str, model_used: str, credits_required: int
    ) -> ExportResult:
        """
        Record a PDF export and charge for it, once per user and analysis.

        A repeated export returns the first export with ``already_exported``
        set and charges nothing. Otherwise the export row, the deduction and
        the ``deduct`` transaction are committed in one transaction.

        Raises:
            CreditsNotInitializedError: The user has no balance row
            InsufficientCreditsError: The balance cannot cover the export
        """
        existing = await self.exports.get_for_user_and_analysis(user_id, analysis_id)
        if existing is not None:
            logger.info(f"PDF already exported: user={user_id} analysis={analysis_id}")
            return ExportResult(export=existing, already_exported=True)

        check = await self.check_credits(user_id, credits_required)
        if not check.has_enough_credits:
            raise InsufficientCreditsError(required=credits_required, current=check.current_credits)

        credits = await self._debit(user_id, credits_required)
        pdf_export = PdfExport(
            user_id=user_id,
            analysis_id=analysis_id,
            model_used=model_used,
            credits_charged=credits_required,
        )
        self.session.add(pdf_export)
        self.session.add(
            CreditTransaction(
                user_id=user_id,
                transaction_type=TransactionType.deduct.value,
                amount=credits_required,
                description=f"PDF export for analysis ({model_used})",
                related_analysis_id=analysis_id,
                pdf_export_id=pdf_export.id,
                model_used=model_used,
            )
        )
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(pdf_export)
        log_credit_event(user_id, TransactionType.deduct.value, credits_required, credits.credits_remaining)
        return ExportResult(export=pdf_export, already_exported=False, remaining_credits=credits.credits_remaining)

    async def add_credits_with_history(
        self,
        user_id: str,
        credits_to_add: int,
        description: str = "Credits added",
        creem_id: Optional[str] = None,
    ) -> int:
        """Add credits and record an ``add`` transaction. Returns the new balance."""
        credits = await self._credit(user_id, credits_to_add, creem_id)
        self.session.add(
            CreditTransaction(
                user_id=user_id,
                transaction_type=TransactionType.add.value,
                amount=credits_to_add,
                description=description,
            )
        )
        await self.session.commit()
        log_credit_event(user_id, TransactionType.add.value, credits_to_add, credits.credits_remaining)
        return credits.credits_remaining

    async def _debit(self, user_id: str, amount: int) -> UserCredits:
        credits = await self.balances.debit(user_id, amount)
        if credits is not None:
            return credits
        current = await self.balances.get_by_user_id(user_id)
        if current is None:
            raise CreditsNotInitializedError(user_id)
        raise InsufficientCreditsError(required=amount, current=current.credits_remaining)

    async def _credit(self, user_id: str, amount: int, creem_id: Optional[str] = None) -> UserCredits:
        credits = await self.balances.get_by_user_id(user_id)
        if credits is None:
            credits = UserCredits(user_id=user_id, credits_remaining=0)
        credits.credits_remaining += amount
        if creem_id is not None:
            credits.creem_id = creem_id
        credits.updated_at = utc_now()
        self.session.add(credits)
        return credits
