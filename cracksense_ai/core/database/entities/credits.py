"""
Credits ledger entity models.

This module contains the per-user credit balance and the append-only
transaction history that explains every change to it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserCredits(Base, table=True):
    """Current credit balance for one user.

    Table: user_credits
    """

    __tablename__ = "user_credits"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, unique=True, index=True)
    credits_remaining: int = Field(default=0)
    creem_id: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"UserCredits(user_id={self.user_id}, credits_remaining={self.credits_remaining})"


class CreditTransaction(Base, table=True):
    """Append-only entry in a user's credit history.

    ``amount`` is always positive; ``transaction_type`` gives the direction.

    Table: credit_transactions
    """

    __tablename__ = "credit_transactions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=128, index=True)
    transaction_type: str = Field(max_length=16, index=True)
    amount: int = Field()
    description: str = Field()
    related_analysis_id: Optional[str] = Field(default=None, max_length=64)
    pdf_export_id: Optional[str] = Field(default=None, max_length=64)
    model_used: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return (
            f"CreditTransaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.transaction_type}, amount={self.amount})"
        )
