"""Credits I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import ApiSchema


class CreditTransactionRead(BaseModel):
    """Schema for reading a credit ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    transaction_type: str
    amount: int
    description: str
    related_analysis_id: Optional[str] = None
    pdf_export_id: Optional[str] = None
    model_used: Optional[str] = None
    created_at: datetime


class CreditBalanceResponse(ApiSchema):
    success: bool = True
    credits: int
    has_credits: bool


class CreditHistoryResponse(ApiSchema):
    success: bool = True
    transactions: List[CreditTransactionRead]


class PurchaseCreditsRequest(ApiSchema):
    """Schema for topping up credits after a completed payment."""

    product_id: str = Field(description="Payment provider product id of the purchased pack")
    creem_id: Optional[str] = Field(default=None, description="Payment provider customer id")


class PurchaseCreditsResponse(ApiSchema):
    success: bool = True
    package_name: str
    credits_added: int
    remaining_credits: int
