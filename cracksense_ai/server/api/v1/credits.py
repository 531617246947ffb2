"""
Credits Endpoints.

Balance, ledger history, starter credits and top-ups after a completed
payment.
"""

from fastapi import APIRouter, HTTPException, Query, status

from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.io import (
    CreditBalanceResponse,
    CreditHistoryResponse,
    CreditTransactionRead,
    PurchaseCreditsRequest,
    PurchaseCreditsResponse,
)
from cracksense_ai.server.core.config import settings
from cracksense_ai.server.services.deps import CurrentUserDep, SessionDep
from cracksense_ai.services.credits import CreditsService
from cracksense_ai.services.pricing import get_credits_from_product_id, get_package_by_name

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/check",
    response_model=CreditBalanceResponse,
    summary="Check Credits",
    description="Retrieve the caller's credit balance. Users without a balance have 0 credits.",
)
async def check_credits(user_id: CurrentUserDep, session: SessionDep) -> CreditBalanceResponse:
    credits = await CreditsService(session).get_user_credits(user_id)
    remaining = credits.credits_remaining if credits is not None else 0
    return CreditBalanceResponse(credits=remaining, has_credits=remaining > 0)


@router.get(
    "/history",
    response_model=CreditHistoryResponse,
    summary="Credit History",
    description="Retrieve the caller's credit transactions, newest first.",
)
async def credit_history(
    user_id: CurrentUserDep,
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=500, description="Maximum number of transactions"),
) -> CreditHistoryResponse:
    transactions = await CreditsService(session).get_transaction_history(user_id, limit=limit)
    return CreditHistoryResponse(transactions=[CreditTransactionRead.model_validate(t) for t in transactions])


@router.post(
    "/initialize",
    response_model=CreditBalanceResponse,
    summary="Initialize Credits",
    description="Grant the starter credits on first sign-in. Repeated calls leave the balance unchanged.",
)
async def initialize_credits(user_id: CurrentUserDep, session: SessionDep) -> CreditBalanceResponse:
    credits = await CreditsService(session).initialize_user_credits(user_id, settings.initial_credits)
    return CreditBalanceResponse(credits=credits.credits_remaining, has_credits=credits.credits_remaining > 0)


@router.post(
    "/purchase",
    response_model=PurchaseCreditsResponse,
    summary="Add Purchased Credits",
    description="Add the credits of a paid credit pack, identified by its payment product id.",
    responses={400: {"description": "Unknown product id"}},
)
async def purchase_credits(
    request: PurchaseCreditsRequest, user_id: CurrentUserDep, session: SessionDep
) -> PurchaseCreditsResponse:
    product = get_credits_from_product_id(request.product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown product id")

    package = get_package_by_name(product.package_name)
    remaining = await CreditsService(session).add_credits_with_history(
        user_id,
        product.credits,
        description=f"Purchased {package.name} pack",
        creem_id=request.creem_id,
    )
    logger.info(f"Added {product.credits} purchased credits for user {user_id}")
    return PurchaseCreditsResponse(
        package_name=product.package_name,
        credits_added=product.credits,
        remaining_credits=remaining,
    )
