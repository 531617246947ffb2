"""
Credit pricing.

Credit cost per analysis model and the purchasable credit packages. The cost
of an analysis is charged when it is exported, not when it is produced.
"""

from __future__ import annotations

import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from cracksense_ai.server.core.config import settings

CREDIT_COSTS: Dict[str, int] = {
    "gemini-2.0-flash": 200,
    "gemini-2.5-flash": 500,
}

PackageName = Literal["starter", "pro"]


class CreditPackage(BaseModel):
    """A purchasable bundle of credits."""

    name: str
    price: float
    credits: int
    description: str
    features: List[str]


class ProductCredits(BaseModel):
    """Credits granted by a payment product id."""

    credits: int
    package_name: PackageName


PACKAGES: Dict[str, CreditPackage] = {
    "starter": CreditPackage(
        name="Starter",
        price=8.99,
        credits=8000,
        description="Individuals & small teams",
        features=["8,000 credits included", "40 analyses", "Structural engineer support"],
    ),
    "pro": CreditPackage(
        name="Pro",
        price=29.99,
        credits=24000,
        description="Professionals & creators",
        features=["24,000 credits included", "120 analyses", "Structural engineer support"],
    ),
}

# Build or date suffixes such as "-001" or "-20250219", never a bare model version
_VERSION_SUFFIX = re.compile(r"-\d{3,}$")


def get_package_by_name(package_name: str) -> Optional[CreditPackage]:
    """Return the package called ``package_name`` (starter or pro)."""
    return PACKAGES.get(package_name)


def normalize_model_name(model: str) -> str:
    """
    Reduce a provider-qualified model id to its pricing key.

    ``google/gemini-2.0-flash-001`` becomes ``gemini-2.0-flash``.
    """
    name = model.split("/", 1)[-1]
    return _VERSION_SUFFIX.sub("", name)


def get_credit_cost(model: str) -> int:
    """
    Credits charged for exporting an analysis produced by ``model``.

    Models without a price entry are charged the highest listed rate.
    """
    return CREDIT_COSTS.get(normalize_model_name(model), max(CREDIT_COSTS.values()))


def get_credits_from_product_id(product_id: str) -> Optional[ProductCredits]:
    """
    Map a payment product id (dev or prod) onto the credits it grants.

    Returns:
        ProductCredits, or None when the id matches no configured package
    """
    packs = settings.credit_packs
    if not product_id:
        return None
    if product_id in (packs.starter_dev_id, packs.starter_prod_id):
        return ProductCredits(credits=PACKAGES["starter"].credits, package_name="starter")
    if product_id in (packs.pro_dev_id, packs.pro_prod_id):
        return ProductCredits(credits=PACKAGES["pro"].credits, package_name="pro")
    return None
