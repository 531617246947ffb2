"""Procurement agent: repair products from the catalog for a chat question or a DIY plan."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cracksense_ai.core.errors import AgentExecutionError
from cracksense_ai.core.models.domain import (
    AgentType,
    InspectionResult,
    PrimaryRecommendation,
    ProcurementProduct,
    ProcurementResult,
    ProductSkillLevel,
    RecommendationResult,
    RecommendationType,
    Severity,
    SkillLevel,
)
from cracksense_ai.services.product_recommendations import (
    DEFAULT_SEARCH_RANK,
    DIY_FALLBACK_REASON,
    DIY_FALLBACK_SCORE,
    DIY_SUFFIX,
    ProductMatch,
    ProductRecommendationService,
    RecommendationContext,
)

logger = logging.getLogger(__name__)

CHAT_MATCH_COUNT = 8
CHAT_MIN_RATING = 3.0
MAX_PRODUCTS = 5
MIN_DIY_PRODUCTS = 3

STOP_WORDS = frozenset(
    """
    i have a an the is are was were be been being
    what how when where why who which should could would
    to for of in on at by with from up about into
    through during before after above below under between
    and or but if then else so than such both either
    do does did will can may must shall might ought
    it its they them their this that these those
    buy purchase get use need want kind type sort
    """.split()
)

IMPORTANT_WORDS = frozenset(
    """
    crack cracks hairline small large structural
    drywall wall ceiling concrete foundation plaster
    repair fix patch seal fill mend
    product products material materials kit paste compound
    vertical horizontal diagonal settlement stress
    """.split()
)

# Checked in order against the lowercased query.
CATEGORY_RULES = (
    (("spackle", "filler"), "Spackling & Fillers"),
    (("caulk", "sealant"), "Sealants & Caulks"),
    (("patch", "kit"), "Repair Kits"),
    (("paint", "primer"), "Paint & Primer"),
    (("tool",), "Tools & Equipment"),
)


def extract_keywords(query: str) -> str:
    """Drop stop words and short words, keeping crack-repair vocabulary."""
    words = (re.sub(r"[^\w]", "", word) for word in query.lower().split())
    kept = [word for word in words if word in IMPORTANT_WORDS or (word not in STOP_WORDS and len(word) > 2)]
    return " ".join(word for word in kept if word)


def determine_category(query: str, inspection: Optional[InspectionResult] = None) -> str:
    lowered = query.lower()
    for words, category in CATEGORY_RULES:
        if any(word in lowered for word in words):
            return category
    if inspection is not None:
        if inspection.severity == Severity.low:
            return "DIY Repair Materials"
        if inspection.severity == Severity.moderate:
            return "Professional Grade Materials"
    return "General Repair Materials"


def _chat_reason(query: str, product_type: Optional[str], rating: Optional[float]) -> str:
    readable = (product_type or "").replace("_", " ", 1)
    return f"Suitable for {query.lower()} - {readable} with {_format_rating(rating or 4)}/5 rating"


def _format_rating(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class ProcurementAgent:
    """
    Find catalog products for a repair.

    Args:
        session_maker: Opens the database session each request runs in.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None) -> None:
        if session_maker is None:
            from cracksense_ai.core.database import async_session_maker

            session_maker = async_session_maker
        self.session_maker = session_maker

    async def get_product_recommendations(
        self,
        query: str,
        user_id: str,
        inspection: Optional[InspectionResult] = None,
        recommendation: Optional[RecommendationResult] = None,
        conversation_id: Optional[str] = None,
        budget: Optional[float] = None,
        skill_level: Optional[SkillLevel] = None,
    ) -> ProcurementResult:
        """
        Recommend products for a query.

        A DIY plan narrows the results to beginner friendly products. The
        recommendations are recorded for tracking.

        Raises:
            AgentExecutionError: The catalog search failed
        """
        preferred = ProductSkillLevel.from_user_skill(skill_level)
        context = RecommendationContext(
            user_id=user_id,
            user_query=query,
            conversation_id=conversation_id,
            crack_severity=inspection.severity.value if inspection is not None else None,
            crack_type=inspection.crack_type if inspection is not None else None,
            budget=budget,
            preferred_skill_level=preferred.value if preferred is not None else None,
        )

        async with self.session_maker() as session:
            service = ProductRecommendationService(session)
            try:
                if recommendation is not None and recommendation.primary_recommendation == PrimaryRecommendation.diy:
                    matches = await self._diy_products(service, query, context)
                else:
                    matches = await self._chat_products(service, query)
            except Exception as e:
                logger.error(f"Procurement agent error: {e}")
                raise AgentExecutionError(AgentType.procurement.value, "Failed to get product recommendations", e) from e

            await service.save_recommendations(matches, context)

        return ProcurementResult(
            products=[
                ProcurementProduct(
                    id=match.product.id,
                    title=match.product.title,
                    price=match.product.price or 0.0,
                    rating=match.product.rating or 0.0,
                    url=match.product.url,
                    image_url=match.product.image_url,
                    reason=match.recommendation_reason,
                )
                for match in matches
            ],
            total_recommendations=len(matches),
            category=determine_category(query, inspection),
        )

    async def _chat_products(self, service: ProductRecommendationService, query: str) -> List[ProductMatch]:
        hits = await service.search_products_by_text(
            extract_keywords(query), match_count=CHAT_MATCH_COUNT, min_rating=CHAT_MIN_RATING
        )
        matches = [
            ProductMatch(
                product=hit.product,
                recommendation_score=hit.search_rank or DEFAULT_SEARCH_RANK,
                recommendation_reason=_chat_reason(query, hit.product.product_type, hit.product.rating),
                recommendation_type=RecommendationType.chat_based,
            )
            for hit in hits
        ]
        return matches[:MAX_PRODUCTS]

    async def _diy_products(
        self, service: ProductRecommendationService, query: str, context: RecommendationContext
    ) -> List[ProductMatch]:
        base = await self._chat_products(service, query)
        diy = [
            replace(
                match,
                recommendation_reason=f"{match.recommendation_reason}{DIY_SUFFIX}",
                recommendation_score=min(match.recommendation_score + 0.1, 1.0),
            )
            for match in base
            if match.product.skill_level in (ProductSkillLevel.beginner.value, None)
        ]
        if len(diy) < MIN_DIY_PRODUCTS:
            extra = await service.products.list_for_severity(
                context.crack_severity or Severity.low.value,
                skill_level=ProductSkillLevel.beginner.value,
                limit=MAX_PRODUCTS,
            )
            diy.extend(
                ProductMatch(
                    product=product,
                    recommendation_score=DIY_FALLBACK_SCORE,
                    recommendation_reason=DIY_FALLBACK_REASON,
                    recommendation_type=RecommendationType.analysis_based,
                )
                for product in extra
            )
        return diy[:MAX_PRODUCTS]
