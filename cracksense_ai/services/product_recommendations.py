"""
Product catalog search and recommendations.

Ranks repair products against free-text queries or a stored crack analysis,
filters them by budget and skill level, and records every recommendation so
views, clicks and purchases can be tracked later.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.base import utc_now
from cracksense_ai.core.database.entities.products import ProductRecommendation, RepairProduct
from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.database.repositories.products import (
    ProductRecommendationRepository,
    RepairProductRepository,
)
from cracksense_ai.core.errors import AnalysisNotFoundError
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import InteractionType, RecommendationType, Severity

logger = get_logger(__name__)

DEFAULT_SEARCH_RANK = 0.75
DEFAULT_ANALYSIS_SCORE = 0.85
CRACK_TYPE_MATCH_SCORE = 0.95
DIY_FALLBACK_SCORE = 0.8
DIY_SUFFIX = " - Perfect for DIY repair"
DIY_FALLBACK_REASON = "Highly rated DIY-friendly crack repair solution"

# Field weights for the text search rank.
_FIELD_WEIGHTS = (
    ("title", 1.0),
    ("search_keywords", 0.8),
    ("product_type", 0.6),
    ("material_type", 0.4),
)

_LOW_SEVERITY_REASONS = [
    "Top recommendation - suitable for low-level crack DIY repair",
    "High-rated product - {rating}/5 star rating",
    "Economical and practical - excellent value repair solution",
    "Easy to use - suitable for beginner DIY operation",
    "Alternative option - reliable repair material choice",
]

_SEARCH_STOP_WORDS = {
    "i", "need", "want", "buy", "purchase", "recommend", "what", "how",
    "which", "use", "repair", "fix", "material", "product",
}
_SEARCH_IMPORTANT_WORDS = {"crack", "fissure", "gap", "repair", "fill", "seal", "adhesive", "paste", "patch"}


@dataclass
class RecommendationContext:
    """Who is asking, and about which crack."""

    user_id: str
    analysis_id: Optional[str] = None
    conversation_id: Optional[str] = None
    user_query: Optional[str] = None
    crack_severity: Optional[str] = None
    crack_type: Optional[str] = None
    budget: Optional[float] = None
    preferred_skill_level: Optional[str] = None


@dataclass
class ProductSearchHit:
    """A product matched by text search with its relevance rank (0..1)."""

    product: RepairProduct
    search_rank: float


@dataclass
class ProductMatch:
    """A product paired with the score and reason it was recommended for."""

    product: RepairProduct
    recommendation_score: float
    recommendation_reason: str
    recommendation_type: RecommendationType
    vector_similarity_score: Optional[float] = None
    recommendation_id: Optional[str] = None


@dataclass
class DisplayText:
    title: str
    subtitle: str


@dataclass
class RecommendationBatch:
    """Recommendations returned by the simplified low-severity flow."""

    recommendations: List[ProductMatch] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.recommendations)


# =====================================================================
# Pure helpers
# =====================================================================


def _readable_type(product_type: Optional[str]) -> str:
    # Only the first underscore is replaced ("spackling_paste" -> "spackling paste").
    return (product_type or "").replace("_", " ", 1)


def generate_recommendation_reason(product: RepairProduct, query: str) -> str:
    """Explain why a product matches a free-text query."""
    reasons: List[str] = []
    lowered = query.lower()

    if product.rating and product.rating >= 4.5:
        reasons.append("highly rated")
    if product.price and product.price < 15:
        reasons.append("budget-friendly")
    if product.skill_level == "beginner":
        reasons.append("easy to use")
    if "quick" in lowered or "fast" in lowered:
        reasons.append("quick application")
    if "small" in lowered or "minor" in lowered:
        reasons.append("perfect for minor repairs")

    if reasons:
        return f"Recommended because it's {', '.join(reasons)}"
    return "Good match for your crack repair needs"


def apply_context_filtering(matches: List[ProductMatch], context: RecommendationContext) -> List[ProductMatch]:
    """
    Drop products over budget or of another skill level, best score first.

    Products without a price or a skill level always pass.
    """
    filtered = matches
    if context.budget:
        filtered = [m for m in filtered if not m.product.price or m.product.price <= context.budget]
    if context.preferred_skill_level:
        filtered = [
            m
            for m in filtered
            if not m.product.skill_level or m.product.skill_level == context.preferred_skill_level
        ]
    return sorted(filtered, key=lambda m: m.recommendation_score, reverse=True)


def should_show_product_recommendations(crack_severity: str) -> bool:
    """Products are only suggested for DIY-appropriate (low or moderate) cracks."""
    return crack_severity in (Severity.low.value, Severity.moderate.value)


def get_recommendation_display_text(crack_severity: str) -> DisplayText:
    if crack_severity == Severity.low.value:
        return DisplayText("DIY Repair Materials", "These products can help you fix minor cracks yourself")
    if crack_severity == Severity.moderate.value:
        return DisplayText("Recommended Repair Materials", "Professional-grade materials for effective crack repair")
    return DisplayText("Repair Materials", "Consider these materials for your repair project")


def extract_search_keywords(query: str) -> str:
    """Strip filler words from a shopping question, keeping crack repair terms."""
    words = (re.sub(r"[^\w]", "", word) for word in query.lower().split())
    kept = [
        word
        for word in words
        if word and (word in _SEARCH_IMPORTANT_WORDS or (word not in _SEARCH_STOP_WORDS and len(word) > 1))
    ]
    return " ".join(kept)


def rank_product(product: RepairProduct, terms: List[str]) -> float:
    """
    Relevance of a product to search terms, between 0 and 1.

    Each term scores the weight of the best field that contains it; the rank
    is the mean over all terms.
    """
    if not terms:
        return 0.0
    fields: Dict[str, str] = {
        "title": product.title.lower(),
        "search_keywords": " ".join(product.search_keywords or []).lower(),
        "product_type": _readable_type(product.product_type).replace("_", " ").lower(),
        "material_type": (product.material_type or "").lower(),
    }
    total = 0.0
    for term in terms:
        total += max((weight for name, weight in _FIELD_WEIGHTS if term in fields[name]), default=0.0)
    return round(total / len(terms), 4)


def _low_severity_reason(product: RepairProduct, rank: int) -> str:
    template = _LOW_SEVERITY_REASONS[rank - 1] if rank <= len(_LOW_SEVERITY_REASONS) else _LOW_SEVERITY_REASONS[-1]
    reason = template.format(rating=_format_number(product.rating or 4))
    if product.rating and product.rating >= 4.5:
        reason += f" ({_format_number(product.rating)} star reviews)"
    return reason


def _format_number(value: float) -> str:
    return f"{value:g}"


def _low_severity_score(product: RepairProduct, index: int) -> float:
    base = max(0.9 - index * 0.1, 0.6)
    rating_bonus = (product.rating or 4) / 5 * 0.1
    return min(base + rating_bonus, 1.0)


# =====================================================================
# Service
# =====================================================================


class ProductRecommendationService:
    """Product search and recommendation operations for one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.products = RepairProductRepository(session)
        self.recommendations = ProductRecommendationRepository(session)
        self.analyses = CrackAnalysisRepository(session)

    async def search_products_by_text(
        self, query: str, match_count: int = 8, min_rating: float = 3.0
    ) -> List[ProductSearchHit]:
        """
        Keyword search over title, search keywords, product and material type.

        Args:
            query: Space separated search terms
            match_count: Maximum number of hits
            min_rating: Products rated lower are ignored

        Returns:
            Hits ordered by rank, then rating
        """
        terms = [term for term in query.lower().split() if term]
        if not terms:
            return []
        hits = []
        for product in await self.products.list_rated_at_least(min_rating):
            rank = rank_product(product, terms)
            if rank > 0:
                hits.append(ProductSearchHit(product=product, search_rank=rank))
        hits.sort(key=lambda hit: (hit.search_rank, hit.product.rating or 0), reverse=True)
        return hits[:match_count]

    async def get_analysis_based_recommendations(
        self, analysis_id: str, context: RecommendationContext, match_count: int = 5
    ) -> List[ProductMatch]:
        """
        Recommend products suited to a stored analysis's risk level and crack type.

        Raises:
            AnalysisNotFoundError: ``analysis_id`` does not exist
        """
        analysis = await self.analyses.get_by_id(analysis_id)
        if analysis is None:
            raise AnalysisNotFoundError(analysis_id)

        severity = analysis.risk_level or Severity.moderate.value
        crack_type = (analysis.crack_type or "").lower()
        matches = []
        for product in await self.products.list_for_severity(severity):
            matched_types = [t for t in product.suitable_for_crack_types or [] if t.lower() in crack_type]
            if matched_types:
                score = CRACK_TYPE_MATCH_SCORE
                reason = f"Made for {matched_types[0]} cracks - suitable for {severity} severity repairs"
            else:
                score = DEFAULT_ANALYSIS_SCORE
                reason = f"Suitable for {severity} severity crack repairs"
            matches.append(
                ProductMatch(
                    product=product,
                    recommendation_score=score,
                    recommendation_reason=reason,
                    recommendation_type=RecommendationType.analysis_based,
                )
            )
        matches.sort(key=lambda m: (m.recommendation_score, m.product.rating or 0), reverse=True)
        matches = matches[:match_count]

        await self.save_recommendations(matches, replace(context, analysis_id=analysis_id))
        return matches

    async def get_chat_based_recommendations(self, query: str, context: RecommendationContext) -> List[ProductMatch]:
        """Recommend products for a free-text question, filtered by the context."""
        hits = await self.search_products_by_text(query, match_count=8, min_rating=3.0)
        matches = [
            ProductMatch(
                product=hit.product,
                recommendation_score=hit.search_rank or DEFAULT_SEARCH_RANK,
                recommendation_reason=generate_recommendation_reason(hit.product, query),
                recommendation_type=RecommendationType.chat_based,
            )
            for hit in hits
        ]
        filtered = apply_context_filtering(matches, context)
        await self.save_recommendations(filtered, context)
        return filtered[:5]

    async def get_diy_recommendations(self, analysis_id: str, context: RecommendationContext) -> List[ProductMatch]:
        """
        Analysis-based recommendations narrowed to beginner friendly products.

        When fewer than three remain, top rated beginner products for low
        severity cracks are appended.
        """
        base = await self.get_analysis_based_recommendations(analysis_id, context)
        diy = [
            replace(
                match,
                recommendation_reason=f"{match.recommendation_reason}{DIY_SUFFIX}",
                recommendation_score=min(match.recommendation_score + 0.1, 1.0),
            )
            for match in base
            if match.product.skill_level in ("beginner", None)
        ]
        if len(diy) < 3:
            extra = await self.products.list_for_severity(Severity.low.value, skill_level="beginner", limit=5)
            diy.extend(
                ProductMatch(
                    product=product,
                    recommendation_score=DIY_FALLBACK_SCORE,
                    recommendation_reason=DIY_FALLBACK_REASON,
                    recommendation_type=RecommendationType.analysis_based,
                )
                for product in extra
            )
        return diy[:5]

    async def get_recommendations_for_low_severity(
        self, user_id: str, analysis_id: str, user_query: Optional[str] = None
    ) -> RecommendationBatch:
        """Top five low severity products with rank-based scores and reasons."""
        products = await self.products.list_for_severity(Severity.low.value, limit=5)
        matches = [
            ProductMatch(
                product=product,
                recommendation_score=_low_severity_score(product, index),
                recommendation_reason=_low_severity_reason(product, index + 1),
                recommendation_type=RecommendationType.analysis_based,
            )
            for index, product in enumerate(products)
        ]
        context = RecommendationContext(user_id=user_id, analysis_id=analysis_id, user_query=user_query)
        await self.save_recommendations(matches, context)
        return RecommendationBatch(recommendations=matches)

    async def search_products_by_query(
        self, query: str, user_id: str, conversation_id: Optional[str] = None
    ) -> RecommendationBatch:
        """Search the catalog for a chat question and record the results."""
        hits = await self.search_products_by_text(extract_search_keywords(query), match_count=5, min_rating=3.0)
        matches = [
            ProductMatch(
                product=hit.product,
                recommendation_score=max(0.8 - index * 0.1, 0.5),
                recommendation_reason=f'Matches your search: "{query}" - {_readable_type(hit.product.product_type)} product',
                recommendation_type=RecommendationType.chat_based,
            )
            for index, hit in enumerate(hits)
        ]
        context = RecommendationContext(user_id=user_id, conversation_id=conversation_id, user_query=query)
        await self.save_recommendations(matches, context)
        return RecommendationBatch(recommendations=matches)

    async def save_recommendations(self, matches: List[ProductMatch], context: RecommendationContext) -> None:
        """
        Record recommendations for tracking.

        A failure is logged and rolled back; it never fails the caller.
        """
        if not matches:
            return
        rows = [
            ProductRecommendation(
                analysis_id=context.analysis_id,
                conversation_id=context.conversation_id,
                user_id=context.user_id,
                product_id=match.product.id,
                recommendation_score=match.recommendation_score,
                recommendation_reason=match.recommendation_reason,
                recommendation_type=_stored_type(match.recommendation_type),
                user_query=context.user_query,
                vector_similarity_score=match.vector_similarity_score,
            )
            for match in matches
        ]
        try:
            await self.recommendations.create_many(rows)
        except Exception as e:
            logger.error(f"Failed to save recommendations: {e}")
            await self.session.rollback()
            return
        for match, row in zip(matches, rows):
            match.recommendation_id = row.id

    async def track_interaction(self, recommendation_id: str, interaction_type: InteractionType) -> bool:
        """
        Stamp the time of a view, click or purchase on a recommendation.

        Returns:
            False when the recommendation does not exist
        """
        recommendation = await self.recommendations.get_by_id(recommendation_id)
        if recommendation is None:
            return False
        column = {
            InteractionType.view: "viewed_at",
            InteractionType.click: "clicked_at",
            InteractionType.purchase: "purchased_at",
        }[InteractionType(interaction_type)]
        setattr(recommendation, column, utc_now())
        await self.recommendations.update(recommendation)
        return True


def _stored_type(recommendation_type: RecommendationType) -> str:
    if recommendation_type == RecommendationType.diy_focused:
        return RecommendationType.analysis_based.value
    return RecommendationType(recommendation_type).value
