"""Unit tests for product search and recommendations."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from cracksense_ai.core.database.entities.crack_analyses import CrackAnalysis
from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository
from cracksense_ai.core.database.repositories.products import ProductRecommendationRepository
from cracksense_ai.core.errors import AnalysisNotFoundError
from cracksense_ai.core.models.domain import InteractionType, RecommendationType
from cracksense_ai.services.product_recommendations import (
    DIY_FALLBACK_REASON,
    DIY_SUFFIX,
    ProductMatch,
    ProductRecommendationService,
    RecommendationContext,
    apply_context_filtering,
    extract_search_keywords,
    generate_recommendation_reason,
    get_recommendation_display_text,
    rank_product,
    should_show_product_recommendations,
)


@pytest.fixture
def service(session):
    return ProductRecommendationService(session)


def _titles(matches):
    return [m.product.title for m in matches]


class TestHelpers:
    def test_rank_product_weights_fields(self, products):
        spackle, caulk, epoxy, tape = products

        assert rank_product(spackle, ["spackling"]) == 1.0
        assert rank_product(spackle, ["crack"]) == 0.8
        assert rank_product(caulk, ["vinyl"]) == 0.4
        assert rank_product(tape, ["tape", "drywall"]) == 0.9
        assert rank_product(epoxy, []) == 0.0

    def test_generate_recommendation_reason(self, products):
        spackle, caulk, epoxy, tape = products

        assert generate_recommendation_reason(spackle, "crack filler") == (
            "Recommended because it's highly rated, budget-friendly, easy to use"
        )
        assert generate_recommendation_reason(epoxy, "quick fix for a small crack") == (
            "Recommended because it's quick application, perfect for minor repairs"
        )
        assert generate_recommendation_reason(tape, "anything") == "Good match for your crack repair needs"

    def test_apply_context_filtering(self, products, user_id):
        spackle, caulk, epoxy, tape = products
        matches = [
            ProductMatch(p, score, "reason", RecommendationType.chat_based)
            for p, score in [(spackle, 0.6), (caulk, 0.9), (epoxy, 0.95), (tape, 0.7)]
        ]

        within_budget = apply_context_filtering(matches, RecommendationContext(user_id=user_id, budget=20))
        professional = apply_context_filtering(
            matches, RecommendationContext(user_id=user_id, preferred_skill_level="professional")
        )

        assert _titles(within_budget) == [
            "Elastomeric Crack Caulk",
            "Fiberglass Mesh Tape",
            "DAP Lightweight Spackling Paste",
        ]
        assert _titles(professional) == ["Concrete Epoxy Injection Kit", "Fiberglass Mesh Tape"]

    @pytest.mark.parametrize("severity,shown", [("low", True), ("moderate", True), ("high", False)])
    def test_should_show_product_recommendations(self, severity, shown):
        assert should_show_product_recommendations(severity) is shown

    def test_display_text(self):
        assert get_recommendation_display_text("low").title == "DIY Repair Materials"
        assert get_recommendation_display_text("moderate").title == "Recommended Repair Materials"
        assert get_recommendation_display_text("high").title == "Repair Materials"

    def test_extract_search_keywords(self):
        assert extract_search_keywords("I need crack filler for drywall!") == "crack filler for drywall"
        assert extract_search_keywords("I want to buy") == "to"


class TestSearch:
    async def test_search_orders_by_rank_then_rating(self, service, products):
        hits = await service.search_products_by_text("crack")

        assert [(h.product.title, h.search_rank) for h in hits] == [
            ("Elastomeric Crack Caulk", 1.0),
            ("DAP Lightweight Spackling Paste", 0.8),
            ("Concrete Epoxy Injection Kit", 0.8),
        ]

    async def test_search_respects_min_rating(self, service, products):
        default = await service.search_products_by_text("drywall tape")
        everything = await service.search_products_by_text("drywall tape", min_rating=0)

        assert [h.product.title for h in default] == ["DAP Lightweight Spackling Paste"]
        assert [h.product.title for h in everything] == ["Fiberglass Mesh Tape", "DAP Lightweight Spackling Paste"]

    async def test_empty_query(self, service, products):
        assert await service.search_products_by_text("   ") == []

    async def test_search_products_by_query_records_results(self, service, products, user_id):
        batch = await service.search_products_by_query("I need crack filler", user_id, conversation_id="c1")

        assert _titles(batch.recommendations) == [
            "DAP Lightweight Spackling Paste",
            "Elastomeric Crack Caulk",
            "Concrete Epoxy Injection Kit",
        ]
        first = batch.recommendations[0]
        assert first.recommendation_score == pytest.approx(0.8)
        assert first.recommendation_reason.endswith("- spackling paste product")
        stored = await ProductRecommendationRepository(service.session).get_by_id(first.recommendation_id)
        assert stored.conversation_id == "c1"
        assert stored.user_query == "I need crack filler"
        assert stored.recommendation_type == "chat_based"


class TestAnalysisRecommendations:
    async def test_crack_type_match_scores_higher(self, service, products, analysis, user_id):
        matches = await service.get_analysis_based_recommendations(
            analysis.id, RecommendationContext(user_id=user_id)
        )

        assert [(m.product.title, m.recommendation_score) for m in matches] == [
            ("DAP Lightweight Spackling Paste", 0.95),
            ("Fiberglass Mesh Tape", 0.95),
            ("Elastomeric Crack Caulk", 0.85),
        ]
        assert matches[0].recommendation_reason == "Made for hairline cracks - suitable for low severity repairs"
        assert matches[2].recommendation_reason == "Suitable for low severity crack repairs"

        stored = await ProductRecommendationRepository(service.session).list_for_user(user_id, analysis_id=analysis.id)
        assert len(stored) == 3
        assert all(m.recommendation_id for m in matches)

    async def test_unknown_analysis(self, service, user_id):
        with pytest.raises(AnalysisNotFoundError):
            await service.get_analysis_based_recommendations("missing", RecommendationContext(user_id=user_id))

    async def test_diy_recommendations_boost_scores(self, service, products, analysis, user_id):
        matches = await service.get_diy_recommendations(analysis.id, RecommendationContext(user_id=user_id))

        assert _titles(matches) == [
            "DAP Lightweight Spackling Paste",
            "Fiberglass Mesh Tape",
            "Elastomeric Crack Caulk",
        ]
        assert [m.recommendation_score for m in matches] == pytest.approx([1.0, 1.0, 0.95])
        assert all(m.recommendation_reason.endswith(DIY_SUFFIX) for m in matches)

    async def test_diy_recommendations_backfill(self, service, products, user_id):
        foundation = await CrackAnalysisRepository(service.session).create(
            CrackAnalysis(user_id=user_id, crack_type="Foundation crack", risk_level="moderate")
        )

        matches = await service.get_diy_recommendations(foundation.id, RecommendationContext(user_id=user_id))

        assert _titles(matches) == [
            "DAP Lightweight Spackling Paste",
            "DAP Lightweight Spackling Paste",
            "Elastomeric Crack Caulk",
        ]
        assert matches[0].recommendation_score == pytest.approx(0.95)
        assert [m.recommendation_reason for m in matches[1:]] == [DIY_FALLBACK_REASON, DIY_FALLBACK_REASON]

    async def test_low_severity_recommendations(self, service, products, analysis, user_id):
        batch = await service.get_recommendations_for_low_severity(user_id, analysis.id, "cheap fix")

        assert batch.total == 3
        assert [m.recommendation_score for m in batch.recommendations] == pytest.approx([0.994, 0.886, 0.75])
        assert batch.recommendations[0].recommendation_reason == (
            "Top recommendation - suitable for low-level crack DIY repair (4.7 star reviews)"
        )
        assert batch.recommendations[1].recommendation_reason == "High-rated product - 4.3/5 star rating"


class TestChatRecommendations:
    async def test_budget_filter(self, service, products, user_id):
        matches = await service.get_chat_based_recommendations(
            "crack", RecommendationContext(user_id=user_id, budget=20)
        )

        assert _titles(matches) == ["Elastomeric Crack Caulk", "DAP Lightweight Spackling Paste"]
        assert matches[0].recommendation_reason == "Recommended because it's budget-friendly, easy to use"


class TestSaveAndTrack:
    async def test_save_failure_is_not_raised(self, service, products, user_id):
        match = ProductMatch(products[0], 0.9, "reason", RecommendationType.chat_based)
        service.recommendations.create_many = AsyncMock(side_effect=RuntimeError("db down"))

        await service.save_recommendations([match], RecommendationContext(user_id=user_id))

        assert match.recommendation_id is None

    async def test_diy_focused_is_stored_as_analysis_based(self, service, products, user_id):
        match = ProductMatch(products[0], 0.9, "reason", RecommendationType.diy_focused)

        await service.save_recommendations([match], RecommendationContext(user_id=user_id))

        stored = await service.recommendations.get_by_id(match.recommendation_id)
        assert stored.recommendation_type == "analysis_based"

    @pytest.mark.parametrize(
        "interaction,column",
        [
            (InteractionType.view, "viewed_at"),
            (InteractionType.click, "clicked_at"),
            (InteractionType.purchase, "purchased_at"),
        ],
    )
    async def test_track_interaction(self, service, products, user_id, interaction, column):
        match = ProductMatch(products[0], 0.9, "reason", RecommendationType.chat_based)
        await service.save_recommendations([match], RecommendationContext(user_id=user_id))

        assert await service.track_interaction(match.recommendation_id, interaction) is True

        stored = await service.recommendations.get_by_id(match.recommendation_id)
        assert getattr(stored, column) is not None

    async def test_track_unknown_recommendation(self, service):
        assert await service.track_interaction("missing", InteractionType.click) is False
