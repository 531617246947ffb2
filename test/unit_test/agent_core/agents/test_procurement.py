"""Unit tests for the procurement agent."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from cracksense_ai.agent_core.agents.procurement import ProcurementAgent, determine_category, extract_keywords
from cracksense_ai.core.database.repositories.products import ProductRecommendationRepository
from cracksense_ai.core.errors import AgentExecutionError
from cracksense_ai.core.models.domain import CrackFinding, InspectionResult, RecommendationResult
from cracksense_ai.services.product_recommendations import (
    DIY_FALLBACK_REASON,
    DIY_SUFFIX,
    ProductRecommendationService,
)


def _inspection(severity: str) -> InspectionResult:
    return InspectionResult(
        crack_type="Hairline crack",
        severity=severity,
        risk_level=severity,
        confidence=50,
        findings=[CrackFinding(type="Hairline", severity=severity, description="Thin crack")],
        recommendations=[],
    )


DIY_PLAN = RecommendationResult(primary_recommendation="diy", reasoning="Cosmetic", steps=["Fill the crack"])


@pytest.fixture
def agent(session_maker) -> ProcurementAgent:
    return ProcurementAgent(session_maker)


class TestHelpers:
    def test_extract_keywords(self):
        assert extract_keywords("What should I buy to fix a small crack in drywall?") == "fix small crack drywall"
        assert extract_keywords("I want wood glue") == "wood glue"

    @pytest.mark.parametrize(
        "query,inspection,category",
        [
            ("best crack filler", None, "Spackling & Fillers"),
            ("exterior sealant", None, "Sealants & Caulks"),
            ("drywall patch", None, "Repair Kits"),
            ("primer for plaster", None, "Paint & Primer"),
            ("which tool", None, "Tools & Equipment"),
            ("repair materials", _inspection("low"), "DIY Repair Materials"),
            ("repair materials", _inspection("moderate"), "Professional Grade Materials"),
            ("repair materials", _inspection("high"), "General Repair Materials"),
            ("repair materials", None, "General Repair Materials"),
        ],
    )
    def test_determine_category(self, query, inspection, category):
        assert determine_category(query, inspection) == category


class TestGetProductRecommendations:
    async def test_chat_query(self, agent, products, user_id, session):
        result = await agent.get_product_recommendations("crack caulk", user_id, conversation_id="conv-1")

        assert [p.title for p in result.products] == [
            "Elastomeric Crack Caulk",
            "DAP Lightweight Spackling Paste",
            "Concrete Epoxy Injection Kit",
        ]
        assert result.total_recommendations == 3
        assert result.category == "Sealants & Caulks"
        assert result.products[0].reason == "Suitable for crack caulk - caulk with 4.3/5 rating"
        assert result.products[1].reason == "Suitable for crack caulk - spackling paste with 4.7/5 rating"

        stored = await ProductRecommendationRepository(session).list_for_user(user_id)
        assert len(stored) == 3
        assert {r.conversation_id for r in stored} == {"conv-1"}

    async def test_diy_plan_prefers_beginner_products(self, agent, products, user_id):
        result = await agent.get_product_recommendations(
            "crack caulk", user_id, inspection=_inspection("low"), recommendation=DIY_PLAN
        )

        assert [p.title for p in result.products] == [
            "Elastomeric Crack Caulk",
            "DAP Lightweight Spackling Paste",
            "DAP Lightweight Spackling Paste",
            "Elastomeric Crack Caulk",
        ]
        assert result.products[0].reason.endswith(DIY_SUFFIX)
        assert [p.reason for p in result.products[2:]] == [DIY_FALLBACK_REASON, DIY_FALLBACK_REASON]
        assert result.category == "Sealants & Caulks"

    async def test_no_matches(self, agent, products, user_id):
        result = await agent.get_product_recommendations("wood glue", user_id)

        assert result.products == []
        assert result.total_recommendations == 0
        assert result.category == "General Repair Materials"

    async def test_search_failure_raises(self, agent, products, user_id):
        with patch.object(
            ProductRecommendationService, "search_products_by_text", AsyncMock(side_effect=RuntimeError("db down"))
        ):
            with pytest.raises(AgentExecutionError) as exc_info:
                await agent.get_product_recommendations("crack caulk", user_id)

        assert exc_info.value.agent_type == "procurement"
        assert isinstance(exc_info.value.cause, RuntimeError)
