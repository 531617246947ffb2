"""API tests for the product recommendation endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _scored(body):
    return [(r["product"]["title"], r["recommendation_score"]) for r in body["recommendations"]]


class TestCreateRecommendations:
    async def test_analysis_based(self, client: AsyncClient, products, analysis):
        response = await client.post(
            "/api/v1/recommendations",
            json={"recommendationType": "analysis_based", "analysisId": analysis.id},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert _scored(body) == [
            ("DAP Lightweight Spackling Paste", 0.95),
            ("Fiberglass Mesh Tape", 0.95),
            ("Elastomeric Crack Caulk", 0.85),
        ]
        assert all(r["id"] for r in body["recommendations"])

    async def test_chat_based(self, client: AsyncClient, products):
        response = await client.post(
            "/api/v1/recommendations",
            json={"recommendationType": "chat_based", "userQuery": "crack", "budget": 20},
        )

        assert response.status_code == 200
        titles = [r["product"]["title"] for r in response.json()["recommendations"]]
        assert titles == ["Elastomeric Crack Caulk", "DAP Lightweight Spackling Paste"]

    @pytest.mark.parametrize(
        "body,detail",
        [
            ({"recommendationType": "analysis_based"}, "Analysis ID is required for analysis-based recommendations"),
            ({"recommendationType": "diy_focused"}, "Analysis ID is required for analysis-based recommendations"),
            ({"recommendationType": "chat_based"}, "User query is required for chat-based recommendations"),
            ({"recommendationType": "trending", "analysisId": "a1"}, "Invalid recommendation type"),
        ],
    )
    async def test_invalid_request(self, client: AsyncClient, body, detail):
        response = await client.post("/api/v1/recommendations", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == detail

    async def test_unknown_analysis(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/recommendations", json={"recommendationType": "diy_focused", "analysisId": "missing"}
        )

        assert response.status_code == 404


class TestGetRecommendations:
    async def test_by_analysis(self, client: AsyncClient, products, analysis):
        response = await client.get("/api/v1/recommendations", params={"analysisId": analysis.id})

        assert response.status_code == 200
        assert response.json()["total"] == 3

    async def test_by_query(self, client: AsyncClient, products):
        response = await client.get("/api/v1/recommendations", params={"type": "chat_based", "query": "epoxy"})

        assert response.status_code == 200
        assert [r["product"]["title"] for r in response.json()["recommendations"]] == ["Concrete Epoxy Injection Kit"]

    @pytest.mark.parametrize("params", [{}, {"type": "chat_based"}, {"type": "diy_focused", "analysisId": "a1"}])
    async def test_invalid_parameters(self, client: AsyncClient, params):
        response = await client.get("/api/v1/recommendations", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid parameters for GET request"

    async def test_history(self, client: AsyncClient, products, analysis):
        await client.get("/api/v1/recommendations", params={"analysisId": analysis.id})

        response = await client.get(
            "/api/v1/recommendations/history", params={"analysisId": analysis.id, "limit": 2}
        )

        assert response.status_code == 200
        stored = response.json()["recommendations"]
        assert len(stored) == 2
        assert {r["analysis_id"] for r in stored} == {analysis.id}


class TestTrackInteraction:
    async def test_click(self, client: AsyncClient, products, analysis):
        created = await client.post(
            "/api/v1/recommendations",
            json={"recommendationType": "analysis_based", "analysisId": analysis.id},
        )
        recommendation_id = created.json()["recommendations"][0]["id"]

        response = await client.post(
            "/api/v1/recommendations/track",
            json={"recommendationId": recommendation_id, "interactionType": "click"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "click tracked successfully"}
        history = await client.get("/api/v1/recommendations/history")
        clicked = [r for r in history.json()["recommendations"] if r["id"] == recommendation_id]
        assert clicked[0]["clicked_at"] is not None

    @pytest.mark.parametrize(
        "body",
        [
            {"interactionType": "click"},
            {"recommendationId": "r1", "interactionType": "share"},
        ],
    )
    async def test_invalid_request(self, client: AsyncClient, body):
        response = await client.post("/api/v1/recommendations/track", json=body)
        assert response.status_code == 400

    async def test_unknown_recommendation(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/recommendations/track", json={"recommendationId": "missing", "interactionType": "view"}
        )

        assert response.status_code == 404
