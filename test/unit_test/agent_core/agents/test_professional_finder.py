"""Unit tests for the professional finder agent."""

from __future__ import annotations

import httpx
import pytest

from cracksense_ai.agent_core.agents.professional_finder import (
    DEFAULT_EMERGENCY_MESSAGE,
    EMERGENCY_MESSAGES,
    ProfessionalFinderAgent,
    ProfessionalListing,
    ProfessionalSearchParams,
    format_professional_for_display,
    get_emergency_recommendation_message,
    search_params_for_risk,
)
from cracksense_ai.core.database.repositories.professionals import ProfessionalSearchLogRepository
from cracksense_ai.core.errors import AnalysisNotFoundError, ProfessionalNotFoundError
from cracksense_ai.core.models.domain import EmergencyLevel
from cracksense_ai.server.core.config import settings


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, json={})


@pytest.fixture
async def finder(session, monkeypatch):
    monkeypatch.setattr(settings, "zippopotam_base_url", "http://mock-zippopotam")
    monkeypatch.setattr(settings, "nominatim_base_url", "http://mock-nominatim")
    async with httpx.AsyncClient(transport=httpx.MockTransport(_not_found)) as client:
        yield ProfessionalFinderAgent(session, http_client=client)


def _names(listings):
    return [p.company_name for p in listings]


class TestSearchParams:
    @pytest.mark.parametrize(
        "risk_level,emergency_level,max_response_time,min_rating",
        [
            ("critical", EmergencyLevel.critical, 60, 4.5),
            ("high", EmergencyLevel.high, 120, 4.0),
            ("medium", EmergencyLevel.medium, 480, 3.5),
            (None, EmergencyLevel.medium, 480, 3.5),
            ("moderate", EmergencyLevel.low, None, 3.0),
            ("low", EmergencyLevel.low, None, 3.0),
        ],
    )
    def test_search_params_for_risk(self, risk_level, emergency_level, max_response_time, min_rating):
        params = search_params_for_risk(risk_level, ProfessionalSearchParams(zip_code="10001"))

        assert params.zip_code == "10001"
        assert params.service_type == "structural-engineering"
        assert params.emergency_level == emergency_level
        assert params.max_response_time == max_response_time
        assert params.min_rating == min_rating

    def test_has_coordinates(self):
        assert ProfessionalSearchParams(latitude=40.7, longitude=-74.0).has_coordinates is True
        assert ProfessionalSearchParams(latitude=40.7).has_coordinates is False


class TestEmergencyMessage:
    @pytest.mark.parametrize("level", [EmergencyLevel.critical, "high", EmergencyLevel.medium])
    def test_known_levels(self, level):
        assert get_emergency_recommendation_message(level) == EMERGENCY_MESSAGES[EmergencyLevel(level)]

    @pytest.mark.parametrize("level", [EmergencyLevel.low, None, "urgent"])
    def test_other_levels(self, level):
        assert get_emergency_recommendation_message(level) == DEFAULT_EMERGENCY_MESSAGE


class TestSearchProfessionals:
    async def test_by_zip_code(self, finder, city):
        listings = await finder.search_professionals(ProfessionalSearchParams(zip_code="10001"))

        assert _names(listings) == ["Empire Structural", "Hudson Engineering"]
        assert listings[0].primary_city.city_name == "New York"
        assert listings[0].distance is None

    async def test_by_city_id(self, finder, city):
        listings = await finder.search_professionals(ProfessionalSearchParams(city_id=city.id))

        assert _names(listings) == ["Empire Structural", "Hudson Engineering"]

    async def test_by_coordinates_sets_distance(self, finder, city):
        listings = await finder.search_professionals(ProfessionalSearchParams(latitude=40.7484, longitude=-73.9857))

        assert _names(listings) == ["Empire Structural", "Hudson Engineering"]
        assert listings[0].distance == pytest.approx(0.6)

    async def test_unknown_zip_code(self, finder, city):
        assert await finder.search_professionals(ProfessionalSearchParams(zip_code="90210")) == []

    async def test_no_location(self, finder, city):
        assert await finder.search_professionals(ProfessionalSearchParams()) == []


class TestFindProfessionalsForAnalysis:
    async def test_search_is_logged(self, finder, city, analysis, user_id, session):
        listings = await finder.find_professionals_for_analysis(
            analysis.id, ProfessionalSearchParams(zip_code="10001"), user_id=user_id
        )

        assert len(listings) == 2
        logs = await ProfessionalSearchLogRepository(session).list()
        assert len(logs) == 1
        assert logs[0].search_query == "structural-engineer"
        assert logs[0].zip_code == "10001"
        assert logs[0].results_count == 2
        assert logs[0].user_id == user_id
        assert logs[0].search_context["crack_analysis_id"] == analysis.id
        assert logs[0].search_context["emergency_level"] == "low"

    async def test_unknown_analysis(self, finder, city):
        with pytest.raises(AnalysisNotFoundError):
            await finder.find_professionals_for_analysis("missing", ProfessionalSearchParams(zip_code="10001"))


class TestProfessionalDetails:
    async def test_details(self, finder, city):
        listings = await finder.search_professionals(ProfessionalSearchParams(city_id=city.id))

        details = await finder.get_professional_details(listings[0].id)

        assert details.company_name == "Empire Structural"
        assert details.primary_city.state_code == "NY"

    async def test_unknown_professional(self, finder):
        with pytest.raises(ProfessionalNotFoundError):
            await finder.get_professional_details(9999)


class TestFormatProfessional:
    def test_full_listing(self):
        listing = ProfessionalListing(
            id=1,
            company_name="Empire Structural",
            rating=4.9,
            review_count=120,
            is_top_pro=True,
            is_licensed=True,
            response_time_minutes=30,
            estimate_fee_amount=150,
            estimate_fee_waived_if_hired=True,
            phone="555-0100",
            website_url="https://mock-empire.test",
            primary_city={"city_name": "New York", "state_code": "NY"},
        )

        lines = format_professional_for_display(listing).split("\n")

        assert lines == [
            "**Empire Structural**",
            "⭐ 4.9/5.0 (120 reviews) 🏆 Top Pro 📜 Licensed",
            "📍 Service area: New York, NY",
            "⏱️ Responds in about 30 minutes",
            "💰 On-site estimate: $150 (waived if hired)",
            "",
            "Professional structural engineering services",
            "",
            "📞 Contact: 555-0100",
            "🌐 Website: https://mock-empire.test",
        ]

    def test_sparse_listing(self):
        text = format_professional_for_display(ProfessionalListing(id=2, company_name="Hudson Engineering"))

        assert "No rating yet" in text
        assert "📍 Service area: Unknown, Unknown" in text
        assert "⏱️ Response time unknown" in text
        assert "💰 On-site estimate: Free" in text
        assert "📞 Contact: Contact through the platform" in text
