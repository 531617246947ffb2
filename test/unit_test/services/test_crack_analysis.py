"""Unit tests for crack analysis categorization and formatting."""

from __future__ import annotations

import pytest

from cracksense_ai.core.database.entities.crack_cause_templates import CrackCauseTemplate
from cracksense_ai.core.models.domain import CrackCauseCategory, CrackPattern, Severity
from cracksense_ai.services.crack_analysis import (
    DEFAULT_IMMEDIATE_ACTIONS,
    DEFAULT_LONG_TERM,
    HIGH_SEVERITY_MONITORING,
    LOW_SEVERITY_MONITORING,
    CrackCauseSection,
    UserContext,
    categorize_crack_analysis,
    format_crack_cause,
    generate_personalized_recommendations,
    get_crack_cause_templates,
)


def _template(category: str, recommendations=None) -> CrackCauseTemplate:
    return CrackCauseTemplate(
        category=category,
        title=f"{category} cracks",
        description=f"Cracks caused by {category}",
        standard_recommendations=recommendations or [],
    )


class TestCategorizeCrackAnalysis:
    @pytest.mark.parametrize(
        "text,category,pattern,severity",
        [
            (
                "Diagonal crack at window corner, typical of foundation settlement.",
                CrackCauseCategory.settlement,
                CrackPattern.diagonal,
                Severity.moderate,
            ),
            (
                "Minor hairline crack caused by seasonal temperature changes, cosmetic only.",
                CrackCauseCategory.thermal,
                CrackPattern.hairline,
                Severity.low,
            ),
            (
                "Wide horizontal crack in a load bearing wall.",
                CrackCauseCategory.structural,
                CrackPattern.horizontal,
                Severity.high,
            ),
            ("Crack in plaster", CrackCauseCategory.other, CrackPattern.random, Severity.moderate),
        ],
    )
    def test_keyword_rules(self, text, category, pattern, severity):
        result = categorize_crack_analysis(text, [], [])

        assert result.category == category
        assert result.crack_type == pattern
        assert result.severity == severity
        assert result.template is None

    @pytest.mark.parametrize(
        "findings,severity",
        [
            ([{"severity": "High"}, {"severity": "Low"}], Severity.high),
            ([{"severity": "Low"}, {"severity": "Low"}], Severity.low),
            ([{"severity": "Low"}, {"severity": "Medium"}], Severity.moderate),
        ],
    )
    def test_findings_override_severity(self, findings, severity):
        assert categorize_crack_analysis("Crack in plaster", findings, []).severity == severity

    def test_matching_template_is_attached(self):
        templates = [_template("thermal"), _template("settlement", ["Check foundation"])]

        result = categorize_crack_analysis("Foundation movement", [], templates)

        assert result.template["category"] == "settlement"
        assert result.template["standard_recommendations"] == ["Check foundation"]


class TestPersonalizedRecommendations:
    def test_high_severity_with_context(self):
        template = _template("moisture", ["Fix the leak", "Dry the wall", "Seal the crack", "Repaint"])
        context = UserContext(building_age="old farmhouse", environmental_factors="moisture from basement")

        plan = generate_personalized_recommendations(template, Severity.high, context)

        assert plan.immediate_actions == [
            "Immediate professional structural assessment required",
            "Fix the leak",
            "Dry the wall",
            "Address moisture sources immediately",
        ]
        assert plan.long_term_recommendations == [
            "Seal the crack",
            "Repaint",
            "Consider comprehensive building condition assessment due to age",
            "Implement long-term moisture control strategy",
        ]
        assert plan.consultation_needed is True
        assert plan.monitoring_requirements == HIGH_SEVERITY_MONITORING

    def test_no_template_uses_defaults(self):
        plan = generate_personalized_recommendations(None, "low")

        assert plan.immediate_actions == DEFAULT_IMMEDIATE_ACTIONS
        assert plan.long_term_recommendations == DEFAULT_LONG_TERM
        assert plan.consultation_needed is False
        assert plan.monitoring_requirements == LOW_SEVERITY_MONITORING

    def test_template_as_dict(self):
        plan = generate_personalized_recommendations(
            {"standard_recommendations": ["Caulk the gap"]}, Severity.moderate
        )

        assert plan.immediate_actions == ["Caulk the gap"]
        assert plan.long_term_recommendations == DEFAULT_LONG_TERM


class TestFormatCrackCause:
    def test_splits_numbered_sections(self):
        sections = format_crack_cause("1) VISUAL ASSESSMENT: Thin crack.\n2) RISK ASSESSMENT: Cosmetic only.")

        assert sections == [
            CrackCauseSection(header="1) VISUAL ASSESSMENT:", content="Thin crack."),
            CrackCauseSection(header="2) RISK ASSESSMENT:", content="Cosmetic only."),
        ]

    def test_keeps_text_before_first_header(self):
        sections = format_crack_cause("Overview text.\n1) CAUSE: Settlement.")

        assert sections == [
            CrackCauseSection(header="", content="Overview text."),
            CrackCauseSection(header="1) CAUSE:", content="Settlement."),
        ]

    def test_plain_text_is_one_section(self):
        assert format_crack_cause("Just a plain description") == [
            CrackCauseSection(header="", content="Just a plain description")
        ]

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value):
        assert format_crack_cause(value) == []


async def test_get_crack_cause_templates(session):
    session.add_all([_template("vibration"), _template("moisture")])
    await session.commit()

    templates = await get_crack_cause_templates(session)

    assert [t.category for t in templates] == ["moisture", "vibration"]
