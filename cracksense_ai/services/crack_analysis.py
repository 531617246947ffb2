"""
Crack analysis utilities.

Keyword rules that categorize a free-text analysis into a cause category,
crack pattern and severity, the personalised follow-up plan built from the
matching cause template, and the splitting of a long cause write-up into
titled sections.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.entities.crack_cause_templates import CrackCauseTemplate
from cracksense_ai.core.database.repositories.crack_cause_templates import CrackCauseTemplateRepository
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import CrackCauseCategory, CrackPattern, Severity

logger = get_logger(__name__)

_SECTION_HEADER = re.compile(r"(\d+\)\s+[A-Z\s]+:)")

# Checked in order; the first category with a matching keyword wins.
_CATEGORY_KEYWORDS: List[tuple[CrackCauseCategory, tuple[str, ...]]] = [
    (CrackCauseCategory.settlement, ("settlement", "foundation", "uneven", "sinking")),
    (CrackCauseCategory.thermal, ("thermal", "temperature", "expansion", "contraction", "seasonal", "weather")),
    (CrackCauseCategory.moisture, ("moisture", "water", "damp", "wet", "leak", "freeze")),
    (CrackCauseCategory.structural, ("structural", "load", "beam", "support", "bearing", "stress")),
    (CrackCauseCategory.vibration, ("vibration", "traffic", "construction", "machinery", "seismic", "earthquake")),
    (
        CrackCauseCategory.material_defect,
        ("material", "defect", "quality", "aging", "deterioration", "construction"),
    ),
]

_PATTERN_KEYWORDS: List[tuple[CrackPattern, tuple[str, ...]]] = [
    (CrackPattern.horizontal, ("horizontal",)),
    (CrackPattern.vertical, ("vertical",)),
    (CrackPattern.diagonal, ("diagonal",)),
    (CrackPattern.stepped, ("step", "stair")),
    (CrackPattern.hairline, ("hairline", "fine")),
    (CrackPattern.wide, ("wide", "large")),
]

_HIGH_SEVERITY_WORDS = ("severe", "critical", "immediate", "urgent", "structural", "unsafe")
_LOW_SEVERITY_WORDS = ("minor", "cosmetic", "surface", "hairline", "no concern")

DEFAULT_MONITORING = "Monitor crack width and length monthly for any changes"
HIGH_SEVERITY_MONITORING = "Daily monitoring required - measure and photograph cracks"
LOW_SEVERITY_MONITORING = "Quarterly monitoring sufficient - check for any growth or new cracks"
DEFAULT_IMMEDIATE_ACTIONS = [
    "Document current crack condition with photos and measurements",
    "Monitor crack for any immediate changes or growth",
]
DEFAULT_LONG_TERM = [
    "Schedule periodic inspection by qualified professional",
    "Address underlying causes if identified",
    "Consider preventive maintenance measures",
]


class CrackCategorization(BaseModel):
    """Category, pattern and severity derived from an analysis text."""

    category: CrackCauseCategory
    crack_type: CrackPattern
    severity: Severity
    template: Optional[Dict] = None


@dataclass
class UserContext:
    """What the user told us about the building."""

    question: Optional[str] = None
    additional_info: Optional[str] = None
    building_age: Optional[str] = None
    environmental_factors: Optional[str] = None


@dataclass
class PersonalizedRecommendations:
    immediate_actions: List[str] = field(default_factory=list)
    long_term_recommendations: List[str] = field(default_factory=list)
    monitoring_requirements: str = DEFAULT_MONITORING
    consultation_needed: bool = False


@dataclass
class CrackCauseSection:
    header: str
    content: str


def _categorize(text: str) -> CrackCauseCategory:
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(word in text for word in keywords):
            return category
        if category == CrackCauseCategory.settlement and "diagonal" in text and "corner" in text:
            return category
    return CrackCauseCategory.other


def _pattern(text: str) -> CrackPattern:
    for pattern, keywords in _PATTERN_KEYWORDS:
        if any(word in text for word in keywords):
            return pattern
    return CrackPattern.random


def categorize_crack_analysis(
    ai_response: str,
    findings: Sequence[Dict],
    templates: Sequence[CrackCauseTemplate],
) -> CrackCategorization:
    """
    Categorize a free-text crack analysis.

    Keyword rules decide the category, pattern and severity. Findings then
    override the severity: any ``High`` finding makes it high, and findings
    that are all ``Low`` make it low.

    Args:
        ai_response: The analysis text
        findings: Finding dicts with a ``severity`` key
        templates: Crack cause templates to pick the matching one from

    Returns:
        CrackCategorization with the matching template (as a dict) or None
    """
    text = ai_response.lower()
    category = _categorize(text)
    crack_type = _pattern(text)

    if any(word in text for word in _HIGH_SEVERITY_WORDS) or category == CrackCauseCategory.structural:
        severity = Severity.high
    elif any(word in text for word in _LOW_SEVERITY_WORDS):
        severity = Severity.low
    else:
        severity = Severity.moderate

    if findings:
        severities = [f.get("severity") for f in findings]
        if "High" in severities:
            severity = Severity.high
        elif all(s == "Low" for s in severities):
            severity = Severity.low

    template = next((t for t in templates if t.category == category.value), None)
    return CrackCategorization(
        category=category,
        crack_type=crack_type,
        severity=severity,
        template=template.model_dump() if template is not None else None,
    )


def generate_personalized_recommendations(
    template: Optional[CrackCauseTemplate | Dict],
    severity: Severity | str,
    context: Optional[UserContext] = None,
) -> PersonalizedRecommendations:
    """
    Build an action plan from a cause template, the severity and user context.

    The first two standard recommendations of the template are immediate
    actions; the rest are long-term.
    """
    context = context or UserContext()
    standard: List[str] = []
    if isinstance(template, dict):
        standard = list(template.get("standard_recommendations") or [])
    elif template is not None:
        standard = list(template.standard_recommendations or [])

    plan = PersonalizedRecommendations(
        immediate_actions=standard[:2],
        long_term_recommendations=standard[2:],
    )

    severity = Severity(severity)
    if severity == Severity.high:
        plan.immediate_actions.insert(0, "Immediate professional structural assessment required")
        plan.consultation_needed = True
        plan.monitoring_requirements = HIGH_SEVERITY_MONITORING
    elif severity == Severity.low:
        plan.monitoring_requirements = LOW_SEVERITY_MONITORING

    if context.building_age and "old" in context.building_age:
        plan.long_term_recommendations.append("Consider comprehensive building condition assessment due to age")

    if context.environmental_factors and "moisture" in context.environmental_factors:
        plan.immediate_actions.append("Address moisture sources immediately")
        plan.long_term_recommendations.append("Implement long-term moisture control strategy")

    if not plan.immediate_actions:
        plan.immediate_actions = list(DEFAULT_IMMEDIATE_ACTIONS)
    if not plan.long_term_recommendations:
        plan.long_term_recommendations = list(DEFAULT_LONG_TERM)

    logger.debug(f"Personalized recommendations: severity={severity.value}, consultation={plan.consultation_needed}")
    return plan


def format_crack_cause(crack_cause: Optional[str]) -> List[CrackCauseSection]:
    """
    Split a cause write-up on ``N) UPPER CASE:`` headers.

    Text before the first header becomes a headerless section. A write-up
    without headers is returned as one headerless section.
    """
    if not crack_cause or not crack_cause.strip():
        return []

    parts = [part for part in _SECTION_HEADER.split(crack_cause) if part.strip()]
    sections: List[CrackCauseSection] = []
    index = 0
    while index < len(parts):
        part = parts[index]
        if _SECTION_HEADER.fullmatch(part):
            following = parts[index + 1] if index + 1 < len(parts) else None
            if following is not None and not _SECTION_HEADER.fullmatch(following):
                sections.append(CrackCauseSection(header=part.strip(), content=following.strip()))
                index += 2
                continue
        elif sections or index == 0:
            sections.append(CrackCauseSection(header="", content=part.strip()))
        index += 1

    if not any(section.header for section in sections):
        return [CrackCauseSection(header="", content=crack_cause.strip())]
    return sections


async def get_crack_cause_templates(session: AsyncSession) -> List[CrackCauseTemplate]:
    """All crack cause templates ordered by category."""
    return await CrackCauseTemplateRepository(session).list_ordered()
