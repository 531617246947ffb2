"""Domain enums for crack inspection, credits and the agent router."""

from __future__ import annotations

from enum import Enum


class AgentIntent(str, Enum):
    """
    What a chat message is asking for.

    The intent selects which agent flow the coordinator runs.
    """

    general_chat = "general_chat"
    crack_inspection = "crack_inspection"
    repair_recommendation = "repair_recommendation"
    product_procurement = "product_procurement"
    monitoring_request = "monitoring_request"
    professional_finder = "professional_finder"


class AgentType(str, Enum):
    """Agents that can contribute a response to a flow."""

    inspection = "inspection"
    recommendation = "recommendation"
    procurement = "procurement"
    monitoring = "monitoring"
    professional_finder = "professional_finder"


class AgentStatus(str, Enum):
    """Progress of the agent system while it handles one message."""

    idle = "idle"
    analyzing_intent = "analyzing_intent"
    running_agent = "running_agent"
    completed = "completed"
    error = "error"


class Severity(str, Enum):
    """Severity of a crack, also used as its risk level."""

    low = "low"
    moderate = "moderate"
    high = "high"


RiskLevel = Severity


class PrimaryRecommendation(str, Enum):
    """Top-level course of action for a repair."""

    diy = "diy"
    monitor = "monitor"
    professional = "professional"


class SkillLevel(str, Enum):
    """Self-reported DIY skill of the user."""

    beginner = "beginner"
    intermediate = "intermediate"
    expert = "expert"


class ProductSkillLevel(str, Enum):
    """Skill a catalog product requires."""

    beginner = "beginner"
    intermediate = "intermediate"
    professional = "professional"

    @classmethod
    def from_user_skill(cls, skill: "SkillLevel | str | None") -> "ProductSkillLevel | None":
        """Map a user skill level onto the catalog scale (expert -> professional)."""
        if skill is None:
            return None
        value = skill.value if isinstance(skill, SkillLevel) else str(skill)
        if value == SkillLevel.expert.value:
            return cls.professional
        try:
            return cls(value)
        except ValueError:
            return None


class TransactionType(str, Enum):
    """Direction of a credit ledger entry."""

    deduct = "deduct"
    add = "add"
    refund = "refund"
    initial = "initial"


class RecommendationType(str, Enum):
    """
    How a product recommendation was produced.

    ``diy_focused`` is a request mode only; its results are stored as
    ``analysis_based``.
    """

    analysis_based = "analysis_based"
    chat_based = "chat_based"
    follow_up = "follow_up"
    diy_focused = "diy_focused"


class InteractionType(str, Enum):
    """User interaction with a recommended product."""

    view = "view"
    click = "click"
    purchase = "purchase"


class EmergencyLevel(str, Enum):
    """Urgency of a professional search."""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class CrackCauseCategory(str, Enum):
    """Root cause family of a crack."""

    settlement = "settlement"
    thermal = "thermal"
    moisture = "moisture"
    structural = "structural"
    vibration = "vibration"
    material_defect = "material_defect"
    other = "other"


class CrackPattern(str, Enum):
    """Visual pattern of a crack."""

    horizontal = "horizontal"
    vertical = "vertical"
    diagonal = "diagonal"
    stepped = "stepped"
    hairline = "hairline"
    wide = "wide"
    random = "random"
