"""Domain models exchanged between the agents, the services and the API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from ..base import BaseSchema
from .enums import AgentIntent, AgentType, PrimaryRecommendation, Severity


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class CrackFinding(BaseSchema):
    """One observation reported by the inspection step."""

    type: str
    severity: str
    description: str


class InspectionResult(BaseSchema):
    """
    Structured result of a crack inspection.

    ``confidence`` is a percentage and is clamped into 0..100 so a model that
    answers 0.85 or 120 still produces a valid result.
    """

    crack_type: str
    severity: Severity
    risk_level: Severity
    confidence: float = Field(ge=0, le=100)
    findings: List[CrackFinding]
    recommendations: List[str]

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        return max(0.0, min(100.0, float(value)))


class RecommendationResult(BaseSchema):
    """Repair plan produced by the recommendation step."""

    primary_recommendation: PrimaryRecommendation
    reasoning: str
    steps: List[str]
    timeframe: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class ProcurementProduct(BaseSchema):
    """A catalog product suggested for a repair."""

    id: str
    title: str
    price: float
    rating: float
    url: str
    image_url: Optional[str] = None
    reason: str


class ProcurementResult(BaseSchema):
    """Products found by the procurement step."""

    products: List[ProcurementProduct]
    total_recommendations: int
    category: str


class AgentResponse(BaseSchema):
    """What one agent contributed to a flow."""

    agent_type: AgentType
    status: Literal["success", "error"]
    data: Optional[Any] = None
    message: str
    timestamp: datetime = Field(default_factory=_utc_now)


class CoordinatorResult(BaseSchema):
    """Outcome of routing one chat message through the agent system."""

    is_agent_triggered: bool
    intent: AgentIntent
    final_response: str = ""
    agent_responses: List[AgentResponse] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class HomeownerCrackAnalysis(BaseSchema):
    """Professional assessment returned by the homeowner photo analysis."""

    crack_cause: str
    repair_steps: List[str]
    risk_level: Severity
    crack_type: str
    crack_width: str
    crack_length: str

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_risk(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value
