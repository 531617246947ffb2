"""Domain models and enums for CrackSense-AI.

These types are shared between:

- the agent layer (intent classification, inspection, recommendation,
  procurement and professional-finder steps),
- the domain services (credits, homeowner analysis, product recommendations),
- the API schemas that expose their results.
"""

from .enums import (
    AgentIntent,
    AgentStatus,
    AgentType,
    CrackCauseCategory,
    CrackPattern,
    EmergencyLevel,
    InteractionType,
    PrimaryRecommendation,
    ProductSkillLevel,
    RecommendationType,
    RiskLevel,
    Severity,
    SkillLevel,
    TransactionType,
)
from .models import (
    AgentResponse,
    CoordinatorResult,
    CrackFinding,
    HomeownerCrackAnalysis,
    InspectionResult,
    ProcurementProduct,
    ProcurementResult,
    RecommendationResult,
)

__all__ = [
    "AgentIntent",
    "AgentResponse",
    "AgentStatus",
    "AgentType",
    "CoordinatorResult",
    "CrackCauseCategory",
    "CrackFinding",
    "CrackPattern",
    "EmergencyLevel",
    "HomeownerCrackAnalysis",
    "InspectionResult",
    "InteractionType",
    "PrimaryRecommendation",
    "ProcurementProduct",
    "ProcurementResult",
    "ProductSkillLevel",
    "RecommendationResult",
    "RecommendationType",
    "RiskLevel",
    "Severity",
    "SkillLevel",
    "TransactionType",
]
