"""Agents that contribute to a chat answer."""

from .inspection import InspectionAgent
from .procurement import ProcurementAgent
from .professional_finder import ProfessionalFinderAgent, ProfessionalSearchParams
from .recommendation import RecommendationAgent

__all__ = [
    "InspectionAgent",
    "ProcurementAgent",
    "ProfessionalFinderAgent",
    "ProfessionalSearchParams",
    "RecommendationAgent",
]
