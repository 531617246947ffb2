"""Recommendation agent: DIY, monitor or call a professional."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from pydantic import Field
from pydantic_ai import Agent
from pydantic_ai.models import Model

from cracksense_ai.core.models import BaseSchema
from cracksense_ai.core.models.domain import (
    AgentType,
    InspectionResult,
    PrimaryRecommendation,
    RecommendationResult,
    SkillLevel,
)
from cracksense_ai.core.monitoring import log_llm_call

from ..model_provider import create_agent_model

logger = logging.getLogger(__name__)

PROCUREMENT_STEP_WORDS = ("material", "product", "sealant", "filler")

RECOMMENDATION_PROMPT = """\
You are a structural repair expert providing practical recommendations for crack repair.

Decision guidelines:
- diy: low severity cracks, cosmetic issues, and the user has an appropriate skill level
- monitor: moderate severity, stable cracks that need observation
- professional: high severity, structural concerns, or the user lacks confidence

Always prioritize safety. When in doubt, recommend professional consultation.
"""

QUICK_ADVICE_PROMPT = """\
You are a repair expert providing quick advice for crack-related questions. Keep advice practical and \
safety-focused. When specific crack details are unknown, err on the side of caution.
"""


class RecommendationDraft(BaseSchema):
    """Model answer before the conservative defaults are filled in."""

    primary_recommendation: Optional[PrimaryRecommendation] = None
    reasoning: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    timeframe: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    def complete(self) -> RecommendationResult:
        return RecommendationResult(
            primary_recommendation=self.primary_recommendation or PrimaryRecommendation.professional,
            reasoning=self.reasoning or "Professional assessment recommended for safety",
            steps=self.steps or ["Consult with a structural engineer"],
            timeframe=self.timeframe or "As soon as possible",
            warnings=self.warnings or ["Safety first - when in doubt, seek professional help"],
        )


def conservative_recommendation() -> RecommendationResult:
    """Plan returned when no recommendation could be generated."""
    return RecommendationResult(
        primary_recommendation=PrimaryRecommendation.professional,
        reasoning="Unable to generate specific recommendations. Professional consultation advised for safety.",
        steps=[
            "Document the crack with photos and measurements",
            "Contact a structural engineer or qualified contractor",
            "Avoid DIY repairs until professional assessment is complete",
        ],
        timeframe="Within 1-2 weeks",
        warnings=["Do not attempt repairs without professional guidance"],
    )


class RecommendationAgent:
    """
    Turn an inspection or a question into a repair plan.

    Args:
        model: Pydantic AI model; built from settings when omitted. Without a
            model every call returns the conservative professional plan.
    """

    def __init__(self, model: Optional[Model] = None) -> None:
        self._model = model
        self._agents: dict[str, Agent[None, RecommendationDraft]] = {}

    def _agent(self, system_prompt: str) -> Optional[Agent[None, RecommendationDraft]]:
        if self._model is None:
            self._model = create_agent_model(temperature=0.2)
            if self._model is None:
                return None
        if system_prompt not in self._agents:
            self._agents[system_prompt] = Agent(
                self._model, output_type=RecommendationDraft, system_prompt=system_prompt
            )
        return self._agents[system_prompt]

    async def _run(self, system_prompt: str, prompt: str) -> RecommendationResult:
        agent = self._agent(system_prompt)
        if agent is None:
            logger.warning("No recommendation model configured, returning conservative plan")
            return conservative_recommendation()

        model_name = getattr(agent.model, "model_name", "unknown")
        try:
            result = await agent.run(prompt)
        except Exception as e:
            logger.error(f"Recommendation agent error: {e}")
            log_llm_call(model_name, AgentType.recommendation.value, False)
            return conservative_recommendation()

        log_llm_call(model_name, AgentType.recommendation.value, True)
        return result.output.complete()

    async def generate_recommendations(
        self,
        inspection: Optional[InspectionResult] = None,
        user_query: Optional[str] = None,
        skill_level: SkillLevel = SkillLevel.beginner,
    ) -> RecommendationResult:
        """
        Build a repair plan from an inspection and the user's question.

        Args:
            inspection: Inspection result, if one exists
            user_query: The user's question
            skill_level: Self-reported DIY skill

        Returns:
            The repair plan with defaults filled in
        """
        if inspection is not None:
            analysis_data = json.dumps(
                inspection.model_dump(
                    mode="json", include={"crack_type", "severity", "risk_level", "confidence", "findings"}
                ),
                indent=2,
            )
        else:
            analysis_data = "No inspection data available"

        prompt = (
            f"Analysis data:\n{analysis_data}\n\n"
            f"User query: {user_query or 'General repair guidance needed'}\n"
            f"User skill level: {SkillLevel(skill_level).value}"
        )
        return await self._run(RECOMMENDATION_PROMPT, prompt)

    async def generate_quick_advice(self, query: str) -> RecommendationResult:
        """Quick advice for a question without inspection data."""
        return await self._run(QUICK_ADVICE_PROMPT, f"User question: {query}")

    @staticmethod
    def should_trigger_procurement(result: RecommendationResult) -> bool:
        """Whether the plan calls for buying repair products."""
        if result.primary_recommendation == PrimaryRecommendation.diy:
            return True
        if result.primary_recommendation == PrimaryRecommendation.monitor:
            return any(word in step.lower() for step in result.steps for word in PROCUREMENT_STEP_WORDS)
        return False

    @staticmethod
    def generate_procurement_query(
        result: RecommendationResult, inspection: Optional[InspectionResult] = None
    ) -> str:
        """Catalog search query for a repair plan."""
        severity = inspection.severity.value if inspection is not None else "moderate"
        crack_type = inspection.crack_type if inspection is not None and inspection.crack_type else "general crack"

        if result.primary_recommendation == PrimaryRecommendation.diy:
            return f"DIY repair materials for {severity} severity {crack_type} repair"
        if result.primary_recommendation == PrimaryRecommendation.monitor:
            return f"Monitoring and minor repair materials for {crack_type}"
        return "General crack repair materials"
