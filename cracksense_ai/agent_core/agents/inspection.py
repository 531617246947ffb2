"""Inspection agent: crack type, severity and risk from photos or a description."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic_ai import Agent
from pydantic_ai.models import Model

from cracksense_ai.core.models.domain import AgentType, CrackFinding, InspectionResult, Severity
from cracksense_ai.core.monitoring import log_llm_call

from ..model_provider import create_agent_model, image_parts

logger = logging.getLogger(__name__)

DESCRIPTION_CONFIDENCE_FACTOR = 0.6
DESCRIPTION_CONFIDENCE_CAP = 60.0

IMAGE_SYSTEM_PROMPT = """\
You are a structural engineering expert specializing in crack analysis. Analyze the provided images and \
user description to assess crack severity and provide recommendations.

Report:
1. Crack type (hairline, settlement, structural, thermal, ...)
2. Severity: low, moderate or high
3. Risk level: low, moderate or high
4. Confidence in your assessment, 0 to 100
5. Specific findings for each crack observed
6. Recommended actions

Guidelines:
- Low severity: cosmetic cracks, hairline, no structural concern
- Moderate severity: visible cracks that need monitoring or minor repair
- High severity: structural concerns requiring professional assessment
"""

DESCRIPTION_SYSTEM_PROMPT = """\
You are a structural engineering expert. Based on the user's description of cracks, provide a preliminary \
assessment. You cannot see the cracks, so keep your recommendations conservative and report the same \
fields as an image-based inspection.
"""


def safe_default_result() -> InspectionResult:
    """Conservative result used whenever an inspection cannot be completed."""
    return InspectionResult(
        crack_type="Unknown",
        severity=Severity.moderate,
        risk_level=Severity.moderate,
        confidence=30,
        findings=[
            CrackFinding(
                type="Unknown crack",
                severity="Moderate",
                description="Unable to analyze crack details. Professional inspection recommended.",
            )
        ],
        recommendations=[
            "Professional inspection recommended due to analysis limitations",
            "Monitor crack for changes",
            "Document crack with photos and measurements",
        ],
    )


class InspectionAgent:
    """
    Assess cracks from photos or from a text description.

    Args:
        model: Pydantic AI model; built from settings when omitted. Without a
            model every call returns the safe default.
    """

    def __init__(self, model: Optional[Model] = None) -> None:
        self._model = model
        self._image_agent: Optional[Agent[None, InspectionResult]] = None
        self._description_agent: Optional[Agent[None, InspectionResult]] = None

    def _resolve_model(self) -> Optional[Model]:
        if self._model is None:
            self._model = create_agent_model(temperature=0.1)
        return self._model

    def _agent(self, from_images: bool) -> Optional[Agent[None, InspectionResult]]:
        model = self._resolve_model()
        if model is None:
            return None
        if from_images:
            if self._image_agent is None:
                self._image_agent = Agent(model, output_type=InspectionResult, system_prompt=IMAGE_SYSTEM_PROMPT)
            return self._image_agent
        if self._description_agent is None:
            self._description_agent = Agent(
                model, output_type=InspectionResult, system_prompt=DESCRIPTION_SYSTEM_PROMPT
            )
        return self._description_agent

    async def analyze_images(self, images: Sequence[str], description: Optional[str] = None) -> InspectionResult:
        """
        Inspect crack photos.

        Args:
            images: Image URLs or ``data:`` URLs
            description: Optional text from the user

        Returns:
            The inspection result, or the safe default on any failure
        """
        agent = self._agent(from_images=True)
        if agent is None:
            logger.warning("No inspection model configured, returning safe default")
            return safe_default_result()

        prompt: List = [description or "Please analyze these crack images", *image_parts(images)]
        try:
            result = await agent.run(prompt)
        except Exception as e:
            logger.error(f"Inspection agent error: {e}")
            log_llm_call(getattr(agent.model, "model_name", "unknown"), AgentType.inspection.value, False)
            return safe_default_result()

        log_llm_call(getattr(agent.model, "model_name", "unknown"), AgentType.inspection.value, True)
        return result.output

    async def analyze_from_description(self, description: str) -> InspectionResult:
        """
        Inspect from a text description only.

        Confidence is scaled down and capped because nothing was seen.
        """
        agent = self._agent(from_images=False)
        if agent is None:
            logger.warning("No inspection model configured, returning safe default")
            return safe_default_result()

        try:
            result = await agent.run(f"Analyze this crack description: {description}")
        except Exception as e:
            logger.error(f"Description analysis error: {e}")
            return safe_default_result()

        output = result.output
        output.confidence = min(output.confidence * DESCRIPTION_CONFIDENCE_FACTOR, DESCRIPTION_CONFIDENCE_CAP)
        return output

    @staticmethod
    def get_next_recommended_agent(result: InspectionResult) -> Optional[AgentType]:
        """Pick the agent that should follow an inspection."""
        if result.risk_level == Severity.high or result.severity == Severity.high:
            return AgentType.professional_finder
        if result.risk_level in (Severity.low, Severity.moderate):
            return AgentType.recommendation
        return None
