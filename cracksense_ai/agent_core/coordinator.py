"""
Agent coordinator.

Classifies a chat message, runs the agent flow registered for its intent and
renders the agents' results as one markdown answer. Flow failures never
propagate: they come back as a non-triggered result with an error message.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cracksense_ai.core.models.domain import (
    AgentIntent,
    AgentResponse,
    AgentType,
    CoordinatorResult,
    EmergencyLevel,
    InspectionResult,
    RecommendationResult,
)
from cracksense_ai.core.monitoring import log_agent_flow

from .agent_registry import AgentRegistry, FlowContext
from .agents.inspection import InspectionAgent
from .agents.procurement import ProcurementAgent
from .agents.professional_finder import (
    ProfessionalFinderAgent,
    ProfessionalSearchParams,
    get_emergency_recommendation_message,
)
from .agents.recommendation import RecommendationAgent
from .intent_classifier import IntentClassifier

logger = logging.getLogger(__name__)

ZIP_CODE_PATTERN = re.compile(r"\b\d{5}(?:-\d{4})?\b")

FALLBACK_FINAL_RESPONSE = "Analysis complete. Please see the detailed results above."
ASK_FOR_ZIP_MESSAGE = (
    "To find structural engineers near you, please share your 5-digit US ZIP code "
    "(for example: 'find an engineer near 10001')."
)

FLOW_ERRORS = {
    AgentIntent.crack_inspection: "Inspection analysis failed",
    AgentIntent.repair_recommendation: "Recommendation generation failed",
    AgentIntent.product_procurement: "Product recommendation failed",
    AgentIntent.professional_finder: "Professional search failed",
}
ROUTING_ERROR = "Failed to process message with agent system"


def extract_zip_code(text: str) -> Optional[str]:
    """First US zip code in a message, without its +4 extension."""
    match = ZIP_CODE_PATTERN.search(text)
    return match.group(0).split("-")[0] if match else None


def _response(agent_type: AgentType, data: Any, message: str) -> AgentResponse:
    return AgentResponse(agent_type=agent_type, status="success", data=data, message=message)


def generate_final_response(agent_responses: List[AgentResponse]) -> str:
    """Render agent results as markdown sections."""
    sections: List[str] = []
    for agent_response in agent_responses:
        data: Optional[Dict[str, Any]] = agent_response.data
        if not data:
            continue
        if agent_response.agent_type == AgentType.inspection:
            sections.append(
                "## Crack Analysis Complete\n\n"
                f"**Type:** {data['crack_type']}\n"
                f"**Severity:** {data['severity']}\n"
                f"**Risk Level:** {data['risk_level']}\n\n"
            )
        elif agent_response.agent_type == AgentType.recommendation:
            sections.append(
                "## Repair Recommendations\n\n"
                f"**Recommended Action:** {data['primary_recommendation'].upper()}\n\n"
                f"{data['reasoning']}\n\n"
            )
        elif agent_response.agent_type == AgentType.procurement:
            sections.append(
                "## Product Recommendations\n\n"
                f"Found {data['total_recommendations']} suitable products in {data['category']}.\n\n"
            )
        elif agent_response.agent_type == AgentType.professional_finder:
            section = "## Professional Help\n\n" + f"{data['message']}\n\n"
            if data.get("zip_code"):
                section += f"Found {len(data['professionals'])} structural engineers near {data['zip_code']}.\n\n"
            sections.append(section)
    return "".join(sections) or FALLBACK_FINAL_RESPONSE


class AgentCoordinator:
    """
    Route chat messages through the agents.

    Args:
        session_maker: Opens database sessions for the catalog and directory agents.
        classifier: Intent classifier.
        inspection: Inspection agent.
        recommendation: Recommendation agent.
        procurement: Procurement agent.
        http_client: HTTP client used for geocoding unknown zip codes.
    """

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
        classifier: Optional[IntentClassifier] = None,
        inspection: Optional[InspectionAgent] = None,
        recommendation: Optional[RecommendationAgent] = None,
        procurement: Optional[ProcurementAgent] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if session_maker is None:
            from cracksense_ai.core.database import async_session_maker

            session_maker = async_session_maker
        self.session_maker = session_maker
        self.classifier = classifier or IntentClassifier()
        self.inspection = inspection or InspectionAgent()
        self.recommendation = recommendation or RecommendationAgent()
        self.procurement = procurement or ProcurementAgent(session_maker)
        self.http_client = http_client

        self.registry = AgentRegistry()
        self.registry.register(AgentIntent.crack_inspection, self._inspection_flow)
        self.registry.register(AgentIntent.repair_recommendation, self._recommendation_flow)
        self.registry.register(AgentIntent.product_procurement, self._procurement_flow)
        self.registry.register(AgentIntent.professional_finder, self._professional_flow)

    async def process_message(
        self,
        message: str,
        user_id: str,
        conversation_id: Optional[str] = None,
        has_images: bool = False,
    ) -> CoordinatorResult:
        """
        Classify a message and run the matching agent flow.

        Args:
            message: The user's chat message
            user_id: The requesting user
            conversation_id: Conversation the message belongs to
            has_images: Whether the message carried images

        Returns:
            CoordinatorResult; ``is_agent_triggered`` is False for plain chat
            and for failed flows
        """
        started = time.perf_counter()
        context = FlowContext(
            message=message, user_id=user_id, conversation_id=conversation_id, has_images=has_images
        )
        try:
            intent = await self.classifier.classify_intent(message, has_images=has_images)
        except Exception as e:
            logger.error(f"Agent coordination error: {e}")
            return CoordinatorResult(is_agent_triggered=False, intent=AgentIntent.general_chat, errors=[ROUTING_ERROR])

        logger.info(f"Detected intent: {intent.value}")
        if not self.registry.has(intent):
            return CoordinatorResult(is_agent_triggered=False, intent=intent)

        flow = self.registry.get(intent)
        try:
            result = await flow(context)
        except Exception as e:
            logger.error(f"{intent.value} flow error: {e}", exc_info=True)
            result = CoordinatorResult(
                is_agent_triggered=False, intent=intent, errors=[FLOW_ERRORS.get(intent, ROUTING_ERROR)]
            )

        log_agent_flow(
            intent=intent.value,
            user_id=user_id,
            triggered=result.is_agent_triggered,
            agents=[r.agent_type.value for r in result.agent_responses],
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        return result

    def _completed(self, intent: AgentIntent, responses: List[AgentResponse]) -> CoordinatorResult:
        return CoordinatorResult(
            is_agent_triggered=True,
            intent=intent,
            final_response=generate_final_response(responses),
            agent_responses=responses,
        )

    async def _inspection_flow(self, context: FlowContext) -> CoordinatorResult:
        responses: List[AgentResponse] = []
        inspection = await self.inspection.analyze_from_description(context.message)
        responses.append(_response(AgentType.inspection, inspection.model_dump(mode="json"), "Crack inspection completed"))

        next_agent = self.inspection.get_next_recommended_agent(inspection)
        if next_agent == AgentType.recommendation:
            recommendation = await self.recommendation.generate_recommendations(inspection, context.message)
            responses.append(self._recommendation_response(recommendation))
            if self.recommendation.should_trigger_procurement(recommendation):
                responses.append(await self._procure(context, inspection, recommendation))
        elif next_agent == AgentType.professional_finder:
            zip_code = extract_zip_code(context.message)
            if zip_code:
                responses.append(await self._find_professionals(zip_code, EmergencyLevel.high))

        return self._completed(AgentIntent.crack_inspection, responses)

    async def _recommendation_flow(self, context: FlowContext) -> CoordinatorResult:
        recommendation = await self.recommendation.generate_quick_advice(context.message)
        responses = [self._recommendation_response(recommendation)]
        if self.recommendation.should_trigger_procurement(recommendation):
            responses.append(await self._procure(context, None, recommendation))
        return self._completed(AgentIntent.repair_recommendation, responses)

    async def _procurement_flow(self, context: FlowContext) -> CoordinatorResult:
        responses = [await self._procure(context, None, None)]
        return self._completed(AgentIntent.product_procurement, responses)

    async def _professional_flow(self, context: FlowContext) -> CoordinatorResult:
        zip_code = extract_zip_code(context.message)
        if zip_code is None:
            response = _response(
                AgentType.professional_finder,
                {"message": ASK_FOR_ZIP_MESSAGE, "zip_code": None, "professionals": []},
                "ZIP code required for professional search",
            )
            return self._completed(AgentIntent.professional_finder, [response])

        response = await self._find_professionals(zip_code, EmergencyLevel.medium)
        return self._completed(AgentIntent.professional_finder, [response])

    @staticmethod
    def _recommendation_response(recommendation: RecommendationResult) -> AgentResponse:
        return _response(
            AgentType.recommendation, recommendation.model_dump(mode="json"), "Repair recommendations generated"
        )

    async def _procure(
        self,
        context: FlowContext,
        inspection: Optional[InspectionResult],
        recommendation: Optional[RecommendationResult],
    ) -> AgentResponse:
        result = await self.procurement.get_product_recommendations(
            context.message,
            context.user_id,
            inspection=inspection,
            recommendation=recommendation,
            conversation_id=context.conversation_id,
        )
        return _response(AgentType.procurement, result.model_dump(mode="json"), "Product recommendations generated")

    async def _find_professionals(self, zip_code: str, emergency_level: EmergencyLevel) -> AgentResponse:
        async with self.session_maker() as session, ProfessionalFinderAgent(
            session, http_client=self.http_client
        ) as finder:
            professionals = await finder.search_professionals(
                ProfessionalSearchParams(zip_code=zip_code, emergency_level=emergency_level)
            )
        return _response(
            AgentType.professional_finder,
            {
                "message": get_emergency_recommendation_message(emergency_level),
                "zip_code": zip_code,
                "emergency_level": emergency_level.value,
                "professionals": [p.model_dump(mode="json") for p in professionals],
            },
            "Professional search completed",
        )
