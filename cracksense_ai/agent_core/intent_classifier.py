"""
Intent classification for chat messages.

A fast keyword and regex pass decides most messages. When it can only say
``general_chat``, the classifier model is asked for a bare category name.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern

from pydantic_ai import Agent
from pydantic_ai.models import Model

from cracksense_ai.core.models.domain import AgentIntent
from cracksense_ai.core.monitoring import log_llm_call

from .model_provider import create_classifier_model

logger = logging.getLogger(__name__)

PRODUCT_KEYWORDS = ("material", "product", "buy", "purchase", "recommend", "suggest", "tool", "equipment")

CLASSIFIER_PROMPT = """\
You are an intent classifier for a crack inspection and repair system. Classify the user input into one of \
these categories:

- general_chat: General questions, greetings, or casual conversation
- crack_inspection: Requests to analyze cracks, examine photos, or assess damage
- repair_recommendation: Asking for repair advice, how to fix something, or solution guidance
- product_procurement: Asking for product recommendations, materials to buy, or shopping guidance
- monitoring_request: Requests to track changes, set reminders, or monitor progress
- professional_finder: Looking for professional help, contractors, or expert services

If the user is asking about materials, products, or what to buy for repairs, answer "product_procurement".

Respond with only the category name, no explanation.
"""


def _patterns(*expressions: str) -> List[Pattern[str]]:
    return [re.compile(expression, re.IGNORECASE) for expression in expressions]


@dataclass
class IntentClassifierConfig:
    """Keyword and regex tables, checked in insertion order."""

    threshold: float = 0.7
    keywords: Dict[AgentIntent, List[str]] = field(
        default_factory=lambda: {
            AgentIntent.general_chat: ["hello", "hi", "how", "what", "why", "when", "where", "help", "thanks"],
            AgentIntent.crack_inspection: ["crack", "analyze", "inspection", "examine", "photo", "image", "picture"],
            AgentIntent.repair_recommendation: [
                "fix",
                "repair",
                "how to",
                "should i",
                "recommend",
                "advice",
                "solution",
            ],
            AgentIntent.product_procurement: [
                "buy",
                "purchase",
                "product",
                "material",
                "tool",
                "equipment",
                "amazon",
                "store",
            ],
            AgentIntent.monitoring_request: ["monitor", "track", "watch", "check regularly", "remind", "schedule"],
            AgentIntent.professional_finder: ["professional", "expert", "engineer", "contractor", "inspector", "company"],
        }
    )
    patterns: Dict[AgentIntent, List[Pattern[str]]] = field(
        default_factory=lambda: {
            AgentIntent.general_chat: _patterns(r"^(hi|hello|thanks)", r"what (is|are|can)"),
            AgentIntent.crack_inspection: _patterns(r"analyze.*(crack|wall|image)", r"what.*(crack|damage)"),
            AgentIntent.repair_recommendation: _patterns(r"how.*(fix|repair)", r"should.*(repair|fix)"),
            AgentIntent.product_procurement: _patterns(r"(recommend|suggest).*(product|material)", r"where.*(buy|purchase)"),
            AgentIntent.monitoring_request: _patterns(r"monitor|track.*(crack|damage)", r"remind.*(check|photo)"),
            AgentIntent.professional_finder: _patterns(r"find.*(professional|expert)", r"contact.*(engineer|contractor)"),
        }
    )


def has_product_keywords(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in PRODUCT_KEYWORDS)


class IntentClassifier:
    """
    Classify chat messages into agent intents.

    Args:
        model: Model for the LLM fallback. Built from settings when omitted;
            the fallback is skipped when no model is available.
        config: Keyword and pattern tables.
    """

    def __init__(self, model: Optional[Model] = None, config: Optional[IntentClassifierConfig] = None) -> None:
        self.config = config or IntentClassifierConfig()
        self._model = model
        self._agent: Optional[Agent[None, str]] = None

    def _get_agent(self) -> Optional[Agent[None, str]]:
        if self._agent is None:
            model = self._model or create_classifier_model()
            if model is None:
                return None
            self._agent = Agent(model, output_type=str, system_prompt=CLASSIFIER_PROMPT)
        return self._agent

    def quick_classify(self, text: str, has_images: bool = False) -> AgentIntent:
        """
        Classify with keywords and patterns only.

        Images always mean an inspection. A repair question that also mentions
        products is treated as a procurement request.
        """
        if has_images:
            return AgentIntent.crack_inspection

        lowered = text.lower()
        for intent, keywords in self.config.keywords.items():
            for keyword in keywords:
                if keyword.lower() in lowered:
                    if intent == AgentIntent.product_procurement or (
                        intent == AgentIntent.repair_recommendation and has_product_keywords(lowered)
                    ):
                        return AgentIntent.product_procurement
                    return intent

        for intent, patterns in self.config.patterns.items():
            if any(pattern.search(lowered) for pattern in patterns):
                return intent

        return AgentIntent.general_chat

    async def classify_intent(self, text: str, has_images: bool = False) -> AgentIntent:
        """
        Classify a message, asking the LLM when the quick pass is inconclusive.

        Any failure yields ``general_chat``.
        """
        try:
            quick = self.quick_classify(text, has_images)
            if quick != AgentIntent.general_chat:
                return quick
            return await self._llm_classify(text, has_images)
        except Exception as e:
            logger.error(f"Intent classification error: {e}")
            return AgentIntent.general_chat

    async def _llm_classify(self, text: str, has_images: bool) -> AgentIntent:
        agent = self._get_agent()
        if agent is None:
            return AgentIntent.general_chat

        context = json.dumps({"hasImages": has_images}) if has_images else "No additional context"
        result = await agent.run(f'User input: "{text}"\nContext: {context}')
        log_llm_call(getattr(agent.model, "model_name", "unknown"), "intent", True)

        answer = result.output.strip().lower()
        try:
            return AgentIntent(answer)
        except ValueError:
            logger.debug(f"Classifier answered an unknown intent: {answer!r}")
            return AgentIntent.general_chat

    def get_intent_confidence(self, text: str, intent: AgentIntent) -> float:
        """Fraction of the intent's keywords and patterns that match the text."""
        lowered = text.lower()
        keywords = self.config.keywords.get(intent, [])
        patterns = self.config.patterns.get(intent, [])
        total = len(keywords) + len(patterns)
        if total == 0:
            return 0.0

        score = sum(1 for keyword in keywords if keyword.lower() in lowered)
        score += sum(1 for pattern in patterns if pattern.search(lowered))
        return score / total
