"""Unit tests for intent classification."""

from __future__ import annotations

import re
from typing import List
from unittest.mock import patch

import pytest
from pydantic_ai import ModelMessage, ModelResponse
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from cracksense_ai.agent_core.intent_classifier import (
    IntentClassifier,
    IntentClassifierConfig,
    has_product_keywords,
)
from cracksense_ai.core.models.domain import AgentIntent


@pytest.fixture
def classifier() -> IntentClassifier:
    return IntentClassifier()


class TestQuickClassify:
    @pytest.mark.parametrize(
        "text,intent",
        [
            ("analyze my crack", AgentIntent.crack_inspection),
            ("fix the plaster", AgentIntent.repair_recommendation),
            ("I need to buy spackle", AgentIntent.product_procurement),
            ("fix using filler material", AgentIntent.product_procurement),
            ("monitor it weekly", AgentIntent.monitoring_request),
            ("find engineer near 10001", AgentIntent.professional_finder),
            ("hello", AgentIntent.general_chat),
            ("What is a hairline crack?", AgentIntent.general_chat),
        ],
    )
    def test_keyword_routing(self, classifier, text, intent):
        assert classifier.quick_classify(text) == intent

    def test_images_mean_inspection(self, classifier):
        assert classifier.quick_classify("hello", has_images=True) == AgentIntent.crack_inspection

    def test_patterns_checked_after_keywords(self):
        config = IntentClassifierConfig(
            keywords={},
            patterns={AgentIntent.monitoring_request: [re.compile(r"weekly", re.IGNORECASE)]},
        )

        classifier = IntentClassifier(config=config)

        assert classifier.quick_classify("Weekly photos please") == AgentIntent.monitoring_request
        assert classifier.quick_classify("something else") == AgentIntent.general_chat


def test_has_product_keywords():
    assert has_product_keywords("Which TOOL should I use?") is True
    assert has_product_keywords("fix the plaster") is False


class TestClassifyIntent:
    async def test_quick_result_skips_model(self):
        calls: List[int] = []

        def never(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            calls.append(1)
            raise AssertionError("model should not be called")

        classifier = IntentClassifier(model=FunctionModel(never))

        assert await classifier.classify_intent("analyze my crack") == AgentIntent.crack_inspection
        assert calls == []

    @patch("cracksense_ai.agent_core.intent_classifier.log_llm_call")
    async def test_model_decides_general_messages(self, mock_log_llm_call):
        classifier = IntentClassifier(model=TestModel(custom_output_text=" Monitoring_Request\n"))

        assert await classifier.classify_intent("hello there") == AgentIntent.monitoring_request
        mock_log_llm_call.assert_called_once_with("test", "intent", True)

    @patch("cracksense_ai.agent_core.intent_classifier.log_llm_call")
    async def test_unknown_model_answer(self, mock_log_llm_call):
        classifier = IntentClassifier(model=TestModel(custom_output_text="weather_report"))

        assert await classifier.classify_intent("hello") == AgentIntent.general_chat

    async def test_model_failure(self):
        def provider_down(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            raise RuntimeError("provider down")

        classifier = IntentClassifier(model=FunctionModel(provider_down))

        assert await classifier.classify_intent("hello") == AgentIntent.general_chat

    async def test_no_model_configured(self, classifier):
        assert await classifier.classify_intent("hello") == AgentIntent.general_chat


class TestConfidence:
    def test_fraction_of_matches(self, classifier):
        assert classifier.get_intent_confidence("find engineer", AgentIntent.professional_finder) == pytest.approx(
            1 / 8
        )
        assert classifier.get_intent_confidence("hello", AgentIntent.general_chat) == pytest.approx(2 / 11)

    def test_intent_without_rules(self):
        classifier = IntentClassifier(config=IntentClassifierConfig(keywords={}, patterns={}))

        assert classifier.get_intent_confidence("anything", AgentIntent.crack_inspection) == 0.0
