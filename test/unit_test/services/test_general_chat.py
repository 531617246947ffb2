"""Unit tests for the general chat service."""

from __future__ import annotations

from typing import List

from pydantic_ai.models.test import TestModel

from cracksense_ai.services.general_chat import GeneralChatService, canned_reply


async def _collect(service: GeneralChatService, message: str, model: str = "gemini-2.0-flash") -> List[str]:
    return [chunk async for chunk in service.stream_reply(message, model)]


async def test_canned_reply_is_streamed_word_by_word():
    service = GeneralChatService(model_factory=lambda name: None)

    chunks = await _collect(service, "Is my wall safe?")

    assert "".join(chunks) == canned_reply("Is my wall safe?")
    assert chunks[0] == "Based"
    assert chunks[1] == " on"


async def test_model_reply_is_streamed():
    service = GeneralChatService(model_factory=lambda name: TestModel(custom_output_text="Seal hairline cracks with caulk."))

    chunks = await _collect(service, "How do I fix a hairline crack?")

    assert "".join(chunks) == "Seal hairline cracks with caulk."


async def test_chat_model_names_are_mapped():
    requested: List[str] = []

    def factory(name: str):
        requested.append(name)
        return None

    service = GeneralChatService(model_factory=factory)
    await _collect(service, "hello", "gemini-2.5-flash")
    await _collect(service, "hello", "gemini-2.0-flash")
    await _collect(service, "hello", "anthropic/claude-sonnet-4")

    assert requested == ["google/gemini-2.5-flash", "google/gemini-2.0-flash-001", "anthropic/claude-sonnet-4"]


def test_canned_reply_quotes_message():
    assert canned_reply("hi there").startswith('Based on your message: "hi there"')
