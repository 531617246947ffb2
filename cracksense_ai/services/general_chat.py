"""
General chat.

Answers chat messages that the agent system does not handle. With an
OpenRouter key the reply is streamed from the chat model; without one a fixed
guidance message is streamed word by word.
"""

from __future__ import annotations

from typing import AsyncIterator, Callable, Dict, Optional

from pydantic_ai import Agent
from pydantic_ai.models import Model

from cracksense_ai.agent_core.model_provider import create_chat_model
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.core.monitoring import log_llm_call

logger = get_logger(__name__)

CHAT_MODEL_IDS: Dict[str, str] = {
    "gemini-2.0-flash": "google/gemini-2.0-flash-001",
    "gemini-2.5-flash": "google/gemini-2.5-flash",
}

CHAT_SYSTEM_PROMPT = """\
You are a specialized assistant for structural crack analysis and building safety assessment.

Your expertise includes:
- Structural engineering and crack detection
- Building safety assessment
- Repair material recommendations
- DIY vs professional repair guidance

Guidelines:
- Provide helpful, accurate information about crack analysis and repair
- Emphasize safety first and recommend professional consultation for serious structural issues
- Be supportive for DIY repairs of low/moderate severity cracks
- Maintain a professional but approachable tone
- Focus on practical, actionable advice

Never introduce yourself by name in responses.
"""


def canned_reply(message: str) -> str:
    return (
        f'Based on your message: "{message}", I\'m here to help with crack analysis and structural concerns. '
        "While the advanced chat system is being updated, please use the image analysis feature for detailed "
        "crack assessments. I can provide general guidance on crack types, repair methods, and when to consult "
        "professionals."
    )


ModelFactory = Callable[[str], Optional[Model]]


def _default_model_factory(model_name: str) -> Optional[Model]:
    return create_chat_model(model_name, temperature=0.7, max_tokens=1000)


class GeneralChatService:
    """Streams replies to general chat messages."""

    def __init__(self, model_factory: Optional[ModelFactory] = None) -> None:
        self.model_factory: ModelFactory = model_factory or _default_model_factory

    async def stream_reply(self, message: str, model: str = "gemini-2.0-flash") -> AsyncIterator[str]:
        """
        Yield the reply to ``message`` in chunks.

        Args:
            message: The user's message
            model: Chat model name as accepted by the chat endpoint
        """
        model_id = CHAT_MODEL_IDS.get(model, model)
        llm = self.model_factory(model_id)
        if llm is None:
            for index, word in enumerate(canned_reply(message).split(" ")):
                yield word if index == 0 else f" {word}"
            return

        agent = Agent(llm, system_prompt=CHAT_SYSTEM_PROMPT)
        try:
            async with agent.run_stream(message) as result:
                async for delta in result.stream_text(delta=True):
                    if delta:
                        yield delta
        except Exception:
            log_llm_call(model_id, "general_chat", False)
            raise
        log_llm_call(model_id, "general_chat", True)
