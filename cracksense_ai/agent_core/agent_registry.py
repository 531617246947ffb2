from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from cracksense_ai.core.models.domain import AgentIntent, CoordinatorResult


@dataclass
class FlowContext:
    """One chat message on its way through an agent flow."""

    message: str
    user_id: str
    conversation_id: Optional[str] = None
    has_images: bool = False


AgentFlow = Callable[[FlowContext], Awaitable[CoordinatorResult]]
"""
AgentFlow:
    An async callable that runs the agents for one intent and returns the
    combined ``CoordinatorResult``.
"""


class AgentRegistry:
    """
    Registry of agent flows keyed by intent.

    The coordinator looks up the flow for a classified intent here. Intents
    without a registered flow are answered by plain chat.
    """

    def __init__(self) -> None:
        """Initialize an empty agent registry."""
        self._flows: Dict[str, AgentFlow] = {}

    def register(self, intent: AgentIntent | str, flow: AgentFlow) -> None:
        """
        Register the flow for an intent.

        Args:
            intent: The intent the flow handles.
            flow: Async callable taking a FlowContext.
        """
        self._flows[AgentIntent(intent).value] = flow

    def get(self, intent: AgentIntent | str) -> AgentFlow:
        """
        Retrieve the flow for an intent.

        Raises:
            KeyError: If no flow is registered for the intent.
        """
        try:
            return self._flows[AgentIntent(intent).value]
        except KeyError as e:
            raise KeyError(f"unknown intent: {intent}") from e

    def has(self, intent: AgentIntent | str) -> bool:
        return AgentIntent(intent).value in self._flows
