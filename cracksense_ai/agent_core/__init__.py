"""
Agent system for crack-related chat messages.

An intent classifier routes each message to a flow that chains the
inspection, recommendation, procurement and professional-finder agents.
Every agent runs on Pydantic AI and degrades to a conservative answer when no
model is configured.
"""

from .coordinator import AgentCoordinator
from .intent_classifier import IntentClassifier
from .manager import AgentManager, get_agent_manager

__all__ = ["AgentCoordinator", "AgentManager", "IntentClassifier", "get_agent_manager"]
