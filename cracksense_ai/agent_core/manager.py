"""Process-wide entry point to the agent system."""

from __future__ import annotations

from typing import Optional

from cracksense_ai.core.models.domain import CoordinatorResult

from .coordinator import AgentCoordinator

CRACK_KEYWORDS = (
    "crack", "cracks", "cracking", "fracture", "split", "damage",
    "repair", "fix", "patch", "seal", "structural", "foundation",
    "wall", "ceiling", "drywall", "concrete", "mortar", "stucco",
    "material", "product", "buy", "purchase", "recommend", "suggestion",
    "diy", "professional", "contractor", "engineer",
)  # fmt: skip

IMAGE_KEYWORDS = ("image", "photo", "picture", "uploaded", "attached", "analyze", "look at")


class AgentManager:
    """Thin facade over the coordinator used by the chat endpoint."""

    def __init__(self, coordinator: Optional[AgentCoordinator] = None) -> None:
        self.coordinator = coordinator or AgentCoordinator()

    async def process_message(
        self,
        message: str,
        user_id: str,
        conversation_id: Optional[str] = None,
        has_images: bool = False,
    ) -> CoordinatorResult:
        return await self.coordinator.process_message(
            message, user_id, conversation_id=conversation_id, has_images=has_images
        )

    @staticmethod
    def should_use_agents(message: str) -> bool:
        """Whether a chat message is about cracks, repairs or photos."""
        lowered = message.lower()
        return (
            any(keyword in lowered for keyword in CRACK_KEYWORDS)
            or any(keyword in lowered for keyword in IMAGE_KEYWORDS)
            or ("what" in lowered and "use" in lowered)
            or ("how" in lowered and "fix" in lowered)
        )


_agent_manager: Optional[AgentManager] = None


def get_agent_manager() -> AgentManager:
    """Get the process-wide agent manager, creating it on first use."""
    global _agent_manager
    if _agent_manager is None:
        _agent_manager = AgentManager()
    return _agent_manager
