"""Error types for CrackSense-AI.

Defines a small hierarchy of exceptions raised by the services and agents to
signal missing credits, missing records, ownership violations and agent
failures. API routes translate them into HTTP status codes.
"""

from __future__ import annotations

from typing import Optional


class CrackSenseError(Exception):
    """Base error for all CrackSense-AI exceptions."""


class CreditsNotInitializedError(CrackSenseError):
    """Raised when a user has no credits row yet."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__("User credits not initialized. Please refresh the page and try again.")


class InsufficientCreditsError(CrackSenseError):
    """Raised when a balance cannot cover the requested amount."""

    def __init__(self, required: int, current: int) -> None:
        self.required = required
        self.current = current
        super().__init__("Insufficient credits")


class AnalysisNotFoundError(CrackSenseError):
    """Raised when a crack analysis id does not exist."""

    def __init__(self, analysis_id: str) -> None:
        self.analysis_id = analysis_id
        super().__init__(f"Crack analysis not found: '{analysis_id}'")


class AnalysisAccessDeniedError(CrackSenseError):
    """Raised when a user touches an analysis owned by someone else."""

    def __init__(self, analysis_id: str, user_id: str) -> None:
        self.analysis_id = analysis_id
        self.user_id = user_id
        super().__init__("Access denied - analysis belongs to another user")


class ProfessionalNotFoundError(CrackSenseError):
    """Raised when a professional id does not exist."""

    def __init__(self, professional_id: int) -> None:
        self.professional_id = professional_id
        super().__init__(f"Professional not found: {professional_id}")


class AgentExecutionError(CrackSenseError):
    """Raised when an agent step cannot produce a result."""

    def __init__(self, agent_type: str, message: str, cause: Optional[BaseException] = None) -> None:
        self.agent_type = agent_type
        self.cause = cause
        super().__init__(f"{agent_type} agent failed: {message}")
