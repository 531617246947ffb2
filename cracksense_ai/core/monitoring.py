"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of the crack-analysis service, including:
- Pydantic AI agent calls (inspection, recommendation, intent classification)
- API endpoint tracing
- Database operation monitoring
- Credits ledger events
- Error tracking

All ``log_*`` helpers are fire-and-forget: a Logfire failure is reported at
DEBUG level and never reaches the caller.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_PROJECT_NAME = os.getenv("LOGFIRE_PROJECT_NAME", "cracksense-ai")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "cracksense-ai-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

# Sampling configuration
LOGFIRE_SAMPLE_RATE = float(os.getenv("LOGFIRE_SAMPLE_RATE", "1.0"))

# Feature flags
LOGFIRE_TRACE_PYDANTIC_AI = os.getenv("LOGFIRE_TRACE_PYDANTIC_AI", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Instruments Pydantic AI, SQLAlchemy, HTTPX and (when ``app`` is given)
    FastAPI. Each instrumentation is attempted independently so one failing
    integration does not disable the others.

    Args:
        app: FastAPI application instance for endpoint tracing (optional).

    Returns:
        True when Logfire was configured, False when it is disabled or failed.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
            sampling=logfire.SamplingOptions(head=LOGFIRE_SAMPLE_RATE),
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    instrumentations = [
        ("Pydantic AI", LOGFIRE_TRACE_PYDANTIC_AI, logfire.instrument_pydantic_ai),
        ("SQLAlchemy", LOGFIRE_TRACE_SQLALCHEMY, logfire.instrument_sqlalchemy),
        ("HTTPX", LOGFIRE_TRACE_HTTPX, logfire.instrument_httpx),
    ]
    for name, enabled, instrument in instrumentations:
        if not enabled:
            continue
        try:
            instrument()
            logger.info(f"Logfire: {name} instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")

    if LOGFIRE_TRACE_FASTAPI:
        if app is not None:
            try:
                logfire.instrument_fastapi(app=app)
                logger.info("Logfire: FastAPI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument FastAPI: {e}")
        else:
            logger.debug("FastAPI app instance not provided, skipping FastAPI instrumentation")

    logger.info(
        f"Logfire monitoring initialized: "
        f"project={LOGFIRE_PROJECT_NAME}, "
        f"environment={LOGFIRE_ENVIRONMENT}, "
        f"service={LOGFIRE_SERVICE_NAME}"
    )
    return True


def log_agent_flow(intent: str, user_id: str, triggered: bool, agents: list[str], duration_ms: float) -> None:
    """
    Log a completed coordinator flow.

    Args:
        intent: The classified intent that selected the flow
        user_id: The requesting user
        triggered: Whether any agent ran
        agents: Agent types that produced a response, in order
        duration_ms: Total flow duration in milliseconds
    """
    try:
        logfire.info(
            "Agent flow completed",
            intent=intent,
            user_id=user_id,
            triggered=triggered,
            agents=agents,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log agent flow to Logfire: intent={intent}")


def log_llm_call(model: str, purpose: str, succeeded: bool, attempt: int = 1) -> None:
    """
    Log an LLM call made by an agent or the homeowner analysis client.

    Args:
        model: The model name
        purpose: What the call was for (e.g. ``inspection``, ``intent``)
        succeeded: Whether a valid structured answer came back
        attempt: Attempt number for retried calls
    """
    try:
        logfire.info(
            "LLM call finished",
            model=model,
            purpose=purpose,
            succeeded=succeeded,
            attempt=attempt,
        )
    except Exception:
        logger.debug(f"Could not log LLM call to Logfire: model={model}")


def log_credit_event(user_id: str, transaction_type: str, amount: int, balance: Optional[int] = None) -> None:
    """
    Log a change to a user's credit balance.

    Args:
        user_id: The user whose balance changed
        transaction_type: deduct, add, refund or initial
        amount: Credits moved
        balance: Balance after the change, when known
    """
    try:
        logfire.info(
            "Credits changed",
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            balance=balance,
        )
    except Exception:
        logger.debug(f"Could not log credit event to Logfire: user_id={user_id}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    try:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_error(error_type: str, error_message: str, context: Optional[dict[str, Any]] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    try:
        logfire.error(
            f"{error_type}: {error_message}",
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
