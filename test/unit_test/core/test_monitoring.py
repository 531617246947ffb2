"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Logfire initialization with various configurations
- Feature flag handling
- Custom logging functions (agent flows, LLM calls, credits, API requests, errors)
- Error handling and graceful degradation
"""

from unittest.mock import patch

from fastapi import FastAPI

from cracksense_ai.core.monitoring import (
    initialize_logfire,
    log_agent_flow,
    log_api_request,
    log_credit_event,
    log_error,
    log_llm_call,
)


class TestInitializeLogfire:
    """Test Logfire initialization function."""

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", False)
    @patch("cracksense_ai.core.monitoring.logger")
    def test_initialize_logfire_disabled(self, mock_logger):
        """Test that initialization is skipped when Logfire is disabled."""
        assert initialize_logfire() is False

        mock_logger.info.assert_called_once()
        assert "disabled" in mock_logger.info.call_args[0][0].lower()

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TOKEN", "")
    @patch("cracksense_ai.core.monitoring.logger")
    def test_initialize_logfire_no_token(self, mock_logger):
        """Test that initialization warns when token is not set."""
        assert initialize_logfire() is False

        mock_logger.warning.assert_called_once()
        assert "token" in mock_logger.warning.call_args[0][0].lower()

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("cracksense_ai.core.monitoring.LOGFIRE_SERVICE_NAME", "test-service")
    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENVIRONMENT", "test")
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_PYDANTIC_AI", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", False)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    @patch("cracksense_ai.core.monitoring.logfire")
    def test_initialize_logfire_configures_and_instruments(self, mock_logfire):
        """Enabled integrations are instrumented, disabled ones are skipped."""
        app = FastAPI()

        assert initialize_logfire(app) is True

        configure_kwargs = mock_logfire.configure.call_args.kwargs
        assert configure_kwargs["token"] == "test-token"
        assert configure_kwargs["service_name"] == "test-service"
        assert configure_kwargs["environment"] == "test"
        mock_logfire.instrument_pydantic_ai.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    @patch("cracksense_ai.core.monitoring.logfire")
    def test_initialize_logfire_skips_fastapi_without_app(self, mock_logfire):
        assert initialize_logfire() is True

        mock_logfire.instrument_fastapi.assert_not_called()

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_PYDANTIC_AI", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("cracksense_ai.core.monitoring.logfire")
    @patch("cracksense_ai.core.monitoring.logger")
    def test_failing_instrumentation_does_not_stop_others(self, mock_logger, mock_logfire):
        mock_logfire.instrument_pydantic_ai.side_effect = RuntimeError("not installed")

        assert initialize_logfire() is True

        mock_logfire.instrument_httpx.assert_called_once()
        assert any("Pydantic AI" in call.args[0] for call in mock_logger.warning.call_args_list)

    @patch("cracksense_ai.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("cracksense_ai.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("cracksense_ai.core.monitoring.logfire")
    @patch("cracksense_ai.core.monitoring.logger")
    def test_initialize_logfire_handles_configure_exception(self, mock_logger, mock_logfire):
        """Test that a configure failure is logged and reported as not initialized."""
        mock_logfire.configure.side_effect = Exception("Configuration error")

        assert initialize_logfire() is False

        mock_logger.error.assert_called_once()


class TestLogHelpers:
    """The log_* helpers forward to Logfire and never raise."""

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_log_agent_flow(self, mock_logfire):
        log_agent_flow(
            intent="crack_inspection",
            user_id="user_1",
            triggered=True,
            agents=["inspection", "recommendation"],
            duration_ms=12.5,
        )

        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["intent"] == "crack_inspection"
        assert kwargs["agents"] == ["inspection", "recommendation"]

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_log_llm_call(self, mock_logfire):
        log_llm_call("google/gemini-2.5-flash", "inspection", False, attempt=2)

        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["model"] == "google/gemini-2.5-flash"
        assert kwargs["succeeded"] is False
        assert kwargs["attempt"] == 2

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_log_credit_event(self, mock_logfire):
        log_credit_event("user_1", "deduct", 200, balance=800)

        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["transaction_type"] == "deduct"
        assert kwargs["balance"] == 800

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_log_api_request(self, mock_logfire):
        log_api_request(method="POST", path="/api/v1/export-pdf", status_code=402, duration_ms=8.0)

        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["status_code"] == 402
        assert kwargs["path"] == "/api/v1/export-pdf"

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_log_error_passes_context(self, mock_logfire):
        log_error("ValueError", "bad input", {"user_id": "user_1"})

        args, kwargs = mock_logfire.error.call_args
        assert args[0] == "ValueError: bad input"
        assert kwargs == {"user_id": "user_1"}

    @patch("cracksense_ai.core.monitoring.logfire")
    def test_helpers_swallow_logfire_failures(self, mock_logfire):
        mock_logfire.info.side_effect = RuntimeError("exporter down")
        mock_logfire.error.side_effect = RuntimeError("exporter down")

        log_agent_flow("general_chat", "user_1", False, [], 1.0)
        log_llm_call("model", "intent", True)
        log_credit_event("user_1", "add", 10)
        log_api_request("GET", "/api/v1/health", 200, 1.0)
        log_error("KeyError", "missing", None)

    def test_helpers_run_without_configuration(self):
        """Logfire not being configured is not an error for callers."""
        log_llm_call("google/gemini-2.0-flash-001", "homeowner_analysis", True)
        log_api_request(method="GET", path="/api/v1/health", status_code=200, duration_ms=1.2)
        log_error("TestError", "message", context={"path": "/api/v1/health"})
