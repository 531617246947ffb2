"""
Logging Configuration Module.

Centralized logging setup for CrackSense-AI.

Features:
- Per-module log levels, with quieter SQLAlchemy, httpx and OpenAI client loggers
- Console logging plus an optional rotating log file
- A JSON formatter that keeps the request context (``error_id``, ``path``,
  ``duration_ms`` ...) passed through ``extra=`` by the middleware and the
  exception handler
"""

import json
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from cracksense_ai.server.core.config import settings

LOG_LEVEL = settings.log_level.upper()
LOG_FORMAT = settings.log_format
LOG_FILE_DIR = settings.log_file_dir
ENABLE_FILE_LOGGING = settings.enable_file_logging

LOG_FILE_NAME = "cracksense_ai.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

# Context keys copied from ``extra=`` into JSON records
CONTEXT_FIELDS = (
    "error_id",
    "error_type",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "user_id",
    "client",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including the request context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "module": record.filename,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if field in record.__dict__:
                payload[field] = record.__dict__[field]
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


# Module-specific log levels
MODULE_LOG_LEVELS = {
    # Agent layer
    "cracksense_ai.agent_core": "DEBUG",
    "cracksense_ai.agent_core.agents": "DEBUG",
    "cracksense_ai.agent_core.intent_classifier": "DEBUG",
    "cracksense_ai.agent_core.coordinator": "DEBUG",
    # Domain services
    "cracksense_ai.services": "INFO",
    "cracksense_ai.services.credits": "DEBUG",
    "cracksense_ai.services.homeowner_analysis": "DEBUG",
    # Server modules
    "cracksense_ai.server": "INFO",
    "cracksense_ai.server.api": "DEBUG",
    "cracksense_ai.server.core": "INFO",
    # Third-party libraries
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "openai": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def build_formatter(log_format: str) -> logging.Formatter:
    """Formatter for ``simple``, ``json`` or (any other value) ``detailed`` output."""
    if log_format == "json":
        return JsonFormatter(datefmt=DATE_FORMAT)
    if log_format == "simple":
        return logging.Formatter(SIMPLE_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Override default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override default format (simple, detailed, json)
        enable_file: Also write to the log file when ``ENABLE_FILE_LOGGING`` is set
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT
    formatter = build_formatter(fmt)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_logging = enable_file and ENABLE_FILE_LOGGING
    if file_logging:
        log_dir = Path(LOG_FILE_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE_NAME, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
