"""
CrackSense-AI Server Package.

This package contains the web server implementation for the CrackSense-AI service.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    services: Request dependencies and chat persistence.
    middleware: Request tracing.
    exception_handlers: Global error responses.
"""
