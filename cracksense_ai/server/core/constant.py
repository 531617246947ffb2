"""Server-wide constants."""

PROJECT_NAME = "CrackSense-AI"
API_V1_STR = "/api/v1"
