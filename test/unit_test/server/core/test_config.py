"""Unit tests for the server settings model.

Tests verify that the Settings model binds the flat environment variables
and that the grouped configuration properties are built from them.
"""

import pytest

from cracksense_ai.server.core.config import (
    CORSConfig,
    CreditPackConfig,
    LocationConfig,
    OpenRouterConfig,
    Settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "OPENROUTER_API_KEY",
        "OPENROUTER_AGENT_MODEL",
        "CORS_ORIGINS",
        "INITIAL_CREDITS",
        "PRO_PACK_CREEM_PROD_ID",
        "NOMINATIM_BASE_URL",
        "LOCATION_LOOKUP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.server_port == 8000
        assert settings.initial_credits == 20
        assert settings.openrouter_api_key is None
        assert settings.cors_origins == ["*"]

    def test_server_binding(self, clean_env):
        clean_env.setenv("CRACKSENSE_AI_SERVER_PORT", "9000")
        clean_env.setenv("CRACKSENSE_AI_LOG_LEVEL", "DEBUG")
        clean_env.setenv("INITIAL_CREDITS", "50")

        settings = Settings(_env_file=None)

        assert settings.server_port == 9000
        assert settings.log_level == "DEBUG"
        assert settings.initial_credits == 50

    def test_database_url_binding(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/cracks")

        assert Settings(_env_file=None).database_url == "postgresql+asyncpg://u:p@db:5432/cracks"

    def test_cors_origins_from_json_list(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://app.example.com", "http://localhost:3000"]')

        assert Settings(_env_file=None).cors_origins == ["https://app.example.com", "http://localhost:3000"]


class TestGroupedConfig:
    """Test the grouped configuration properties."""

    def test_openrouter(self, clean_env):
        clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")
        clean_env.setenv("OPENROUTER_AGENT_MODEL", "google/gemini-2.5-pro")

        openrouter = Settings(_env_file=None).openrouter

        assert isinstance(openrouter, OpenRouterConfig)
        assert openrouter.api_key == "sk-or-test"
        assert openrouter.agent_model == "google/gemini-2.5-pro"
        assert openrouter.base_url == "https://openrouter.ai/api/v1"
        assert openrouter.classifier_model == "google/gemini-2.0-flash-001"

    def test_credit_packs(self, clean_env):
        clean_env.setenv("PRO_PACK_CREEM_PROD_ID", "prod_pro")

        packs = Settings(_env_file=None).credit_packs

        assert isinstance(packs, CreditPackConfig)
        assert packs.pro_prod_id == "prod_pro"
        assert packs.starter_dev_id is None

    def test_location(self, clean_env):
        clean_env.setenv("NOMINATIM_BASE_URL", "http://mock-nominatim")
        clean_env.setenv("LOCATION_LOOKUP_TIMEOUT", "2.5")

        location = Settings(_env_file=None).location

        assert isinstance(location, LocationConfig)
        assert location.nominatim_base_url == "http://mock-nominatim"
        assert location.zippopotam_base_url == "http://api.zippopotam.us"
        assert location.timeout_seconds == 2.5

    def test_cors(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://app.example.com"]')

        cors = Settings(_env_file=None).cors

        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://app.example.com"]
        assert cors.allow_credentials is True
        assert cors.allow_methods == ["*"]
