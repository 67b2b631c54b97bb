"""Tests for environment-driven settings and offer configuration."""

import pytest

from merchant_app.config import ConfigError, Settings
from merchant_app.offers import OfferConfig, get_config, reset_config

VALID_KEY = "k" * 40


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ENV", "PORT", "APP_PORT", "SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY",
        "SUPABASE_JWT_SECRET", "CORS_ORIGINS", "SIGNUP_WEBHOOK_ENABLED", "FRONTEND_URL",
        "OFFER_REQUIRE_START_DATE", "OFFER_REQUIRE_TITLE", "OFFER_PERCENT_STEP", "OFFER_CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsFromEnv:
    def test_defaults(self, clean_env):
        settings = Settings.from_env()
        assert settings.env == "development"
        assert settings.app_port == 8000
        assert settings.supabase_url is None
        assert settings.signup_webhook_enabled is True

    def test_port_prefers_platform_port(self, clean_env):
        clean_env.setenv("APP_PORT", "9000")
        clean_env.setenv("PORT", "10000")
        assert Settings.from_env().app_port == 10000

    def test_flags_and_origins(self, clean_env):
        clean_env.setenv("SIGNUP_WEBHOOK_ENABLED", "false")
        clean_env.setenv("CORS_ORIGINS", "https://a.test, https://b.test,")
        settings = Settings.from_env()
        assert settings.signup_webhook_enabled is False
        assert settings.extra_cors_origins == ["https://a.test", "https://b.test"]


class TestSettingsValidate:
    def test_missing_required(self):
        problems = Settings().validate()
        assert problems == [
            "Missing required environment variables: "
            "SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY"
        ]

    def test_bad_url_and_short_keys(self):
        settings = Settings(
            supabase_url="not a url", supabase_anon_key="short", supabase_service_role_key=VALID_KEY,
        )
        assert settings.validate() == [
            "SUPABASE_URL must be a valid URL",
            "SUPABASE_ANON_KEY appears to be invalid",
        ]

    def test_require_valid(self):
        with pytest.raises(ConfigError) as exc:
            Settings().require_valid()
        assert len(exc.value.problems) == 1

        settings = Settings(
            supabase_url="https://abc.supabase.co", supabase_anon_key=VALID_KEY,
            supabase_service_role_key=VALID_KEY,
        )
        assert settings.require_valid() is settings


class TestCorsOrigins:
    def test_development(self):
        origins = Settings(frontend_url="http://localhost:3000").cors_origins()
        assert origins == ["http://localhost:3000", "http://127.0.0.1:3000"]

    def test_production(self):
        settings = Settings(env="production", frontend_url="https://app.test",
                            extra_cors_origins=["https://admin.test", "https://app.test"])
        assert settings.cors_origins() == ["https://app.test", "https://admin.test"]


class TestOfferConfig:
    def test_from_env(self, clean_env):
        clean_env.setenv("OFFER_REQUIRE_START_DATE", "no")
        clean_env.setenv("OFFER_PERCENT_STEP", "5")
        clean_env.setenv("OFFER_CURRENCY", "usd")
        config = OfferConfig.from_env()
        assert config.require_start_date is False
        assert config.percent_step == 5
        assert config.currency == "USD"

    def test_singleton_reset(self, clean_env):
        reset_config()
        first = get_config()
        assert get_config() is first
        clean_env.setenv("OFFER_REQUIRE_TITLE", "true")
        reset_config()
        assert get_config().require_title is True
        reset_config()
