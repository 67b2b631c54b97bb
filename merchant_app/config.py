"""
Application settings loaded from the environment (.env supported).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()

MIN_KEY_LENGTH = 32

DEFAULT_SIGNUP_WEBHOOK_URL = "https://prod.lucasaibot.uk/webhook/db983b11-8739-4f2d-8e97-097b82210e54"
DEFAULT_BILLING_WEBHOOK_URL = "https://prod.lucasaibot.uk/webhook/dee4390c-087a-41f1-9103-bf77934e4d3e"


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


@dataclass
class Settings:
    """Configuration for the merchant backend."""

    env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"

    # Supabase
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None

    # Webhooks
    signup_webhook_url: str = DEFAULT_SIGNUP_WEBHOOK_URL
    billing_webhook_url: str = DEFAULT_BILLING_WEBHOOK_URL
    signup_webhook_enabled: bool = True
    billing_webhook_enabled: bool = True
    webhook_timeout: float = 10.0

    extra_cors_origins: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        extra_origins = os.getenv("CORS_ORIGINS", "")
        return cls(
            env=os.getenv("ENV", "development"),
            app_host=os.getenv("APP_HOST", "0.0.0.0"),
            # Hosting platforms provide PORT, fallback to APP_PORT or 8000
            app_port=int(os.getenv("PORT", os.getenv("APP_PORT", "8000"))),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
            supabase_jwt_secret=os.getenv("SUPABASE_JWT_SECRET"),
            signup_webhook_url=os.getenv("SIGNUP_WEBHOOK_URL", DEFAULT_SIGNUP_WEBHOOK_URL),
            billing_webhook_url=os.getenv("BILLING_WEBHOOK_URL", DEFAULT_BILLING_WEBHOOK_URL),
            signup_webhook_enabled=os.getenv("SIGNUP_WEBHOOK_ENABLED", "true").lower() == "true",
            billing_webhook_enabled=os.getenv("BILLING_WEBHOOK_ENABLED", "true").lower() == "true",
            webhook_timeout=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
            extra_cors_origins=[o.strip() for o in extra_origins.split(",") if o.strip()],
        )

    @property
    def is_dev(self) -> bool:
        return self.env == "development"

    @property
    def is_prod(self) -> bool:
        return self.env == "production"

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        problems = []
        required = {
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_ANON_KEY": self.supabase_anon_key,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase_service_role_key,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            problems.append(f"Missing required environment variables: {', '.join(missing)}")

        if self.supabase_url:
            parsed = urlparse(self.supabase_url)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                problems.append("SUPABASE_URL must be a valid URL")

        if self.supabase_anon_key and len(self.supabase_anon_key) < MIN_KEY_LENGTH:
            problems.append("SUPABASE_ANON_KEY appears to be invalid")

        if self.supabase_service_role_key and len(self.supabase_service_role_key) < MIN_KEY_LENGTH:
            problems.append("SUPABASE_SERVICE_ROLE_KEY appears to be invalid")

        return problems

    def require_valid(self) -> "Settings":
        problems = self.validate()
        if problems:
            raise ConfigError(problems)
        return self

    def cors_origins(self) -> List[str]:
        """CORS allowlist based on environment."""
        if self.is_dev:
            origins = [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                self.frontend_url,
            ]
        else:
            origins = [self.frontend_url]
        for origin in self.extra_cors_origins:
            if origin not in origins:
                origins.append(origin)
        return list(dict.fromkeys(origins))


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the application settings."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
