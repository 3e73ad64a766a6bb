"""Application configuration using pydantic-settings."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: str = "INFO"

    # Slack OAuth (Sign in with Slack / Add to Slack)
    slack_client_id: str | None = None
    slack_client_secret: str | None = None
    slack_redirect_uri: str = "http://localhost:8000/api/auth/slack/callback"

    # Bot scopes and user scopes are requested independently by oauth.v2
    slack_scope: list[str] = Field(default_factory=lambda: ["users:read"])
    slack_user_scope: list[str] = Field(
        default_factory=lambda: [
            "identity.basic",
            "identity.email",
            "identity.team",
            "identity.avatar",
        ]
    )

    # Restrict sign-in to a single workspace
    slack_team: str | None = None

    # Profile lookup; leave unset to pick users.identity / users.info per grant
    slack_profile_url: str | None = None
    slack_skip_user_profile: bool = False

    # Frontend URL for redirects
    frontend_url: str = "http://localhost:3000"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env == Environment.DEVELOPMENT


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
