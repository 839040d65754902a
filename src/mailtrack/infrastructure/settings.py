"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Mailtrack"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    main_app_domain: str = "http://localhost:3000"

    # Storage
    sqlite_db_path: str = "/app/data/mailtrack.db"

    # Google OAuth (login flow + token refresh)
    google_client_id: str = ""
    google_client_secret: SecretStr = Field(default=SecretStr(""))
    google_redirect_uri: str = "http://localhost:8080/gmailLogin"
    google_oauth_force_consent: bool = False

    # Push tracking; all four must be set or tracking stays off
    google_application_credentials: str | None = None
    google_topic: str | None = None
    google_subscription_name: str | None = None
    google_project_id: str | None = None

    # Sync tuning
    pubsub_max_messages: int = 10
    cursor_commit: Literal["eager", "deferred"] = "eager"
    token_expiry_skew_seconds: int = 60
    http_timeout_seconds: float = 30.0

    @computed_field
    @property
    def tracking_enabled(self) -> bool:
        """True when every push-tracking setting is present."""
        return all(
            (
                self.google_application_credentials,
                self.google_topic,
                self.google_subscription_name,
                self.google_project_id,
            )
        )

    @computed_field
    @property
    def topic_path(self) -> str:
        """Fully qualified Pub/Sub topic name."""
        return _resource_path(self.google_topic or "", self.google_project_id or "", "topics")

    @computed_field
    @property
    def subscription_path(self) -> str:
        """Fully qualified Pub/Sub subscription name."""
        return _resource_path(self.google_subscription_name or "", self.google_project_id or "", "subscriptions")


def _resource_path(name: str, project: str, kind: str) -> str:
    if not name or name.startswith("projects/"):
        return name
    return f"projects/{project}/{kind}/{name}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
