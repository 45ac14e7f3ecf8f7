"""Configuration management for stuff-engine."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    storage_dir: str = Field(default=".stuff", description="Directory used by the JSON file persistence adapter")
    storage_key_prefix: str = Field(default="stuff-app-", description="Prefix prepended to every persisted key")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")

    # Task Behaviour
    settle_delay_seconds: float = Field(
        default=0.6,
        ge=0,
        description="Window after a completion toggle during which the toggle can still be undone",
    )
    focus_limit: int = Field(default=3, ge=1, description="Maximum number of tasks in the focus set")
    stale_after_days: int = Field(default=3, ge=0, description="Age after which an anytime task counts as stale")
    abandoned_after_days: int = Field(
        default=7, ge=0, description="Age after which an anytime task counts as abandoned"
    )
    tag_color_seed: int | None = Field(
        default=None, description="Seed for tag color selection (None for a nondeterministic palette pick)"
    )

    def storage_path(self) -> Path:
        """Resolve the storage directory to an absolute path."""
        return Path(self.storage_dir).expanduser().resolve()


# Application Constants
class Constants:
    """Application-wide constants."""

    # Export bundle
    SCHEMA_VERSION: str = "2.0.0"

    # Natural-language dates
    DEFAULT_DUE_HOUR: int = 9  # 9am when a phrase has no time of day

    # List limits
    QUICK_FIND_LIMIT: int = 10
    PLANNING_CANDIDATE_LIMIT: int = 10
    DASHBOARD_TOP_PROJECTS: int = 3
    DASHBOARD_ABANDONED_PREVIEW: int = 5

    # Dashboard window
    DASHBOARD_WINDOW_DAYS: int = 7

    # Defaults
    DEFAULT_PROJECT_COLOR: str = "#007AFF"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
