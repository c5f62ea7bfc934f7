"""Centralized settings for the MoodChat service.

Uses pydantic-settings to load from environment variables (prefixed MOODCHAT_)
with defaults suitable for local development.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """MoodChat settings loaded from environment variables."""

    # --- Server ---
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8000

    # --- Persistence ---
    database_url: str = "sqlite+aiosqlite:///./moodchat.db"
    persistence_backend: str = "sql"  # "sql" or "memory"

    # --- Presence & routing policy ---
    heartbeat_interval_seconds: float = 30.0
    max_message_length: int = 5000
    group_prefix: str = "group-"
    groups: dict[str, list[str]] = {}
    groups_file: str = ""

    # --- History ---
    history_default_limit: int = 100
    history_max_limit: int = 1000

    # --- HTTP / WebSocket ---
    cors_origins: list[str] = ["*"]
    allowed_ws_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "console"

    model_config = {
        "env_prefix": "MOODCHAT_",
        "env_file": ".env",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
