"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_POLICY_PATH = Path(__file__).parent.parent / "policy" / "data" / "policy.yaml"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Identity Service"
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    database_url: str | None = None

    # Label policy (activation requirements, state triggers, level rules)
    policy_path: str = str(DEFAULT_POLICY_PATH)

    # Accounts
    uid_prefix: str = "ID"

    # Outbound events: "log" or "memory"
    event_publisher: str = "log"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
