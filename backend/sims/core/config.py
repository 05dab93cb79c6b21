"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="SIMS_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "BCC Stores Inventory Management System"
    environment: str = "development"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./sims.db"

    # Sessions
    session_cookie_name: str = "sims_session_id"
    session_ttl_seconds: int = 24 * 60 * 60
    session_sweep_interval_seconds: int = 15 * 60
    allowed_origins: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "https://bccinventory.netlify.app",
    ]

    # Repairs system (partner)
    repairs_system_url: str | None = None
    repairs_timeout_seconds: float = 5.0
    repairs_failure_threshold: int = 3
    repairs_cooldown_seconds: int = 60
    external_api_key: str | None = None

    # Assets
    org_prefix: str = "BCC"

    # Bootstrap
    bootstrap_admin_password: str | None = None

    # Scheduler
    scheduler_enabled: bool = True

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip().rstrip("/") for item in value.split(",") if item.strip()]
        return value

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        return (value or "development").strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_cookie_samesite(self) -> str:
        return "strict" if self.is_production else "lax"


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
