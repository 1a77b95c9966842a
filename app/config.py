"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "SiteSignal"
    app_env: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    # Database
    database_url: str = "sqlite+aiosqlite:///./sitesignal.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_db_url(cls, v: str) -> str:
        # Heroku-style URLs need the asyncpg driver prefix for SQLAlchemy async
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Signal thresholds (fraction of 100) used when an account has none set.
    # Unset falls back to the scoring engine's defaults.
    default_good_threshold: Optional[float] = None
    default_bad_threshold: Optional[float] = None

    @model_validator(mode="after")
    def check_thresholds(self) -> "Settings":
        # Imported here: app.services pulls in the database layer, which needs this module
        from app.services.scoring import (
            DEFAULT_BAD_THRESHOLD, DEFAULT_GOOD_THRESHOLD, validate_thresholds,
        )
        if self.default_good_threshold is None:
            self.default_good_threshold = DEFAULT_GOOD_THRESHOLD
        if self.default_bad_threshold is None:
            self.default_bad_threshold = DEFAULT_BAD_THRESHOLD
        validate_thresholds(self.default_good_threshold, self.default_bad_threshold)
        return self

    # Scheduled score refresh
    scheduler_enabled: bool = True
    recalc_interval_hours: int = 24

    model_config = {"env_file": None}


@lru_cache
def get_settings() -> Settings:
    return Settings()
