# offloading/core/settings.py
from __future__ import annotations

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Basics
    PROJECT_NAME: str = "offloading-study"
    VERSION: str = "0.1.0"
    DATABASE_URL: str = "sqlite:///offloading.db"
    LOG_LEVEL: str = "INFO"
    ALLOW_ALL_CORS: bool = True

    # x-api-key for researcher endpoints
    API_KEY: str = "change-me"

    # Scoring
    DEFAULT_LOCALE: str = "en"
    MAX_SCORED_CHARS: int = 500

    # Hint policy used when an experiment does not override it
    HINT_MIN_ATTEMPTS: int = 3
    HINT_TIME_BEFORE_SECONDS: float = 120.0

    # Delayed recall
    STUDY_SECRET: str = "change-me"
    FRONTEND_URL: str = "http://localhost:3000"
    RECALL_DEFAULT_DELAY_HOURS: float = 48.0
    RECALL_EARLY_HOURS: float = 6.0
    RECALL_LATE_HOURS: float = 24.0

    @field_validator(
        "HINT_TIME_BEFORE_SECONDS",
        "RECALL_DEFAULT_DELAY_HOURS",
        "RECALL_EARLY_HOURS",
        "RECALL_LATE_HOURS",
        mode="before",
    )
    @classmethod
    def _decimal_comma(cls, v: Any) -> Any:
        # "0,5" is accepted as 0.5
        if isinstance(v, str):
            return v.strip().replace(",", ".")
        return v

    def masked_api_key(self) -> str:
        """API key with all but the last 4 characters hidden, for diagnostics."""
        key = self.API_KEY or ""
        if len(key) <= 4:
            return "*" * len(key)
        return "*" * (len(key) - 4) + key[-4:]


# Singleton imported by the rest of the modules
settings = Settings()
