"""Runtime configuration, read from the environment or a ``.env`` file.

Every setting can be overridden with a ``STOCKLEDGER_`` prefixed variable,
e.g. ``STOCKLEDGER_DATABASE_URL=postgresql+psycopg2://...``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stockledger.domain.model.enums import AllocationStrategy


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///data/stockledger.db"
    MAX_TRANSACTION_ATTEMPTS: int = Field(default=3, ge=1)
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    DEFAULT_ACTOR: str = "system"
    DEFAULT_STRATEGY: AllocationStrategy = AllocationStrategy.PRIORITY

    model_config = SettingsConfigDict(env_prefix="STOCKLEDGER_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
