"""
studenda.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven database and logging settings.
- Offer a cached settings instance for the rest of the package.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (`STUDENDA_*`), defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="STUDENDA_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "studenda"
    log_level: str = "INFO"

    # Persistence. Both URLs should point at the same database.
    database_url: str = "sqlite:///./studenda.db"
    async_database_url: str = "sqlite+aiosqlite:///./studenda.db"
    echo_sql: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Alembic reads `database_url` (see alembic/env.py); application code usually
# goes through `studenda.db.session`.
