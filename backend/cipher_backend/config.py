"""Application configuration and settings management."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the project store service."""

    model_config = SettingsConfigDict(
        env_prefix="CIPHER_", env_file=".env", extra="ignore"
    )

    database_url: str = "sqlite:///./cipherstudio.db"
    cors_origins: list[str] = ["http://localhost:3000"]
    max_files: int = 500
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


__all__ = ["Settings", "get_settings"]
