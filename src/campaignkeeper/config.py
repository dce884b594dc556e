# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str
    environment: str = "production"
    log_level: str = "info"
    log_format: str = "text"
    cors_origins: list[str] = []
    database_pool_size: int = 20

    # Rate limiting (slowapi limit strings)
    rate_limit_enabled: bool = True
    relationship_create_rate_limit: str = "30/minute"

    # Minimum seconds between catalog reloads triggered by lookup misses
    catalog_min_reload_seconds: float = 5.0

    model_config = {"env_file": ".env"}

    @model_validator(mode="after")
    def _validate_log_format(self) -> "Settings":
        if self.log_format not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance. Lazy-loaded to avoid import-time failures."""
    return Settings()
