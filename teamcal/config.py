# teamcal/config.py

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Единый конфиг проекта. Читает переменные окружения.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # --- Основные настройки ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    # --- База данных ---
    DATABASE_URL: str = Field(..., description="Async database connection URL (e.g., postgresql+asyncpg://...)")

    # --- Redis (rate limiting, health) ---
    REDIS_URL: str = Field("redis://redis:6379/0", description="URL for Redis connection")

    # --- Сессия (подписанный токен в cookie) ---
    SESSION_SECRET_KEY: str = Field(..., description="Secret key for signing session tokens")
    SESSION_ALGORITHM: str = Field("HS256", description="Algorithm for session token signing")
    SESSION_MAX_AGE_DAYS: int = Field(7, description="Absolute session lifetime in days")
    SESSION_COOKIE_NAME: str = Field("calendar_session", description="Cookie carrying the session token")
    SESSION_COOKIE_SECURE: Optional[bool] = Field(None, description="Secure cookie flag (defaults to ENVIRONMENT == 'prod')")

    # --- Rate limit для /auth/me ---
    RATE_LIMIT_REQUESTS: int = Field(60, description="Allowed requests per window per client")
    RATE_LIMIT_WINDOW_SECONDS: int = Field(60, description="Fixed window length in seconds")

    @model_validator(mode='after')
    def set_cookie_defaults(self) -> 'Settings':
        if self.SESSION_COOKIE_SECURE is None:
            log.debug("Setting SESSION_COOKIE_SECURE default from ENVIRONMENT")
            self.SESSION_COOKIE_SECURE = self.ENVIRONMENT == "prod"
        if self.SESSION_MAX_AGE_DAYS <= 0:
            raise ValueError("SESSION_MAX_AGE_DAYS must be positive")
        return self

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_MAX_AGE_DAYS * 24 * 60 * 60


try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug("Loaded settings: DB URL=%s..., Redis URL=%s",
              str(settings.DATABASE_URL)[:25], settings.REDIS_URL)
except Exception:
    log.exception("Failed to instantiate Settings.")
    raise
