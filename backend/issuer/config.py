"""
Session Issuer configuration using pydantic-settings.

All settings can be overridden via environment variables or a .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root is two levels above this file: backend/issuer/config.py -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Backend configuration for the Session Issuer service."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------- JWT ----------
    JWT_SECRET_KEY: str  # required, no default
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_DAYS: int = 7

    # ---------- Database ----------
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "issuer"
    DB_PASSWORD: str = "issuer"
    DB_NAME: str = "issuer"

    # Full URL override, e.g. "sqlite:///./issuer.db" for local runs
    DATABASE_URL: Optional[str] = None
    CREATE_TABLES_ON_STARTUP: bool = False

    # ---------- CORS ----------
    FRONTEND_URL: str = "http://localhost:8501"

    # ---------- Credentials ----------
    PASSWORD_MIN_LENGTH: int = 3

    # ---------- Rate limits ----------
    LOGIN_RATE_LIMIT: int = 10
    REGISTER_RATE_LIMIT: int = 5
    RATE_LIMIT_WINDOW_SECS: int = 60
    # Honour X-Forwarded-For; enable only behind a proxy that sets it
    TRUST_PROXY_HEADERS: bool = False

    # ---------- Logging ----------
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        """Return ``DATABASE_URL`` if set, else a psycopg2 connection string."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance (read once, reused everywhere)."""
    return Settings()
