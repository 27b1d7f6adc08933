"""
Portal Frontend Configuration

All client settings using pydantic-settings with environment variable support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (two levels up from this file)
_THIS_DIR = Path(__file__).resolve().parent  # frontend/portal/
_PROJECT_ROOT = _THIS_DIR.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Client settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Session Issuer ───────────────────────────────────────────────────
    BACKEND_URL: str = "http://localhost:8000"
    REQUEST_TIMEOUT_SECS: float = 10.0

    # ── Token slot ───────────────────────────────────────────────────────
    TOKEN_STORE: str = "cookie"  # "cookie" or "file"
    # Script runs to wait for the browser to report its cookies
    COOKIE_READ_ATTEMPTS: int = 3
    COOKIE_READ_WAIT_SECS: float = 0.3
    TOKEN_FILE: Path = Path("~/.portal/session.json")
    SESSION_COOKIE_NAME: str = "token"
    SESSION_COOKIE_DAYS: int = 7


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance (read once, reused everywhere)."""
    return Settings()
