"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback:

  1. Environment variables (highest priority)
  2. Values from .env
  3. Defaults defined here (lowest priority)

Usage:
    from bankapp.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from bankapp import __version__


class Settings(BaseSettings):
    """Central configuration for the banking core."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "bankapp"
    APP_VERSION: str = __version__
    DEBUG: bool = False

    # --- Database ---
    # SQLite for local use; swap to a PostgreSQL (asyncpg) URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/bank.db"

    # --- Passwords ---
    # First scheme hashes new passwords; the rest are still accepted on verify
    PASSWORD_SCHEMES: list[str] = ["argon2"]

    # --- Authentication ---
    # The single authority granted to every principal
    DEFAULT_AUTHORITY: str = "User"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # Optional rotating log file; console only when unset
    LOG_FILE: str | None = None


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
