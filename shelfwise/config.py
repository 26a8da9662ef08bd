"""
Application Configuration
Settings management using Pydantic for environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Core settings loaded from environment variables.
    """

    # Application
    APP_NAME: str = "Shelfwise Core"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "production"  # development, staging, production

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Database (progression + prediction audit storage)
    DATABASE_URL: str = "sqlite:///./shelfwise.db"
    DATABASE_ECHO: bool = False

    # Static knowledge overrides (JSON files); embedded tables when unset
    KNOWLEDGE_BASE_PATH: Optional[str] = None
    ACHIEVEMENT_CATALOG_PATH: Optional[str] = None

    # Recipe ranking
    RECIPE_DAYS_AHEAD: int = 7
    URGENT_WINDOW_DAYS: int = 3
    QUICK_RECIPE_MAX_MINUTES: int = 30

    # Gamification
    LEADERBOARD_DEFAULT_LIMIT: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
