"""Application settings loaded from the environment."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration for the admin API."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "blood_network"

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    # API
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 20
    DEFAULT_LOG_PAGE_LIMIT: int = 50
    RECENT_ACTIVITY_LIMIT: int = 20

    # Workflow
    CLEAR_SUSPENSION_REASON_ON_ACTIVATE: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
