"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        REDIS_URL: Redis connection string (cleanup lock)
        CELERY_BROKER_URL: Celery broker for the scheduled retention job
        STAGING_DIR: Local directory holding unreviewed uploads
        STAGING_BASE_URL: Base URL of the reviewer-only staged file preview endpoint
        MAX_UPLOAD_SIZE_BYTES: Per-file upload limit (default 10 MB)
        S3_*: Durable object storage (AWS S3, MinIO, COS S3 gateway)
        LOG_LEVEL: Logging level (default INFO)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./fanvault.db"

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Staging store
    STAGING_DIR: str = "./temp/pending-images"
    STAGING_BASE_URL: str = "http://localhost:8000/api/v1/review/staged"
    MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024
    MAX_BATCH_FILES: int = 10

    # Durable object storage (S3-compatible)
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_BUCKET_NAME: str = ""
    S3_REGION: str = "us-east-1"
    S3_PUBLIC_BASE_URL: Optional[str] = None
    S3_TIMEOUT_SECONDS: float = 10.0

    # Retention defaults (apply until an operator stores new settings)
    RETENTION_DAYS: int = 7
    MAX_RETAINED_REJECTED: int = 100
    RETENTION_CRON_HOUR: int = 2
    RETENTION_CRON_MINUTE: int = 0

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    ENVIRONMENT: str = "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
