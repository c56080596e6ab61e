"""Global FastAPI dependencies for storage, notifications and retention state.

Process-wide collaborators are built once and cached. Tests replace them
through app.dependency_overrides.
"""

from functools import lru_cache

from .config import get_settings
from .database import SessionLocal
from .domain.submissions.ports import DurableObjectStorePort, NotificationPort
from .infrastructure.notifications import DatabaseNotifier
from .infrastructure.storage import LocalStagingStore, build_s3_storage_adapter
from .retention.config_store import RetentionConfigStore


@lru_cache()
def get_staging_store() -> LocalStagingStore:
    """Staging store rooted at STAGING_DIR."""
    settings = get_settings()
    return LocalStagingStore(settings.STAGING_DIR, settings.STAGING_BASE_URL)


@lru_cache()
def get_durable_store() -> DurableObjectStorePort:
    """S3-compatible durable store from S3_* settings."""
    return build_s3_storage_adapter()


@lru_cache()
def get_notifier() -> NotificationPort:
    """Notifier writing in-app notification rows."""
    return DatabaseNotifier(SessionLocal)


@lru_cache()
def get_retention_config_store() -> RetentionConfigStore:
    """Retention config shared by all processes through the database."""
    return RetentionConfigStore.from_settings(get_settings(), SessionLocal)
