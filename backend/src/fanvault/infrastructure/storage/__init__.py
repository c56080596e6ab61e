"""Storage infrastructure - local staging area and S3-compatible durable store"""

from .staging_store import LocalStagingStore
from .s3_storage_adapter import S3StorageAdapter, build_s3_storage_adapter
from .storage_config import StorageConfig, storage_config_from_settings

__all__ = [
    "LocalStagingStore",
    "S3StorageAdapter",
    "build_s3_storage_adapter",
    "StorageConfig",
    "storage_config_from_settings",
]
