"""Storage configuration for the S3-compatible durable store.

Supports AWS S3, MinIO (development) and S3 gateways of other providers
with the same interface. Missing credentials are not an error at load time:
the adapter reports itself as unconfigured and approvals fail with
StorageNotConfiguredError instead of crashing the service at startup.
"""

from dataclasses import dataclass
from typing import Optional

from ...config import Settings


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (None for AWS S3 default endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: Bucket holding approved content
        region: AWS region (default: 'us-east-1')
        public_base_url: Base URL objects are publicly served under
                         (CDN or bucket website); derived when not set
        timeout_seconds: Connect/read timeout for every store call
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    public_base_url: Optional[str] = None
    timeout_seconds: float = 10.0

    @property
    def is_complete(self) -> bool:
        return bool(self.access_key and self.secret_key and self.bucket_name)

    def resolved_public_base_url(self) -> str:
        """Base URL for public object links, without trailing slash."""
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"


def storage_config_from_settings(settings: Settings) -> StorageConfig:
    """Build storage configuration from application settings (.env aware)."""
    return StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL,
        timeout_seconds=settings.S3_TIMEOUT_SECONDS,
    )
