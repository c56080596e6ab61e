"""S3 Storage Adapter - Implementation of DurableObjectStorePort using boto3.

Provides durable storage for approved content on AWS S3, MinIO, and other
S3-compatible services. Every call is bounded by the configured timeout and
retried a small number of times by botocore before surfacing as
StorageUnavailableError.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...domain.submissions.errors import StorageNotConfiguredError, StorageUnavailableError
from ...domain.submissions.ports.object_storage_port import DurableObjectStorePort
from ...config import get_settings
from .storage_config import StorageConfig, storage_config_from_settings

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class S3StorageAdapter(DurableObjectStorePort):
    """S3-compatible durable store using boto3.

    Example:
        config = storage_config_from_settings(get_settings())
        store = S3StorageAdapter(config)

        url = store.put(content, "images/fanart/1700000000000_ab12_cat.png", "image/png")
    """

    def __init__(self, config: StorageConfig, client=None):
        """Initialize S3 storage adapter.

        The boto3 client is only created when the configuration is complete;
        an unconfigured adapter still answers is_configured() and public_url().

        Args:
            config: Storage configuration
            client: Pre-built S3 client (tests)
        """
        self.config = config
        self.bucket_name = config.bucket_name
        self._client = client

        if self._client is None and config.is_complete:
            self._client = boto3.client(
                "s3",
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                region_name=config.region,
                config=Config(
                    connect_timeout=config.timeout_seconds,
                    read_timeout=config.timeout_seconds,
                    retries={"max_attempts": MAX_ATTEMPTS, "mode": "standard"},
                ),
            )
            logger.info(
                f"Initialized S3 storage adapter: bucket={config.bucket_name}, "
                f"endpoint={config.endpoint_url or 'AWS S3'}, region={config.region}"
            )
        elif self._client is None:
            logger.warning("S3 storage adapter is not configured; approvals will fail")

    def is_configured(self) -> bool:
        return self._client is not None and self.config.is_complete

    def public_url(self, key: str) -> str:
        return f"{self.config.resolved_public_base_url()}/{key}"

    def put(self, content: bytes, key: str, content_type: str) -> str:
        """Upload bytes under key.

        Args:
            content: Object bytes
            key: Storage key (see generate_storage_key)
            content_type: MIME type stored with the object

        Returns:
            str: Public URL of the uploaded object

        Raises:
            StorageNotConfiguredError: If credentials or bucket are missing
            StorageUnavailableError: If the upload fails or times out
        """
        client = self._require_client()

        try:
            client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: key={key}, error={error_code}, message={e}"
            )
            raise StorageUnavailableError(f"Failed to upload object: {error_code}") from e
        except BotoCoreError as e:
            # Connection errors, read/connect timeouts
            logger.error(f"S3 upload failed: key={key}, error={e}")
            raise StorageUnavailableError(f"Failed to upload object: {e}") from e

        logger.info(
            f"Uploaded object: key={key}, size={len(content)}, content_type={content_type}"
        )
        return self.public_url(key)

    def delete(self, key: str) -> None:
        """Delete the object under key. Missing objects are not an error.

        Raises:
            StorageNotConfiguredError: If credentials or bucket are missing
            StorageUnavailableError: If deletion fails
        """
        client = self._require_client()

        try:
            client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("NoSuchKey", "404"):
                logger.info(f"Object already absent: key={key}")
                return
            logger.error(f"S3 deletion failed: key={key}, error={error_code}")
            raise StorageUnavailableError(f"Failed to delete object: {error_code}") from e
        except BotoCoreError as e:
            logger.error(f"S3 deletion failed: key={key}, error={e}")
            raise StorageUnavailableError(f"Failed to delete object: {e}") from e

        logger.info(f"Deleted object: key={key}")

    def _require_client(self):
        if not self.is_configured():
            raise StorageNotConfiguredError(
                "Durable storage is not configured. "
                "Set S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY and S3_BUCKET_NAME."
            )
        return self._client


def build_s3_storage_adapter(config: Optional[StorageConfig] = None) -> S3StorageAdapter:
    """Build the adapter from application settings when no config is given."""
    if config is None:
        config = storage_config_from_settings(get_settings())
    return S3StorageAdapter(config)
