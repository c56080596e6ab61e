"""Durable Object Store Port - Domain interface for S3-compatible storage.

This port defines the narrow contract the moderation core needs from the
durable store that serves approved content publicly. Adapters implement it
for S3, MinIO, or any S3-compatible gateway.
"""

from abc import ABC, abstractmethod


class DurableObjectStorePort(ABC):
    """Port interface for the durable object store.

    Key Design Principles:
    - Objects are addressed by caller-supplied keys (see storage_keys)
    - put() returns the public URL the gallery serves the object under
    - delete() is idempotent (deleting a missing key is not an error)
    - Misconfiguration raises StorageNotConfiguredError; transient failures
      and timeouts raise StorageUnavailableError

    Example Usage:
        store = S3StorageAdapter(...)
        url = store.put(content, "images/fanart/1700000000000_ab12_cat.png", "image/png")
        store.delete("images/fanart/1700000000000_ab12_cat.png")
    """

    @abstractmethod
    def put(self, content: bytes, key: str, content_type: str) -> str:
        """Upload bytes under key and return the public URL.

        Raises:
            StorageNotConfiguredError: If credentials/bucket are missing
            StorageUnavailableError: If the upload fails or times out
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the object stored under key.

        Raises:
            StorageNotConfiguredError: If credentials/bucket are missing
            StorageUnavailableError: If the deletion fails
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials and bucket are present."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Compute the public URL for key without contacting the store."""
