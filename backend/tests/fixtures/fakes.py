"""In-memory collaborators for moderation tests.

FakeDurableStore stands in for the S3 adapter; FakeNotifier records review
notifications instead of writing rows.
"""

import threading
from typing import Dict, List, Optional, Tuple

from fanvault.domain.submissions.errors import StorageNotConfiguredError, StorageUnavailableError
from fanvault.domain.submissions.ports import DurableObjectStorePort, NotificationPort

FAKE_PUBLIC_BASE = "https://cdn.test/gallery"


class FakeDurableStore(DurableObjectStorePort):
    """Dict-backed durable store.

    Args:
        configured: False makes every call raise StorageNotConfiguredError
        fail_put: True makes put() raise StorageUnavailableError
        put_barrier: Barrier every put() waits on after storing (race tests)
    """

    def __init__(
        self,
        configured: bool = True,
        fail_put: bool = False,
        fail_delete: bool = False,
        put_barrier: Optional[threading.Barrier] = None,
    ):
        self.configured = configured
        self.fail_put = fail_put
        self.fail_delete = fail_delete
        self.put_barrier = put_barrier
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.deleted: List[str] = []
        self._lock = threading.Lock()

    def is_configured(self) -> bool:
        return self.configured

    def public_url(self, key: str) -> str:
        return f"{FAKE_PUBLIC_BASE}/{key}"

    def put(self, content: bytes, key: str, content_type: str) -> str:
        if not self.configured:
            raise StorageNotConfiguredError("Durable storage is not configured")
        if self.fail_put:
            raise StorageUnavailableError("Failed to upload object: timeout")
        with self._lock:
            self.objects[key] = (content, content_type)
        if self.put_barrier is not None:
            self.put_barrier.wait(timeout=10)
        return self.public_url(key)

    def delete(self, key: str) -> None:
        if not self.configured:
            raise StorageNotConfiguredError("Durable storage is not configured")
        if self.fail_delete:
            raise StorageUnavailableError("Failed to delete object: timeout")
        with self._lock:
            self.objects.pop(key, None)
            self.deleted.append(key)


class FakeNotifier(NotificationPort):
    """Records notifications; optionally raises to test fire-and-forget."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.approved: List[Tuple[int, str]] = []
        self.rejected: List[Tuple[int, str, str]] = []

    def notify_approved(self, user_id: int, title: str) -> None:
        if self.fail:
            raise RuntimeError("notification transport down")
        self.approved.append((user_id, title))

    def notify_rejected(self, user_id: int, title: str, reason: str) -> None:
        if self.fail:
            raise RuntimeError("notification transport down")
        self.rejected.append((user_id, title, reason))
