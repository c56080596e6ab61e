"""Single-flight guard for retention cleanup.

At most one cleanup runs at a time. Inside a process this is a plain
threading.Lock; across processes (API workers and the Celery worker) a Redis
lock is taken as well when Redis is reachable. Without Redis the guard
degrades to process-local only.
"""

import logging
import threading
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from redis import Redis
from redis.exceptions import RedisError

from ..config import get_settings

logger = logging.getLogger(__name__)

LOCK_NAME = "fanvault:retention:cleanup"
LOCK_TIMEOUT_SECONDS = 3600


@lru_cache()
def get_redis_client() -> Optional[Redis]:
    """Get Redis client for the distributed cleanup lock.

    Built once per process. Connections are opened lazily, so an unreachable
    server surfaces when the lock is taken (see CleanupLock._acquire_distributed).
    Returns None if REDIS_URL cannot be used, allowing graceful degradation.
    """
    try:
        return Redis.from_url(get_settings().REDIS_URL, socket_connect_timeout=2)
    except Exception as e:
        logger.warning(f"Redis unavailable for cleanup lock, using process lock only: {e}")
        return None


class CleanupLock:
    """Non-blocking single-flight lock.

    Example:
        lock = CleanupLock(redis_client=get_redis_client())
        with lock.hold() as acquired:
            if not acquired:
                return "busy"
            run_cleanup()
    """

    _process_lock = threading.Lock()

    def __init__(self, redis_client: Optional[Redis] = None, timeout: int = LOCK_TIMEOUT_SECONDS):
        self.redis = redis_client
        self.timeout = timeout

    @property
    def locked(self) -> bool:
        return self._process_lock.locked()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Try to take the lock without waiting; yields whether it was acquired."""
        if not self._process_lock.acquire(blocking=False):
            yield False
            return

        distributed = None
        try:
            if self.redis is not None:
                acquired, distributed = self._acquire_distributed()
                if not acquired:
                    yield False
                    return
            yield True
        finally:
            if distributed is not None:
                try:
                    distributed.release()
                except RedisError as e:
                    logger.warning(f"Failed to release distributed cleanup lock: {e}")
            self._process_lock.release()

    def _acquire_distributed(self):
        """Returns (acquired, redis_lock). A Redis failure counts as acquired
        with no distributed lock held (process-local guard only)."""
        try:
            redis_lock = self.redis.lock(LOCK_NAME, timeout=self.timeout)
            if redis_lock.acquire(blocking=False):
                return True, redis_lock
            return False, None
        except RedisError as e:
            logger.warning(f"Distributed cleanup lock unavailable, using process lock only: {e}")
            return True, None
