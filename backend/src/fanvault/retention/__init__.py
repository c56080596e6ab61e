"""Rejected-content retention.

This module provides:
- Runtime-adjustable retention policy (age and count limits)
- Daily scheduled cleanup via Celery Beat
- Manual cleanup and live retention stats for operators
"""

from .schemas import (
    RetentionSettings,
    RetentionSettingsUpdate,
    RetentionStatistics,
    RetentionStats,
    CleanupResult,
)

# Service and tasks are imported lazily to avoid circular dependencies
# Use: from fanvault.retention.service import RetentionService
# Use: from fanvault.retention.tasks import retention_cleanup_task

__all__ = [
    "RetentionSettings",
    "RetentionSettingsUpdate",
    "RetentionStatistics",
    "RetentionStats",
    "CleanupResult",
]
