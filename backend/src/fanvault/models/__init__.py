"""SQLAlchemy models for the moderation backend"""

from .base import Base, utcnow
from .pending_submission import PendingSubmission
from .asset import Asset
from .notification import Notification
from .retention_config import RetentionConfig

__all__ = [
    "Base",
    "utcnow",
    "PendingSubmission",
    "Asset",
    "Notification",
    "RetentionConfig",
]
