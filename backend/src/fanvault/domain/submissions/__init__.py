"""Submissions domain module - review lifecycle, intake validation, error taxonomy"""

from .submission_status import (
    SubmissionStatus,
    ReviewDecision,
    ALLOWED_TRANSITIONS,
    DECISION_TARGETS,
    can_transition,
    is_terminal,
)
from .validation import (
    SubmissionCategory,
    DEFAULT_CATEGORY,
    ALLOWED_MIME_TYPES,
    is_supported_mime_type,
    is_reviewable_mime_type,
    parse_category,
    validate_file_size,
    validate_filename,
    sanitize_filename,
)
from .storage_keys import generate_storage_key
from .errors import (
    ModerationError,
    ValidationError,
    NotFoundError,
    ConflictError,
    StagingCorruptionError,
    StagingWriteError,
    StorageUnavailableError,
    StorageNotConfiguredError,
    CleanupInProgressError,
    RetentionConfigError,
)

__all__ = [
    "SubmissionStatus",
    "ReviewDecision",
    "ALLOWED_TRANSITIONS",
    "DECISION_TARGETS",
    "can_transition",
    "is_terminal",
    "SubmissionCategory",
    "DEFAULT_CATEGORY",
    "ALLOWED_MIME_TYPES",
    "is_supported_mime_type",
    "is_reviewable_mime_type",
    "parse_category",
    "validate_file_size",
    "validate_filename",
    "sanitize_filename",
    "generate_storage_key",
    "ModerationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StagingCorruptionError",
    "StagingWriteError",
    "StorageUnavailableError",
    "StorageNotConfiguredError",
    "CleanupInProgressError",
    "RetentionConfigError",
]
