"""Error taxonomy for the moderation pipeline.

Every failure a caller must react to differently has its own class. The API
layer maps them to HTTP responses through ``code`` and ``http_status``.
"""


class ModerationError(Exception):
    """Base exception for moderation operations."""

    code = "moderation_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ModerationError):
    """Input rejected before any side effect (bad MIME type, missing field)."""

    code = "validation_error"
    http_status = 400


class NotFoundError(ModerationError):
    """Unknown submission id."""

    code = "not_found"
    http_status = 404


class ConflictError(ModerationError):
    """Decision attempted on a submission that is no longer pending."""

    code = "already_reviewed"
    http_status = 409


class StagingCorruptionError(ModerationError):
    """Approve attempted but the staged bytes are missing.

    The submission stays pending so an operator can investigate.
    """

    code = "staging_corruption"
    http_status = 409


class StagingWriteError(ModerationError):
    """Staged bytes could not be written during intake."""

    code = "staging_write_failed"
    http_status = 500


class StorageUnavailableError(ModerationError):
    """Durable object store unreachable, timed out, or refused the request."""

    code = "storage_unavailable"
    http_status = 503


class StorageNotConfiguredError(StorageUnavailableError):
    """Durable object store credentials or bucket are missing."""

    code = "storage_not_configured"


class CleanupInProgressError(ModerationError):
    """Another retention cleanup run holds the single-flight lock."""

    code = "cleanup_in_progress"
    http_status = 409


class RetentionConfigError(ModerationError):
    """Retention config update out of bounds; prior config is unchanged."""

    code = "invalid_retention_config"
    http_status = 400
