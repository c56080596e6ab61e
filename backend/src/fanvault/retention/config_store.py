"""Database-backed retention configuration store.

The active RetentionSettings live in the single-row retention_config table so
that every process (API workers and the Celery worker running the nightly
cleanup) sees the same policy. Until an operator changes it, no row exists
and the configured defaults apply.

Updates are validated as a whole before anything is written; a rejected
update leaves the stored settings untouched. Within a process updates are
serialized by a lock, across processes by the database transaction.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

import pydantic
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings
from ..domain.submissions.errors import RetentionConfigError
from ..models.base import utcnow
from ..models.retention_config import RETENTION_CONFIG_ID, RetentionConfig
from .schemas import RetentionSettings, RetentionSettingsUpdate

logger = logging.getLogger(__name__)


class RetentionConfigStore:
    """Shared holder of the active retention settings.

    Example:
        store = RetentionConfigStore(SessionLocal)
        store.update({"retention_days": 14})
        store.get().retention_days  # 14, in this and every other process
    """

    _update_lock = threading.Lock()

    def __init__(
        self,
        session_factory: Callable[[], Session],
        defaults: Optional[RetentionSettings] = None,
    ):
        self._session_factory = session_factory
        self.defaults = defaults or RetentionSettings()

    @classmethod
    def from_settings(
        cls, settings: Settings, session_factory: Callable[[], Session]
    ) -> "RetentionConfigStore":
        """Use RETENTION_DAYS / MAX_RETAINED_REJECTED as the defaults.

        Raises:
            RetentionConfigError: If the environment defaults are out of bounds
        """
        try:
            defaults = RetentionSettings(
                retention_days=settings.RETENTION_DAYS,
                max_retained_rejected=settings.MAX_RETAINED_REJECTED,
            )
        except pydantic.ValidationError as e:
            raise RetentionConfigError(f"Invalid retention defaults: {e}") from e
        return cls(session_factory, defaults)

    def get(self) -> RetentionSettings:
        """Current settings snapshot (immutable)."""
        session = self._session_factory()
        try:
            row = session.get(RetentionConfig, RETENTION_CONFIG_ID)
            if row is None:
                return self.defaults
            return _settings_from_row(row)
        finally:
            session.close()

    def update(self, changes: Dict[str, Any]) -> RetentionSettings:
        """Apply a partial update.

        Args:
            changes: Subset of {retention_days, max_retained_rejected}

        Returns:
            RetentionSettings: The settings now in effect

        Raises:
            RetentionConfigError: If any value is out of bounds or unknown;
                nothing is applied in that case
        """
        try:
            update = RetentionSettingsUpdate.model_validate(changes)
        except pydantic.ValidationError as e:
            raise RetentionConfigError(_describe_validation_error(e)) from e

        update_data = update.model_dump(exclude_unset=True, exclude_none=True)

        with self._update_lock:
            session = self._session_factory()
            try:
                current = self._write(session, update_data)
            finally:
                session.close()

        logger.info(
            "Retention settings updated",
            extra={
                "updates": update_data,
                "retention_days": current.retention_days,
                "max_retained_rejected": current.max_retained_rejected,
            },
        )
        return current

    def _write(self, session: Session, update_data: Dict[str, int]) -> RetentionSettings:
        if session.get(RetentionConfig, RETENTION_CONFIG_ID) is None:
            seeded = self.defaults.model_copy(update=update_data)
            session.add(RetentionConfig(id=RETENTION_CONFIG_ID, **seeded.model_dump()))
            try:
                session.commit()
                return seeded
            except IntegrityError:
                # Another process inserted the row first
                session.rollback()

        # Only the given columns change, in one statement
        if update_data:
            session.query(RetentionConfig).filter(
                RetentionConfig.id == RETENTION_CONFIG_ID
            ).update(
                {**update_data, "updated_at": utcnow()},
                synchronize_session=False,
            )
        session.commit()
        return _settings_from_row(session.get(RetentionConfig, RETENTION_CONFIG_ID))


def _settings_from_row(row: RetentionConfig) -> RetentionSettings:
    try:
        return RetentionSettings(
            retention_days=row.retention_days,
            max_retained_rejected=row.max_retained_rejected,
        )
    except pydantic.ValidationError as e:
        raise RetentionConfigError(f"Stored retention settings are invalid: {e}") from e


def _describe_validation_error(error: pydantic.ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item.get("loc", ())) or "settings"
        parts.append(f"{location}: {item.get('msg')}")
    return "Invalid retention settings: " + "; ".join(parts)
