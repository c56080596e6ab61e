"""Retention service for rejected submissions.

This service implements the retention policy for rejected content:
- Age rule: delete rejected submissions older than retention_days
- Count rule: keep at most max_retained_rejected rejected submissions,
  deleting the oldest (created_at, then id) first

The age rule always runs before the count rule. Each item is deleted on its
own: staged file first (idempotent), then the row, guarded by status so a
row that vanished or changed is a no-op. A failing item is logged and
counted and the run continues.

All operations are idempotent and can be safely retried.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.submissions import CleanupInProgressError, SubmissionStatus
from ..infrastructure.storage.staging_store import LocalStagingStore
from ..models.base import utcnow
from ..models.pending_submission import PendingSubmission
from .config_store import RetentionConfigStore
from .lock import CleanupLock
from .schemas import CleanupResult, RetentionSettings, RetentionStatistics, RetentionStats

logger = logging.getLogger(__name__)


class RetentionService:
    """Service for executing retention cleanup of rejected submissions.

    Provides:
    - run_cleanup: one full run (age rule, then count rule) under the lock
    - manual_cleanup: operator-triggered run that never raises
    - get_stats: live preview of what the next run would delete
    - get_config / update_config: runtime policy adjustments
    """

    def __init__(
        self,
        db: Session,
        staging: LocalStagingStore,
        config_store: RetentionConfigStore,
        lock: Optional[CleanupLock] = None,
    ):
        """Initialize retention service.

        Args:
            db: Database session
            staging: Staging store holding rejected files
            config_store: Active retention settings
            lock: Single-flight guard (process-local only when omitted)
        """
        self.db = db
        self.staging = staging
        self.config_store = config_store
        self.lock = lock or CleanupLock()

    def get_config(self) -> RetentionSettings:
        return self.config_store.get()

    def update_config(self, changes: dict) -> RetentionSettings:
        """Apply a partial settings update.

        Raises:
            RetentionConfigError: If a value is out of bounds (nothing applied)
        """
        return self.config_store.update(changes)

    def calculate_cutoff(self, settings: RetentionSettings, now: Optional[datetime] = None) -> datetime:
        """Rejected submissions created before this instant are aged out."""
        return (now or utcnow()) - timedelta(days=settings.retention_days)

    def run_cleanup(self, now: Optional[datetime] = None) -> RetentionStatistics:
        """Run one cleanup pass.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            RetentionStatistics: Per-rule deletion counts and failures

        Raises:
            CleanupInProgressError: If another run holds the lock
        """
        with self.lock.hold() as acquired:
            if not acquired:
                raise CleanupInProgressError("A retention cleanup is already running")
            return self._execute(now)

    def manual_cleanup(self) -> CleanupResult:
        """Run cleanup on operator request. Never raises."""
        try:
            statistics = self.run_cleanup()
        except CleanupInProgressError as e:
            logger.info("Manual retention cleanup skipped: another run is in progress")
            return CleanupResult(success=False, message=e.message, error=e.code)
        except Exception as e:
            logger.error("Manual retention cleanup failed", exc_info=True)
            return CleanupResult(success=False, message="Cleanup failed", error=str(e))

        return CleanupResult(
            success=True,
            message=(
                f"Cleanup completed: {statistics.total_deleted} deleted "
                f"({statistics.aged_out_deleted} aged out, {statistics.excess_deleted} excess), "
                f"{statistics.failed_items} failed"
            ),
            statistics=statistics,
        )

    def get_stats(self, now: Optional[datetime] = None) -> RetentionStats:
        """Live retention stats, recomputed from the current settings."""
        settings = self.config_store.get()
        cutoff = self.calculate_cutoff(settings, now)

        rejected = self.db.query(PendingSubmission).filter(
            PendingSubmission.status == SubmissionStatus.REJECTED
        )
        total_rejected = rejected.count()
        aged_out_count = rejected.filter(PendingSubmission.created_at < cutoff).count()
        excess_count = max(0, total_rejected - settings.max_retained_rejected)

        return RetentionStats(
            total_rejected=total_rejected,
            aged_out_count=aged_out_count,
            excess_count=excess_count,
            retention_days=settings.retention_days,
            max_retained_rejected=settings.max_retained_rejected,
            next_cleanup_needed=aged_out_count > 0 or excess_count > 0,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, now: Optional[datetime]) -> RetentionStatistics:
        started_at = utcnow()
        settings = self.config_store.get()
        cutoff = self.calculate_cutoff(settings, now)

        logger.info(
            "Retention cleanup started",
            extra={
                "retention_days": settings.retention_days,
                "max_retained_rejected": settings.max_retained_rejected,
                "cutoff": cutoff.isoformat(),
            },
        )

        aged_out_deleted, aged_failed = self._cleanup_aged_out(cutoff)
        excess_deleted, excess_failed = self._cleanup_excess(settings.max_retained_rejected)

        completed_at = utcnow()
        statistics = RetentionStatistics(
            job_started_at=started_at,
            job_completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            aged_out_deleted=aged_out_deleted,
            excess_deleted=excess_deleted,
            failed_items=aged_failed + excess_failed,
        )

        logger.info(
            "Retention cleanup completed",
            extra={
                "aged_out_deleted": statistics.aged_out_deleted,
                "excess_deleted": statistics.excess_deleted,
                "failed_items": statistics.failed_items,
                "duration_seconds": statistics.duration_seconds,
            },
        )
        return statistics

    def _cleanup_aged_out(self, cutoff: datetime) -> Tuple[int, int]:
        candidates = (
            self.db.query(PendingSubmission.id, PendingSubmission.staged_path)
            .filter(
                PendingSubmission.status == SubmissionStatus.REJECTED,
                PendingSubmission.created_at < cutoff,
            )
            .order_by(PendingSubmission.created_at.asc(), PendingSubmission.id.asc())
            .all()
        )
        self.db.commit()

        if candidates:
            logger.info(f"Age rule: {len(candidates)} rejected submissions past cutoff")
        return self._delete_items(candidates)

    def _cleanup_excess(self, max_retained: int) -> Tuple[int, int]:
        total = (
            self.db.query(PendingSubmission)
            .filter(PendingSubmission.status == SubmissionStatus.REJECTED)
            .count()
        )
        excess = total - max_retained
        if excess <= 0:
            self.db.commit()
            return 0, 0

        logger.info(
            f"Count rule: {total} rejected submissions, limit {max_retained}, "
            f"deleting {excess} oldest"
        )

        candidates = (
            self.db.query(PendingSubmission.id, PendingSubmission.staged_path)
            .filter(PendingSubmission.status == SubmissionStatus.REJECTED)
            .order_by(PendingSubmission.created_at.asc(), PendingSubmission.id.asc())
            .limit(excess)
            .all()
        )
        self.db.commit()
        return self._delete_items(candidates)

    def _delete_items(self, candidates: List[Tuple[int, Optional[str]]]) -> Tuple[int, int]:
        deleted = 0
        failed = 0
        for submission_id, staged_path in candidates:
            try:
                if self._delete_item(submission_id, staged_path):
                    deleted += 1
            except (OSError, ValueError, SQLAlchemyError) as e:
                self.db.rollback()
                failed += 1
                logger.error(
                    f"Failed to delete rejected submission: id={submission_id}, "
                    f"staged_path={staged_path}, error={e}",
                    extra={"submission_id": submission_id},
                )
        return deleted, failed

    def _delete_item(self, submission_id: int, staged_path: Optional[str]) -> bool:
        """Delete one rejected submission. Returns False if the row was already gone."""
        if staged_path:
            self.staging.delete(staged_path)

        removed = (
            self.db.query(PendingSubmission)
            .filter(
                PendingSubmission.id == submission_id,
                PendingSubmission.status == SubmissionStatus.REJECTED,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()

        if removed:
            logger.debug(f"Deleted rejected submission: id={submission_id}")
        return removed > 0
