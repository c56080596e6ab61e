"""Celery tasks for rejected-content retention.

Tasks:
- retention_cleanup_task: Daily job running at 02:00 UTC (see workers.celery_app)
"""

import logging
from typing import Any, Dict

from celery import shared_task

from ..database import SessionLocal
from ..dependencies import get_retention_config_store, get_staging_store
from ..domain.submissions import CleanupInProgressError
from .lock import CleanupLock, get_redis_client
from .service import RetentionService

logger = logging.getLogger(__name__)


def build_retention_service(db) -> RetentionService:
    """Retention service wired with process-wide collaborators."""
    return RetentionService(
        db=db,
        staging=get_staging_store(),
        config_store=get_retention_config_store(),
        lock=CleanupLock(redis_client=get_redis_client()),
    )


@shared_task(name="retention.cleanup_rejected", bind=True)
def retention_cleanup_task(self) -> Dict[str, Any]:
    """Delete aged-out and excess rejected submissions.

    Scheduled daily at 02:00 UTC via Celery Beat. If another cleanup holds
    the single-flight lock the run is skipped, not queued.

    The task is idempotent - running twice in succession finds nothing
    further to delete.

    Returns:
        Dict with cleanup statistics, or status 'skipped' / 'failed'

    Raises:
        Exception: Logs errors but does not raise (task always completes)
    """
    logger.info("Retention cleanup task started")

    db = SessionLocal()
    try:
        statistics = build_retention_service(db).run_cleanup()

        result = {
            'status': 'completed',
            'job_started_at': statistics.job_started_at.isoformat(),
            'job_completed_at': statistics.job_completed_at.isoformat(),
            'duration_seconds': statistics.duration_seconds,
            'aged_out_deleted': statistics.aged_out_deleted,
            'excess_deleted': statistics.excess_deleted,
            'failed_items': statistics.failed_items,
            'total_deleted': statistics.total_deleted,
            'has_errors': statistics.has_errors,
        }

        logger.info(
            "Retention cleanup task completed successfully",
            extra=result
        )

        return result

    except CleanupInProgressError:
        logger.info("Retention cleanup task skipped: another run is in progress")
        return {
            'status': 'skipped',
            'total_deleted': 0,
        }

    except Exception as e:
        logger.error(
            "Retention cleanup task failed",
            exc_info=True,
            extra={"error": str(e)}
        )

        return {
            'status': 'failed',
            'error': str(e),
            'total_deleted': 0,
        }

    finally:
        db.close()
