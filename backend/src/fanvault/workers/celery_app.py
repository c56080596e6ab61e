"""Celery application and beat schedule.

Run the worker and scheduler with:
    celery -A fanvault.workers.celery_app worker --loglevel=info
    celery -A fanvault.workers.celery_app beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from ..config import get_settings
from ..observability.logging_config import configure_logging

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

celery_app = Celery(
    "fanvault",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["fanvault.retention.tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
)

celery_app.conf.beat_schedule = {
    'retention-cleanup-daily': {
        'task': 'retention.cleanup_rejected',
        'schedule': crontab(
            hour=settings.RETENTION_CRON_HOUR,
            minute=settings.RETENTION_CRON_MINUTE,
        ),  # 02:00 UTC by default
        'options': {
            'expires': 3600,  # Task expires after 1 hour if not picked up
        },
    },
}
