"""Database notifier - persists review outcome notifications as inbox rows.

Uses its own session so a notification is never part of the review
transaction; the review service treats failures here as fire-and-forget.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from ...domain.submissions.ports.notification_port import NotificationPort
from ...models.notification import Notification, NOTIFICATION_TYPE_REVIEW

logger = logging.getLogger(__name__)


class DatabaseNotifier(NotificationPort):
    """NotificationPort adapter writing Notification rows"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def notify_approved(self, user_id: int, title: str) -> None:
        self._create(
            user_id=user_id,
            title="Submission approved",
            content=f'Your image "{title}" was approved and is now published in the gallery.',
        )

    def notify_rejected(self, user_id: int, title: str, reason: str) -> None:
        self._create(
            user_id=user_id,
            title="Submission rejected",
            content=f'Your image "{title}" was rejected. Reason: {reason}',
        )

    def _create(self, user_id: int, title: str, content: str) -> None:
        session = self.session_factory()
        try:
            session.add(Notification(
                user_id=user_id,
                title=title,
                content=content,
                type=NOTIFICATION_TYPE_REVIEW,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.info(
            "Review notification stored",
            extra={"user_id": user_id, "notification_title": title},
        )
