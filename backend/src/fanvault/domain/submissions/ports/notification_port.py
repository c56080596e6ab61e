"""Notification Port - tells submitters about review outcomes.

Calls are fire-and-forget from the moderation core's perspective: the review
service logs and swallows adapter failures so a decision never fails because
a notification could not be delivered.
"""

from abc import ABC, abstractmethod


class NotificationPort(ABC):
    """Port interface for review outcome notifications."""

    @abstractmethod
    def notify_approved(self, user_id: int, title: str) -> None:
        """Tell the submitter their image is now published."""

    @abstractmethod
    def notify_rejected(self, user_id: int, title: str, reason: str) -> None:
        """Tell the submitter their image was rejected and why."""
