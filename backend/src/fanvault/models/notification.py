"""Notification SQLAlchemy model

In-app notification rows written when a submission is reviewed.
"""

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, Index

from .base import Base, utcnow

NOTIFICATION_TYPE_REVIEW = "review"


class Notification(Base):
    """Message shown to a user in their notification inbox"""
    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_read", "user_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default=NOTIFICATION_TYPE_REVIEW)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type})>"
