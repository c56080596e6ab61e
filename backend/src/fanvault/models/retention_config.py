"""RetentionConfig SQLAlchemy model

Single row holding the operator-adjusted retention policy. The API process
and the Celery worker both read it, so a runtime change reaches the nightly
cleanup.
"""

from sqlalchemy import Column, Integer, DateTime

from .base import Base, utcnow

RETENTION_CONFIG_ID = 1


class RetentionConfig(Base):
    """Active retention bounds (one row, id=1)"""
    __tablename__ = "retention_config"

    id = Column(Integer, primary_key=True, default=RETENTION_CONFIG_ID)
    retention_days = Column(Integer, nullable=False)
    max_retained_rejected = Column(Integer, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return (
            f"<RetentionConfig(retention_days={self.retention_days}, "
            f"max_retained_rejected={self.max_retained_rejected})>"
        )
