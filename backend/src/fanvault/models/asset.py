"""Asset SQLAlchemy model

Asset is the published gallery entry created when a submission is approved.
It intentionally carries no foreign key back to pending_submission, so the
moderation core can delete submission rows without touching published assets.
"""

from sqlalchemy import Column, Integer, Text, DateTime, Enum as SQLEnum

from .base import Base, utcnow
from ..domain.submissions.validation import SubmissionCategory


class Asset(Base):
    """Published image served from durable storage"""
    __tablename__ = "asset"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(
        SQLEnum(
            SubmissionCategory,
            name="assetcategory",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    durable_url = Column(Text, nullable=False)
    durable_key = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        """Convert asset to dictionary representation"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value if self.category else None,
            "durable_url": self.durable_url,
            "durable_key": self.durable_key,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Asset(id={self.id}, durable_key={self.durable_key})>"
