"""PendingSubmission SQLAlchemy model

PendingSubmission is the review record of one user-submitted image.
Tracks staging location, review status, and the reviewer's decision.
"""

from sqlalchemy import Column, Integer, BigInteger, Text, DateTime, Enum as SQLEnum, Index

from .base import Base, utcnow
from ..domain.submissions.submission_status import SubmissionStatus
from ..domain.submissions.validation import SubmissionCategory


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class PendingSubmission(Base):
    """Submission awaiting (or having received) a review decision.

    The staged bytes live in the staging store under ``staged_path`` until the
    submission is approved (bytes promoted to durable storage, local copy
    removed) or rejected and later destroyed by retention.
    """
    __tablename__ = "pending_submission"
    __table_args__ = (
        Index("ix_pending_submission_status_created", "status", "created_at"),
        Index("ix_pending_submission_submitter", "submitter_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(
        SQLEnum(
            SubmissionCategory,
            name="submissioncategory",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=SubmissionCategory.FANART,
    )
    original_filename = Column(Text, nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)
    mime_type = Column(Text, nullable=False)
    staged_path = Column(Text, nullable=True)  # Key relative to the staging root
    public_url = Column(Text, nullable=False)  # Staging preview URL, durable URL once approved
    durable_key = Column(Text, nullable=True)
    status = Column(
        SQLEnum(
            SubmissionStatus,
            name="submissionstatus",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )
    reject_reason = Column(Text, nullable=True)
    submitter_id = Column(Integer, nullable=False)
    reviewer_id = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Convert submission to dictionary representation"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value if self.category else None,
            "original_filename": self.original_filename,
            "file_size_bytes": self.file_size_bytes,
            "mime_type": self.mime_type,
            "staged_path": self.staged_path,
            "public_url": self.public_url,
            "durable_key": self.durable_key,
            "status": self.status.value if self.status else None,
            "reject_reason": self.reject_reason,
            "submitter_id": self.submitter_id,
            "reviewer_id": self.reviewer_id,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<PendingSubmission(id={self.id}, status={self.status}, staged_path={self.staged_path})>"
