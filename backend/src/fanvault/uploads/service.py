"""Submission intake service.

Validates untrusted uploads, writes them to the staging store and records a
pending submission. Nothing is written before every check has passed, and a
row never exists without its staged bytes.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..domain.submissions import (
    SubmissionCategory,
    SubmissionStatus,
    ValidationError,
    is_reviewable_mime_type,
    is_supported_mime_type,
    parse_category,
    validate_file_size,
    validate_filename,
)
from ..infrastructure.storage.staging_store import LocalStagingStore
from ..models.pending_submission import PendingSubmission

logger = logging.getLogger(__name__)


@dataclass
class SubmissionMetadata:
    """Caller-supplied metadata for a submission"""
    submitter_id: Optional[int]
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


@dataclass
class IncomingFile:
    """One uploaded file as received from the transport layer"""
    content: bytes
    filename: Optional[str]
    mime_type: Optional[str]


class SubmissionIntakeService:
    """Accepts user submissions into the review pipeline.

    Example:
        service = SubmissionIntakeService(db, staging, max_size_bytes=10 * 1024 * 1024)
        submission = service.submit(
            content=data,
            filename="cat.png",
            mime_type="image/png",
            metadata=SubmissionMetadata(submitter_id=42, title="Cat"),
        )
    """

    def __init__(self, db: Session, staging: LocalStagingStore, max_size_bytes: int):
        self.db = db
        self.staging = staging
        self.max_size_bytes = max_size_bytes

    def validate(
        self,
        content: bytes,
        filename: Optional[str],
        mime_type: Optional[str],
        metadata: SubmissionMetadata,
    ) -> SubmissionCategory:
        """Run every intake check without side effects.

        Returns:
            SubmissionCategory: Parsed category (default fanart)

        Raises:
            ValidationError: On the first failing check
        """
        is_valid, error_msg = validate_filename(filename)
        if not is_valid:
            raise ValidationError(error_msg)

        if not is_supported_mime_type(mime_type):
            raise ValidationError(f"Unsupported MIME type: {mime_type}")

        if not is_reviewable_mime_type(mime_type):
            raise ValidationError(
                f"Only images can be submitted for review (got {mime_type})"
            )

        is_valid, error_msg = validate_file_size(len(content), self.max_size_bytes)
        if not is_valid:
            raise ValidationError(error_msg)

        try:
            category = parse_category(metadata.category)
        except ValueError:
            allowed = ", ".join(c.value for c in SubmissionCategory)
            raise ValidationError(
                f"Invalid category: {metadata.category}. Allowed: {allowed}"
            )

        if metadata.submitter_id is None:
            raise ValidationError("Submitter is required")

        return category

    def submit(
        self,
        content: bytes,
        filename: Optional[str],
        mime_type: Optional[str],
        metadata: SubmissionMetadata,
    ) -> PendingSubmission:
        """Stage one file and create its pending submission.

        Args:
            content: Raw file bytes
            filename: Name supplied by the uploader
            mime_type: MIME type supplied by the uploader
            metadata: Title, description, category and submitter

        Returns:
            PendingSubmission: The committed pending row

        Raises:
            ValidationError: If any intake check fails (nothing written)
            StagingWriteError: If the bytes cannot be staged (no row created)
        """
        category = self.validate(content, filename, mime_type, metadata)

        key = self.staging.generate_key(filename, category.value)
        self.staging.write(key, content)

        submission = PendingSubmission(
            title=metadata.title or PurePosixPath(filename).stem,
            description=metadata.description,
            category=category,
            original_filename=filename,
            file_size_bytes=len(content),
            mime_type=mime_type,
            staged_path=key,
            public_url=self.staging.public_url(key),
            status=SubmissionStatus.PENDING,
            submitter_id=metadata.submitter_id,
        )

        try:
            self.db.add(submission)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.staging.delete(key)
            logger.error(
                f"Submission insert failed, staged file removed: key={key}",
                exc_info=True,
            )
            raise

        self.db.refresh(submission)

        logger.info(
            f"Submission staged: id={submission.id}, key={key}, "
            f"size={len(content)}, category={category.value}",
            extra={"submission_id": submission.id, "submitter_id": metadata.submitter_id},
        )

        return submission

    def submit_many(
        self,
        files: Sequence[IncomingFile],
        metadata: SubmissionMetadata,
    ) -> List[PendingSubmission]:
        """Batch intake: validate every file first, then submit each.

        A single invalid file rejects the whole batch before anything is
        staged. Titles default to each file's name when the batch shares
        metadata.

        Raises:
            ValidationError: If the batch is empty or any file is invalid
            StagingWriteError: If staging fails part-way; earlier files stay submitted
        """
        if not files:
            raise ValidationError("No files provided. Upload at least one file.")

        for incoming in files:
            self.validate(incoming.content, incoming.filename, incoming.mime_type, metadata)

        per_file_title = len(files) > 1
        submissions = []
        for incoming in files:
            file_metadata = SubmissionMetadata(
                submitter_id=metadata.submitter_id,
                title=None if per_file_title else metadata.title,
                description=metadata.description,
                category=metadata.category,
            )
            submissions.append(
                self.submit(incoming.content, incoming.filename, incoming.mime_type, file_metadata)
            )

        logger.info(
            f"Submission batch complete: count={len(submissions)}, "
            f"submitter_id={metadata.submitter_id}"
        )
        return submissions
