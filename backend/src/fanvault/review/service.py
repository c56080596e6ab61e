"""Review service for pending submissions.

Implements the reviewer decision (approve / reject) and the review queue
queries. Decisions are recorded with a compare-and-swap on status, so when
two reviewers race on the same submission exactly one wins and the other
gets ConflictError.

Approve ordering:
    1. read staged bytes            (missing → StagingCorruptionError)
    2. upload to durable store      (no DB transaction held open)
    3. CAS pending → approved + insert Asset, one transaction
       (lost race → delete uploaded object, ConflictError)
    4. delete staged file           (best-effort, logged)
    5. notify submitter             (fire-and-forget)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..domain.submissions import (
    DECISION_TARGETS,
    ConflictError,
    NotFoundError,
    ReviewDecision,
    StagingCorruptionError,
    SubmissionCategory,
    SubmissionStatus,
    ValidationError,
    can_transition,
    generate_storage_key,
    parse_category,
)
from ..domain.submissions.ports import DurableObjectStorePort, NotificationPort
from ..infrastructure.storage.staging_store import LocalStagingStore
from ..models.asset import Asset
from ..models.base import utcnow
from ..models.pending_submission import PendingSubmission

logger = logging.getLogger(__name__)

DEFAULT_REJECT_REASON = "Does not meet community guidelines"


@dataclass
class DecisionParams:
    """Optional reviewer input accompanying a decision.

    title/description/category override the submitter's metadata on approve;
    reason is only used on reject.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ReviewResult:
    """Outcome of a recorded decision"""
    submission: PendingSubmission
    decision: ReviewDecision
    asset: Optional[Asset] = None


@dataclass
class SubmissionPage:
    """One page of the review queue"""
    items: List[PendingSubmission] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ReviewService:
    """Records reviewer decisions and serves the review queue.

    Example:
        service = ReviewService(db, staging, durable_store, notifier)
        result = service.decide(
            submission_id=7,
            reviewer_id=1,
            decision=ReviewDecision.APPROVE,
            params=DecisionParams(category="official"),
        )
        result.asset.durable_url
    """

    def __init__(
        self,
        db: Session,
        staging: LocalStagingStore,
        durable_store: DurableObjectStorePort,
        notifier: Optional[NotificationPort] = None,
    ):
        self.db = db
        self.staging = staging
        self.durable_store = durable_store
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(
        self,
        submission_id: int,
        reviewer_id: int,
        decision: ReviewDecision,
        params: Optional[DecisionParams] = None,
    ) -> ReviewResult:
        """Record a review decision on a pending submission.

        Args:
            submission_id: Submission to decide on
            reviewer_id: Reviewer recording the decision
            decision: approve or reject
            params: Metadata overrides (approve) or reason (reject)

        Returns:
            ReviewResult: Updated submission, plus the Asset on approve

        Raises:
            NotFoundError: Unknown submission
            ConflictError: Submission is no longer pending
            ValidationError: Invalid category override
            StagingCorruptionError: Approve with missing staged bytes
            StorageUnavailableError: Durable store failed (submission stays pending)
        """
        params = params or DecisionParams()
        decision = ReviewDecision(decision)

        if decision == ReviewDecision.APPROVE:
            return self.approve(
                submission_id,
                reviewer_id,
                title=params.title,
                description=params.description,
                category=params.category,
            )
        return self.reject(submission_id, reviewer_id, reason=params.reason)

    def approve(
        self,
        submission_id: int,
        reviewer_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> ReviewResult:
        """Promote a pending submission to durable storage and publish it."""
        target_status = DECISION_TARGETS[ReviewDecision.APPROVE]
        submission = self._get_decidable(submission_id, target_status)
        expected_status = submission.status

        if category:
            try:
                target_category = parse_category(category)
            except ValueError:
                allowed = ", ".join(c.value for c in SubmissionCategory)
                raise ValidationError(f"Invalid category: {category}. Allowed: {allowed}")
        else:
            target_category = submission.category

        final_title = title or submission.title
        final_description = description if description is not None else submission.description
        staged_path = submission.staged_path
        original_filename = submission.original_filename
        mime_type = submission.mime_type
        submitter_id = submission.submitter_id

        # End the read transaction before the (slow) durable upload
        self.db.commit()

        content = self._read_staged(submission_id, staged_path)

        durable_key = generate_storage_key(original_filename, target_category.value)
        durable_url = self.durable_store.put(content, durable_key, mime_type)

        now = utcnow()
        asset = None
        try:
            updated = (
                self.db.query(PendingSubmission)
                .filter(
                    PendingSubmission.id == submission_id,
                    PendingSubmission.status == expected_status,
                )
                .update(
                    {
                        PendingSubmission.status: target_status,
                        PendingSubmission.reviewer_id: reviewer_id,
                        PendingSubmission.reviewed_at: now,
                        PendingSubmission.updated_at: now,
                        PendingSubmission.public_url: durable_url,
                        PendingSubmission.durable_key: durable_key,
                        PendingSubmission.title: final_title,
                        PendingSubmission.description: final_description,
                        PendingSubmission.category: target_category,
                    },
                    synchronize_session=False,
                )
            )
            if updated:
                asset = Asset(
                    title=final_title,
                    description=final_description,
                    category=target_category,
                    durable_url=durable_url,
                    durable_key=durable_key,
                    created_at=now,
                )
                self.db.add(asset)
                self.db.commit()
            else:
                self.db.rollback()
        except Exception:
            self.db.rollback()
            self._discard_durable(durable_key)
            raise

        if not updated:
            self._discard_durable(durable_key)
            logger.info(
                f"Approve lost race: submission_id={submission_id}, reviewer_id={reviewer_id}"
            )
            raise ConflictError(f"Submission {submission_id} has already been reviewed")

        logger.info(
            f"Submission approved: id={submission_id}, durable_key={durable_key}, "
            f"asset_id={asset.id}",
            extra={"submission_id": submission_id, "reviewer_id": reviewer_id},
        )

        self._remove_staged_copy(submission_id, staged_path)
        self._notify_approved(submitter_id, final_title)

        return ReviewResult(
            submission=self._get(submission_id),
            decision=ReviewDecision.APPROVE,
            asset=asset,
        )

    def reject(
        self,
        submission_id: int,
        reviewer_id: int,
        reason: Optional[str] = None,
    ) -> ReviewResult:
        """Reject a pending submission. Staged bytes stay until retention removes them."""
        target_status = DECISION_TARGETS[ReviewDecision.REJECT]
        submission = self._get_decidable(submission_id, target_status)

        reason = (reason or "").strip() or DEFAULT_REJECT_REASON
        expected_status = submission.status
        durable_key = submission.durable_key
        submitter_id = submission.submitter_id
        title = submission.title

        now = utcnow()
        updated = (
            self.db.query(PendingSubmission)
            .filter(
                PendingSubmission.id == submission_id,
                PendingSubmission.status == expected_status,
            )
            .update(
                {
                    PendingSubmission.status: target_status,
                    PendingSubmission.reject_reason: reason,
                    PendingSubmission.reviewer_id: reviewer_id,
                    PendingSubmission.reviewed_at: now,
                    PendingSubmission.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            raise ConflictError(f"Submission {submission_id} has already been reviewed")
        self.db.commit()

        logger.info(
            f"Submission rejected: id={submission_id}, reason={reason}",
            extra={"submission_id": submission_id, "reviewer_id": reviewer_id},
        )

        if durable_key:
            # Pending rows never carry a durable key; clean up if one leaked through
            self._discard_durable(durable_key)

        self._notify_rejected(submitter_id, title, reason)

        return ReviewResult(
            submission=self._get(submission_id),
            decision=ReviewDecision.REJECT,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_submissions(
        self,
        status: SubmissionStatus = SubmissionStatus.PENDING,
        page: int = 1,
        limit: int = 20,
        category: Optional[SubmissionCategory] = None,
    ) -> SubmissionPage:
        """List submissions by status, newest first.

        Args:
            status: Status to filter by (default pending)
            page: 1-based page number
            limit: Page size
            category: Optional category filter

        Returns:
            SubmissionPage: Items plus total, page, limit, total_pages
        """
        query = self.db.query(PendingSubmission).filter(PendingSubmission.status == status)
        if category is not None:
            query = query.filter(PendingSubmission.category == category)

        total = query.count()
        items = (
            query.order_by(PendingSubmission.created_at.desc(), PendingSubmission.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return SubmissionPage(items=items, total=total, page=page, limit=limit)

    def get_submission(self, submission_id: int) -> PendingSubmission:
        """Fetch one submission by id.

        Raises:
            NotFoundError: Unknown submission
        """
        return self._get(submission_id)

    def count_by_status(self) -> Dict[str, int]:
        """Submission counts per status in one GROUP BY query.

        Returns:
            dict: {"pending": n, "approved": n, "rejected": n, "total": n}
        """
        rows = (
            self.db.query(PendingSubmission.status, func.count(PendingSubmission.id))
            .group_by(PendingSubmission.status)
            .all()
        )

        counts = {s.value: 0 for s in SubmissionStatus}
        for status, count in rows:
            counts[SubmissionStatus(status).value] = count
        counts["total"] = sum(counts.values())
        return counts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get(self, submission_id: int) -> PendingSubmission:
        submission = self.db.get(PendingSubmission, submission_id)
        if submission is None:
            raise NotFoundError(f"Submission {submission_id} not found")
        return submission

    def _get_decidable(self, submission_id: int, target_status: SubmissionStatus) -> PendingSubmission:
        submission = self._get(submission_id)
        if not can_transition(submission.status, target_status):
            raise ConflictError(
                f"Submission {submission_id} has already been reviewed "
                f"(status: {submission.status.value})"
            )
        return submission

    def _read_staged(self, submission_id: int, staged_path: Optional[str]) -> bytes:
        if not staged_path:
            raise StagingCorruptionError(
                f"Submission {submission_id} has no staged file"
            )
        try:
            return self.staging.read(staged_path)
        except FileNotFoundError:
            logger.error(
                f"Staged file missing for pending submission: id={submission_id}, "
                f"staged_path={staged_path}"
            )
            raise StagingCorruptionError(
                f"Staged file for submission {submission_id} is missing"
            )

    def _remove_staged_copy(self, submission_id: int, staged_path: str) -> None:
        """Delete the local copy after approval and clear staged_path.

        Failure leaves staged_path populated so the leftover file can be found.
        """
        try:
            self.staging.delete(staged_path)
        except OSError as e:
            logger.warning(
                f"Failed to delete staged file after approval: id={submission_id}, "
                f"staged_path={staged_path}, error={e}"
            )
            return

        try:
            self.db.query(PendingSubmission).filter(
                PendingSubmission.id == submission_id
            ).update({PendingSubmission.staged_path: None}, synchronize_session=False)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.warning(
                f"Failed to clear staged_path after approval: id={submission_id}, error={e}"
            )

    def _discard_durable(self, durable_key: str) -> None:
        try:
            self.durable_store.delete(durable_key)
        except Exception as e:
            logger.warning(
                f"Failed to delete durable object: key={durable_key}, error={e}"
            )

    def _notify_approved(self, user_id: int, title: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_approved(user_id, title)
        except Exception as e:
            logger.warning(f"Approval notification failed: user_id={user_id}, error={e}")

    def _notify_rejected(self, user_id: int, title: str, reason: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_rejected(user_id, title, reason)
        except Exception as e:
            logger.warning(f"Rejection notification failed: user_id={user_id}, error={e}")
