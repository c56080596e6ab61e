"""Review API endpoints

Reviewer-facing queue, single-submission preview, decision recording and
per-status counts. All endpoints require the reviewer (or admin) role.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..auth.dependencies import Actor, require_reviewer
from ..database import get_db
from ..dependencies import get_durable_store, get_notifier, get_staging_store
from ..domain.submissions import NotFoundError, SubmissionCategory, SubmissionStatus
from ..domain.submissions.ports import DurableObjectStorePort, NotificationPort
from ..infrastructure.storage.staging_store import LocalStagingStore
from ..models.pending_submission import PendingSubmission
from ..uploads.schemas import SubmissionResponse
from .schemas import (
    AssetResponse,
    DecisionRequest,
    DecisionResponse,
    ReviewStatsResponse,
    SubmissionListResponse,
)
from .service import DecisionParams, ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/review", tags=["Review"])


def get_review_service(
    db: Annotated[Session, Depends(get_db)],
    staging: Annotated[LocalStagingStore, Depends(get_staging_store)],
    durable_store: Annotated[DurableObjectStorePort, Depends(get_durable_store)],
    notifier: Annotated[NotificationPort, Depends(get_notifier)],
) -> ReviewService:
    return ReviewService(db, staging, durable_store, notifier)


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(
    actor: Annotated[Actor, Depends(require_reviewer)],
    service: Annotated[ReviewService, Depends(get_review_service)],
    status: SubmissionStatus = Query(SubmissionStatus.PENDING, description="Status filter"),
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    category: Optional[SubmissionCategory] = Query(None, description="Category filter"),
):
    """List submissions for review, newest first"""
    result = service.get_submissions(status=status, page=page, limit=limit, category=category)

    return SubmissionListResponse(
        items=[SubmissionResponse.model_validate(s) for s in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/submissions/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: int,
    actor: Annotated[Actor, Depends(require_reviewer)],
    service: Annotated[ReviewService, Depends(get_review_service)],
):
    """Fetch one submission (operator preview)"""
    return SubmissionResponse.model_validate(service.get_submission(submission_id))


@router.post("/submissions/{submission_id}/decision", response_model=DecisionResponse)
def decide_submission(
    submission_id: int,
    request: DecisionRequest,
    actor: Annotated[Actor, Depends(require_reviewer)],
    service: Annotated[ReviewService, Depends(get_review_service)],
):
    """Approve or reject a pending submission

    Returns:
        DecisionResponse: Updated submission, plus the Asset when approved

    Raises:
        NotFoundError (404): Unknown submission
        ConflictError (409): Already reviewed
        StagingCorruptionError (409): Staged bytes missing
        StorageUnavailableError (503): Durable store unreachable; submission stays pending
    """
    result = service.decide(
        submission_id=submission_id,
        reviewer_id=actor.user_id,
        decision=request.decision,
        params=DecisionParams(
            title=request.title,
            description=request.description,
            category=request.category.value if request.category else None,
            reason=request.reason,
        ),
    )

    logger.info(
        f"Decision recorded via API: submission_id={submission_id}, "
        f"decision={request.decision.value}, reviewer_id={actor.user_id}"
    )

    return DecisionResponse(
        decision=result.decision,
        submission=SubmissionResponse.model_validate(result.submission),
        asset=AssetResponse.model_validate(result.asset) if result.asset else None,
    )


@router.get("/stats", response_model=ReviewStatsResponse)
def review_stats(
    actor: Annotated[Actor, Depends(require_reviewer)],
    service: Annotated[ReviewService, Depends(get_review_service)],
):
    """Submission counts per status"""
    return ReviewStatsResponse(**service.count_by_status())


@router.get("/staged/{staged_path:path}", response_class=Response)
def preview_staged_file(
    staged_path: str,
    actor: Annotated[Actor, Depends(require_reviewer)],
    db: Annotated[Session, Depends(get_db)],
    staging: Annotated[LocalStagingStore, Depends(get_staging_store)],
):
    """Serve staged bytes to reviewers only

    Staged files are never exposed through a public static mount; this is the
    target of a pending submission's preview URL.

    Raises:
        NotFoundError (404): No submission references this staged path, or the file is gone
    """
    submission = (
        db.query(PendingSubmission)
        .filter(PendingSubmission.staged_path == staged_path)
        .first()
    )
    if submission is None:
        raise NotFoundError(f"No staged file at {staged_path}")

    try:
        content = staging.read(staged_path)
    except FileNotFoundError:
        raise NotFoundError(f"Staged file missing: {staged_path}")

    return Response(content=content, media_type=submission.mime_type)
