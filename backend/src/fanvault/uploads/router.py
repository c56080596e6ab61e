"""Upload API endpoints

Provides POST /uploads for image submission into the review pipeline and
GET /uploads/config for client-side limits.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from ..auth.dependencies import Actor, get_current_actor
from ..config import Settings, get_settings
from ..database import get_db
from ..dependencies import get_durable_store, get_staging_store
from ..domain.submissions import ALLOWED_MIME_TYPES, ValidationError
from ..domain.submissions.ports import DurableObjectStorePort
from ..domain.submissions.validation import REVIEWABLE_MIME_PREFIX
from ..infrastructure.storage.staging_store import LocalStagingStore
from .schemas import SubmissionResponse, UploadConfigResponse, UploadResponse
from .service import IncomingFile, SubmissionIntakeService, SubmissionMetadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_submissions(
    files: Annotated[List[UploadFile], File(...)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[Session, Depends(get_db)],
    staging: Annotated[LocalStagingStore, Depends(get_staging_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    category: Annotated[Optional[str], Form()] = None,
):
    """Submit one or more images for review

    Accepts multipart/form-data with one or more files plus shared metadata.
    Every file is validated before any is staged; one invalid file rejects
    the whole request with 400.

    Returns:
        UploadResponse: Created pending submissions

    Raises:
        ValidationError (400): Bad type, size, filename, category, or batch size
        StagingWriteError (500): Staging area not writable

    Example:
        curl -X POST http://localhost:8000/api/v1/uploads \\
             -H "X-User-Id: 42" \\
             -F "files=@cat.png" -F "title=Cat" -F "category=fanart"
    """
    if len(files) > settings.MAX_BATCH_FILES:
        raise ValidationError(
            f"Too many files. Maximum {settings.MAX_BATCH_FILES} files per batch."
        )

    incoming = []
    for upload in files:
        incoming.append(IncomingFile(
            content=await upload.read(),
            filename=upload.filename,
            mime_type=upload.content_type,
        ))

    service = SubmissionIntakeService(db, staging, settings.MAX_UPLOAD_SIZE_BYTES)
    submissions = service.submit_many(
        incoming,
        SubmissionMetadata(
            submitter_id=actor.user_id,
            title=title,
            description=description,
            category=category,
        ),
    )

    return UploadResponse(
        submissions=[SubmissionResponse.model_validate(s) for s in submissions]
    )


@router.get("/config", response_model=UploadConfigResponse)
def get_upload_config(
    settings: Annotated[Settings, Depends(get_settings)],
    durable_store: Annotated[DurableObjectStorePort, Depends(get_durable_store)],
):
    """Upload limits and whether durable storage is ready for approvals"""
    return UploadConfigResponse(
        max_size_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
        max_batch_files=settings.MAX_BATCH_FILES,
        allowed_mime_types=sorted(ALLOWED_MIME_TYPES),
        reviewable_mime_prefix=REVIEWABLE_MIME_PREFIX,
        durable_storage_configured=durable_store.is_configured(),
    )
