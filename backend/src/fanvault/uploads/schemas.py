"""Upload API request/response schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.submissions import SubmissionCategory, SubmissionStatus


class SubmissionResponse(BaseModel):
    """A submission as seen by uploaders and reviewers"""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Submission ID")
    title: str = Field(..., description="Display title")
    description: Optional[str] = Field(None, description="Optional description")
    category: SubmissionCategory = Field(..., description="official | anime | wallpaper | fanart")
    original_filename: str = Field(..., description="Filename supplied by the uploader")
    file_size_bytes: int = Field(..., description="File size in bytes")
    mime_type: str = Field(..., description="MIME type")
    public_url: str = Field(..., description="Staging preview URL, durable URL once approved")
    status: SubmissionStatus = Field(..., description="pending | approved | rejected")
    reject_reason: Optional[str] = Field(None, description="Reason given on rejection")
    submitter_id: int = Field(..., description="User who submitted the image")
    reviewer_id: Optional[int] = Field(None, description="Reviewer who decided")
    reviewed_at: Optional[datetime] = Field(None, description="When the decision was recorded")
    created_at: datetime = Field(..., description="Submission time (UTC)")


class UploadResponse(BaseModel):
    """Response for upload endpoint"""
    submissions: List[SubmissionResponse] = Field(..., description="Created pending submissions")


class UploadConfigResponse(BaseModel):
    """Upload limits and storage readiness"""
    max_size_bytes: int = Field(..., description="Maximum size of a single file")
    max_batch_files: int = Field(..., description="Maximum files per request")
    allowed_mime_types: List[str] = Field(..., description="Upload allow-list")
    reviewable_mime_prefix: str = Field(..., description="MIME prefix accepted for review")
    durable_storage_configured: bool = Field(..., description="Whether approvals can be promoted")
