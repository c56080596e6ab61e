"""Review API request/response schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.submissions import ReviewDecision, SubmissionCategory
from ..uploads.schemas import SubmissionResponse


class DecisionRequest(BaseModel):
    """Reviewer decision on a pending submission"""
    decision: ReviewDecision = Field(..., description="approve | reject")
    title: Optional[str] = Field(None, max_length=255, description="Title override (approve)")
    description: Optional[str] = Field(None, description="Description override (approve)")
    category: Optional[SubmissionCategory] = Field(None, description="Category override (approve)")
    reason: Optional[str] = Field(None, max_length=1000, description="Rejection reason (reject)")


class AssetResponse(BaseModel):
    """Published asset created by an approval"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    category: SubmissionCategory
    durable_url: str
    durable_key: str
    created_at: datetime


class DecisionResponse(BaseModel):
    """Result of a recorded decision"""
    decision: ReviewDecision
    submission: SubmissionResponse
    asset: Optional[AssetResponse] = None


class SubmissionListResponse(BaseModel):
    """Paginated review queue"""
    items: List[SubmissionResponse] = Field(..., description="Submissions on this page")
    total: int = Field(..., description="Total matching submissions")
    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total_pages: int = Field(..., description="Number of pages")


class ReviewStatsResponse(BaseModel):
    """Submission counts per status"""
    pending: int
    approved: int
    rejected: int
    total: int
