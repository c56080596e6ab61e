"""Pydantic schemas for retention settings and statistics.

This module defines retention-related schemas:
- RetentionSettings: Active retention policy for rejected submissions
- RetentionSettingsUpdate: Partial update (PATCH) payload
- RetentionStatistics: Outcome of one cleanup run
- CleanupResult: Manual cleanup envelope (never raises)
- RetentionStats: Live preview of what the next run would delete
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

RETENTION_DAYS_MIN = 1
RETENTION_DAYS_MAX = 365
MAX_RETAINED_MIN = 10
MAX_RETAINED_MAX = 10000


class RetentionSettings(BaseModel):
    """Retention policy for rejected submissions.

    Two independent rules, applied in order on every run:
    - Age rule: rejected submissions older than retention_days are deleted
    - Count rule: only the newest max_retained_rejected are kept
    """
    model_config = ConfigDict(frozen=True)

    retention_days: int = Field(
        default=7,
        ge=RETENTION_DAYS_MIN,
        le=RETENTION_DAYS_MAX,
        description="Days a rejected submission is kept (1-365)"
    )

    max_retained_rejected: int = Field(
        default=100,
        ge=MAX_RETAINED_MIN,
        le=MAX_RETAINED_MAX,
        description="Maximum number of rejected submissions kept (10-10000)"
    )


class RetentionSettingsUpdate(BaseModel):
    """Schema for updating retention settings (partial updates allowed).

    All fields optional. Used for PATCH /retention/settings.
    """
    model_config = ConfigDict(extra="forbid")

    retention_days: Optional[int] = Field(
        None,
        ge=RETENTION_DAYS_MIN,
        le=RETENTION_DAYS_MAX,
        description="Days a rejected submission is kept"
    )

    max_retained_rejected: Optional[int] = Field(
        None,
        ge=MAX_RETAINED_MIN,
        le=MAX_RETAINED_MAX,
        description="Maximum number of rejected submissions kept"
    )


class RetentionStatistics(BaseModel):
    """Statistics from a retention cleanup run.

    Tracks how many rejected submissions each rule deleted and how many
    items failed. Used for logging and the manual cleanup response.
    """

    job_started_at: datetime = Field(
        description="When the cleanup run started"
    )

    job_completed_at: datetime = Field(
        description="When the cleanup run completed"
    )

    duration_seconds: float = Field(
        ge=0.0,
        description="Run duration in seconds"
    )

    aged_out_deleted: int = Field(
        default=0,
        ge=0,
        description="Rejected submissions deleted by the age rule"
    )

    excess_deleted: int = Field(
        default=0,
        ge=0,
        description="Rejected submissions deleted by the count rule"
    )

    failed_items: int = Field(
        default=0,
        ge=0,
        description="Items whose file or row deletion failed"
    )

    @property
    def total_deleted(self) -> int:
        """Total number of rejected submissions deleted."""
        return self.aged_out_deleted + self.excess_deleted

    @property
    def has_errors(self) -> bool:
        """Whether any item failed during the run."""
        return self.failed_items > 0


class CleanupResult(BaseModel):
    """Outcome envelope for a manually triggered cleanup"""

    success: bool
    message: str
    error: Optional[str] = None
    statistics: Optional[RetentionStatistics] = None


class RetentionStats(BaseModel):
    """Live view of rejected-content retention, recomputed from current settings"""

    total_rejected: int = Field(ge=0, description="Rejected submissions currently stored")
    aged_out_count: int = Field(ge=0, description="Rejected submissions past the age limit")
    excess_count: int = Field(ge=0, description="Rejected submissions over the count limit")
    retention_days: int
    max_retained_rejected: int
    next_cleanup_needed: bool = Field(description="Whether the next run would delete anything")
