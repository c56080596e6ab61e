"""SubmissionStatus state machine for the review lifecycle

State flow:
    pending → approved | rejected

Both targets are terminal for the moderation core. Approved rows are owned by
the gallery afterwards; rejected rows are eventually destroyed by retention.
"""

from enum import Enum
from typing import Optional, Dict, List


class SubmissionStatus(str, Enum):
    """Review status of a user submission"""
    PENDING = "pending"    # Staged, awaiting a reviewer decision
    APPROVED = "approved"  # Promoted to durable storage (terminal)
    REJECTED = "rejected"  # Kept in staging until retention removes it (terminal)


class ReviewDecision(str, Enum):
    """Decision a reviewer can record on a pending submission"""
    APPROVE = "approve"
    REJECT = "reject"


ALLOWED_TRANSITIONS: Dict[Optional[SubmissionStatus], List[SubmissionStatus]] = {
    None: [SubmissionStatus.PENDING],
    SubmissionStatus.PENDING: [SubmissionStatus.APPROVED, SubmissionStatus.REJECTED],
    SubmissionStatus.APPROVED: [],
    SubmissionStatus.REJECTED: [],
}

DECISION_TARGETS: Dict[ReviewDecision, SubmissionStatus] = {
    ReviewDecision.APPROVE: SubmissionStatus.APPROVED,
    ReviewDecision.REJECT: SubmissionStatus.REJECTED,
}


def can_transition(from_status: Optional[SubmissionStatus], to_status: SubmissionStatus) -> bool:
    """Validate if status transition is allowed

    Args:
        from_status: Current status (None for new submissions)
        to_status: Target status

    Returns:
        True if transition is allowed, False otherwise

    Example:
        >>> can_transition(SubmissionStatus.PENDING, SubmissionStatus.APPROVED)
        True
        >>> can_transition(SubmissionStatus.REJECTED, SubmissionStatus.APPROVED)
        False
    """
    allowed = ALLOWED_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def is_terminal(status: SubmissionStatus) -> bool:
    """Whether no further review decision may be recorded"""
    return not ALLOWED_TRANSITIONS.get(status)
