"""Review state machine - reviewer decisions and the review queue"""

from .service import ReviewService, ReviewResult, DecisionParams, SubmissionPage, DEFAULT_REJECT_REASON

__all__ = [
    "ReviewService",
    "ReviewResult",
    "DecisionParams",
    "SubmissionPage",
    "DEFAULT_REJECT_REASON",
]
