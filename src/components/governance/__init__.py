"""
Governance component - compliance scores, change requests and five-star
ratings.
"""

from .component import (
    REVIEW_STATUSES,
    run_create_change_request,
    run_create_score,
    run_review_change_request,
    run_upsert_rating,
)
from .models import (
    PLATFORM_ALIASES,
    ChangeRequestInput,
    ChangeRequestReview,
    GovernanceOutput,
    RatingInput,
    ScoreInput,
    normalise_platform,
)

__all__ = [
    "run_create_score",
    "run_create_change_request",
    "run_review_change_request",
    "run_upsert_rating",
    "REVIEW_STATUSES",
    "PLATFORM_ALIASES",
    "normalise_platform",
    "ScoreInput",
    "ChangeRequestInput",
    "ChangeRequestReview",
    "RatingInput",
    "GovernanceOutput",
]
