"""
Governance component - scores, change requests and five-star ratings.
"""

from __future__ import annotations

import logging
from typing import Any

from src.domain.entities import ChangeRequest, FiveStarsRating, Score

from .models import (
    SCORE_REQUIRED_FIELDS,
    ChangeRequestInput,
    ChangeRequestReview,
    GovernanceOutput,
    RatingInput,
    ScoreInput,
    normalise_platform,
)
from .ports import ChangeRequestRepoPort, FiveStarsRepoPort, ScoreRepoPort

logger = logging.getLogger(__name__)

REVIEW_STATUSES = ("submitted", "approved", "rejected")


def _int(payload: dict[str, Any], key: str) -> int:
    return int(payload[key])


def run_create_score(inp: ScoreInput, scores: ScoreRepoPort) -> GovernanceOutput:
    payload = inp.payload
    for key in SCORE_REQUIRED_FIELDS:
        if payload.get(key) in (None, ""):
            return GovernanceOutput(success=False, error=f"Missing required field: {key}")

    try:
        score = Score(
            rule_id=_int(payload, "ruleId"),
            platform=normalise_platform(str(payload["platform"])) or "",
            country_id=_int(payload, "countryId"),
            brand_id=_int(payload, "brandId"),
            score=_int(payload, "score"),
            trend=int(payload.get("trend") or 0),
            month=str(payload["month"]),
            evaluation=str(payload.get("evaluation") or "NA"),
        )
    except (TypeError, ValueError) as e:
        return GovernanceOutput(success=False, error=f"Invalid score: {e}")

    return GovernanceOutput(success=True, item=scores.save(score))


def run_create_change_request(
    inp: ChangeRequestInput, scores: ScoreRepoPort, requests: ChangeRequestRepoPort
) -> GovernanceOutput:
    if scores.get_by_id(inp.score_id) is None:
        return GovernanceOutput(success=False, error="Score not found", error_code="not_found")
    request = ChangeRequest(
        score_id=inp.score_id,
        user_id=inp.user_id,
        requested_score=inp.requested_score,
        comments=inp.comments,
    )
    return GovernanceOutput(success=True, item=requests.save(request))


def run_review_change_request(
    inp: ChangeRequestReview, scores: ScoreRepoPort, requests: ChangeRequestRepoPort
) -> GovernanceOutput:
    """
    Update a change request's status or comments.

    Approving copies the requested score onto the score it targets.
    """
    request = requests.get_by_id(inp.request_id)
    if request is None:
        return GovernanceOutput(success=False, error="Change request not found", error_code="not_found")

    if inp.status is not None and inp.status not in REVIEW_STATUSES:
        return GovernanceOutput(
            success=False, error=f"Status must be one of: {', '.join(REVIEW_STATUSES)}"
        )

    if inp.status == "approved" and request.status != "approved":
        score = scores.get_by_id(request.score_id)
        if score is None:
            return GovernanceOutput(success=False, error="Score not found", error_code="not_found")
        score.score = request.requested_score
        scores.save(score)
        logger.info(
            "Change request %s approved; score %s set to %s",
            request.id, score.id, request.requested_score,
        )

    if inp.status is not None:
        request.status = inp.status  # type: ignore[assignment]
    if inp.comments is not None:
        request.comments = inp.comments
    return GovernanceOutput(success=True, item=requests.save(request))


def run_upsert_rating(inp: RatingInput, five_stars: FiveStarsRepoPort) -> GovernanceOutput:
    if not 1 <= inp.rating <= 5:
        return GovernanceOutput(success=False, error="Rating must be between 1 and 5")
    if not inp.month:
        return GovernanceOutput(success=False, error="Month is required")
    if five_stars.get_criterion(inp.criterion_id) is None:
        return GovernanceOutput(success=False, error="Criterion not found", error_code="not_found")

    rating = five_stars.upsert_rating(
        FiveStarsRating(
            criterion_id=inp.criterion_id,
            country_id=inp.country_id,
            brand_id=inp.brand_id,
            rating=inp.rating,
            month=inp.month,
        )
    )
    return GovernanceOutput(success=True, item=rating)
