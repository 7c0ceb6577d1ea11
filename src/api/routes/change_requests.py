from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.clock import SystemClock
from src.adapters.sqlite.governance_repos import SQLiteChangeRequestRepo, SQLiteScoreRepo
from src.api.deps import (
    get_change_request_repo,
    get_clock,
    get_country_scope,
    get_score_repo,
    require_permission,
)
from src.api.schemas import (
    ChangeRequestCreateRequest,
    ChangeRequestReviewRequest,
    camelize,
    raise_for_error,
    serialize,
)
from src.components.governance import (
    ChangeRequestInput,
    ChangeRequestReview,
    normalise_platform,
    run_create_change_request,
    run_review_change_request,
)
from src.domain.entities import User
from src.domain.policy import has_country_access

router = APIRouter()

TIMEFRAMES = ("today", "week", "month", "quarter", "year")


@router.get("")
def list_change_requests(
    status: str | None = None,
    score_id: int | None = Query(default=None, alias="scoreId"),
    month: str | None = None,
    country_id: int | None = Query(default=None, alias="countryId"),
    brand_id: int | None = Query(default=None, alias="brandId"),
    platform: str | None = None,
    timeframe: str | None = None,
    current_user: User = Depends(require_permission("governance:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteChangeRequestRepo = Depends(get_change_request_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    if timeframe is not None and timeframe not in TIMEFRAMES:
        raise HTTPException(
            status_code=400, detail=f"Timeframe must be one of: {', '.join(TIMEFRAMES)}"
        )
    since = clock.start_of_timeframe(timeframe) if timeframe else None
    rows = repo.list_filtered(
        status,
        score_id,
        month,
        country_id,
        brand_id,
        normalise_platform(platform),
        since,
        country_ids,
    )
    return {"changeRequests": [camelize(r) for r in rows]}


@router.post("", status_code=201)
def create_change_request(
    req: ChangeRequestCreateRequest,
    current_user: User = Depends(require_permission("change_requests:create")),
    scores: SQLiteScoreRepo = Depends(get_score_repo),
    repo: SQLiteChangeRequestRepo = Depends(get_change_request_repo),
) -> dict[str, Any]:
    score = scores.get_by_id(req.score_id)
    if score is not None and not has_country_access(current_user, score.country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")
    inp = ChangeRequestInput(
        score_id=req.score_id,
        requested_score=req.requested_score,
        comments=req.comments or "",
        # demo accounts have no users row to reference
        user_id=current_user.id if current_user.id and current_user.id > 0 else None,
    )
    result = run_create_change_request(inp, scores, repo)
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return {"changeRequest": serialize(result.item)}


@router.get("/{request_id}")
def get_change_request(
    request_id: int,
    current_user: User = Depends(require_permission("governance:view")),
    repo: SQLiteChangeRequestRepo = Depends(get_change_request_repo),
) -> dict[str, Any]:
    request = repo.get_by_id(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Change request not found")
    return {"changeRequest": serialize(request)}


@router.put("/{request_id}")
def review_change_request(
    request_id: int,
    req: ChangeRequestReviewRequest,
    current_user: User = Depends(require_permission("governance:edit")),
    scores: SQLiteScoreRepo = Depends(get_score_repo),
    repo: SQLiteChangeRequestRepo = Depends(get_change_request_repo),
) -> dict[str, Any]:
    """Approve or reject; approval writes the requested score."""
    inp = ChangeRequestReview(request_id=request_id, status=req.status, comments=req.comments)
    result = run_review_change_request(inp, scores, repo)
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return {"changeRequest": serialize(result.item)}
