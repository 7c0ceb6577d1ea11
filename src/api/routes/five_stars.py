"""
Five-star ratings: one 1..5 rating per criterion, country, brand and month.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.sqlite.governance_repos import SQLiteFiveStarsRepo
from src.api.deps import get_country_scope, get_five_stars_repo, require_permission
from src.api.schemas import RatingRequest, camelize, raise_for_error, serialize
from src.components.governance import RatingInput, run_upsert_rating
from src.domain.entities import User
from src.domain.policy import has_country_access

router = APIRouter()


@router.get("")
def get_five_stars(
    month: str | None = None,
    brand_id: int | None = Query(default=None, alias="brandId"),
    country_id: int | None = Query(default=None, alias="countryId"),
    current_user: User = Depends(require_permission("governance:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteFiveStarsRepo = Depends(get_five_stars_repo),
) -> dict[str, Any]:
    """Criteria plus, per country, a criterion id -> rating map."""
    ratings: dict[str, dict[str, int]] = {}
    for row in repo.list_ratings(month, brand_id, country_id, None, country_ids):
        country = row.get("country") or str(row["country_id"])
        ratings.setdefault(country, {})[str(row["criterion_id"])] = row["rating"]
    return {
        "criteria": [serialize(c) for c in repo.list_criteria()],
        "ratings": ratings,
    }


@router.post("/ratings")
def list_ratings(
    req: RatingRequest,
    current_user: User = Depends(require_permission("governance:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteFiveStarsRepo = Depends(get_five_stars_repo),
) -> dict[str, Any]:
    rows = repo.list_ratings(req.month, req.brand_id, req.country_id, req.criterion_id, country_ids)
    return {"ratings": [camelize(r) for r in rows]}


@router.put("/ratings")
def upsert_rating(
    req: RatingRequest,
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteFiveStarsRepo = Depends(get_five_stars_repo),
) -> dict[str, Any]:
    if req.criterion_id is None or req.country_id is None or req.brand_id is None:
        raise HTTPException(status_code=400, detail="criterionId, countryId and brandId are required")
    if req.rating is None:
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    if not has_country_access(current_user, req.country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")

    inp = RatingInput(
        criterion_id=req.criterion_id,
        country_id=req.country_id,
        brand_id=req.brand_id,
        rating=req.rating,
        month=req.month or "",
    )
    result = run_upsert_rating(inp, repo)
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return {"rating": serialize(result.item)}


@router.delete("/ratings")
def delete_rating(
    rating_id: int | None = Query(default=None, alias="id"),
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteFiveStarsRepo = Depends(get_five_stars_repo),
) -> dict[str, Any]:
    if rating_id is None:
        raise HTTPException(status_code=400, detail="Rating id is required")
    rating = repo.get_rating(rating_id)
    if rating is None:
        raise HTTPException(status_code=404, detail="Rating not found")
    if not has_country_access(current_user, rating.country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")
    repo.delete_rating(rating_id)
    return {"success": True}
