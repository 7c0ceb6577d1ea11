from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from src.adapters.sqlite.governance_repos import SQLiteScoreRepo
from src.api.deps import get_country_scope, get_score_repo, require_permission
from src.api.schemas import camelize, raise_for_error, serialize
from src.components.governance import ScoreInput, normalise_platform, run_create_score
from src.domain.entities import User
from src.domain.policy import has_country_access

router = APIRouter()


@router.get("")
def list_scores(
    platform: str | None = None,
    country_id: int | None = Query(default=None, alias="countryId"),
    brand_id: int | None = Query(default=None, alias="brandId"),
    rule_id: int | None = Query(default=None, alias="ruleId"),
    month: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    current_user: User = Depends(require_permission("governance:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteScoreRepo = Depends(get_score_repo),
) -> dict[str, Any]:
    rows = repo.list_filtered(
        normalise_platform(platform), country_id, brand_id, rule_id, month, limit, country_ids
    )
    return {"scores": [camelize(r) for r in rows]}


@router.post("", status_code=201)
def create_score(
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteScoreRepo = Depends(get_score_repo),
) -> dict[str, Any]:
    country_id = payload.get("countryId")
    if isinstance(country_id, int) and not has_country_access(current_user, country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")
    result = run_create_score(ScoreInput(payload), repo)
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return {"score": serialize(result.item)}
