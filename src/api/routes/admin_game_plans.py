from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.sqlite.repos import SQLiteGamePlanRepo
from src.api.deps import get_country_scope, get_game_plan_repo, require_admin
from src.api.schemas import BulkDeleteRequest, GamePlanUpdateRequest, camelize, serialize
from src.domain.entities import GamePlan, User
from src.domain.policy import has_country_access

router = APIRouter()


def _get_accessible(plan_id: int, repo: SQLiteGamePlanRepo, user: User) -> GamePlan:
    plan = repo.get_by_id(plan_id)
    if plan is None or not has_country_access(user, plan.country_id):
        raise HTTPException(status_code=404, detail="Game plan not found")
    return plan


@router.get("")
def list_game_plans(
    country_id: int | None = Query(default=None, alias="countryId"),
    last_update_id: int | None = Query(default=None, alias="lastUpdateId"),
    campaign_id: int | None = Query(default=None, alias="campaignId"),
    category_id: int | None = Query(default=None, alias="categoryId"),
    year: int | None = None,
    limit: int | None = Query(default=None, ge=1),
    current_user: User = Depends(require_admin),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    filters = {
        "country_id": country_id,
        "last_update_id": last_update_id,
        "campaign_id": campaign_id,
        "category_id": category_id,
        "year": year,
    }
    rows = repo.list_filtered(filters, country_ids, limit)
    return {"gamePlans": [camelize(r) for r in rows], "count": len(rows)}


@router.get("/{plan_id}")
def get_game_plan(
    plan_id: int,
    current_user: User = Depends(require_admin),
    repo: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    return {"gamePlan": serialize(_get_accessible(plan_id, repo, current_user))}


@router.put("/{plan_id}")
def update_game_plan(
    plan_id: int,
    req: GamePlanUpdateRequest,
    current_user: User = Depends(require_admin),
    repo: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    """Update budget and reach figures; quarterly budgets are re-derived."""
    plan = _get_accessible(plan_id, repo, current_user)
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(plan, field, value)
    if plan.total_budget is None or plan.total_budget < 0:
        raise HTTPException(status_code=400, detail="Total budget must be zero or positive")
    plan.derive_quarters()
    return {"gamePlan": serialize(repo.save(plan))}


@router.delete("/{plan_id}")
def delete_game_plan(
    plan_id: int,
    current_user: User = Depends(require_admin),
    repo: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    _get_accessible(plan_id, repo, current_user)
    repo.delete(plan_id)
    return {"success": True, "message": "Game plan deleted successfully"}


@router.post("/bulk-delete")
def bulk_delete_game_plans(
    req: BulkDeleteRequest,
    current_user: User = Depends(require_admin),
    repo: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    """Delete every game plan of one country in one financial cycle."""
    if not has_country_access(current_user, req.country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")
    deleted = repo.delete_for_countries([req.country_id], req.last_update_id)
    return {"success": True, "deleted": deleted}
