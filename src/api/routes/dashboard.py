"""
Dashboard routes. Every report is restricted to the caller's countries.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.clock import SystemClock
from src.adapters.sqlite.governance_repos import SQLiteMediaSufficiencyRepo
from src.adapters.sqlite.repos import SQLiteGamePlanRepo, SQLiteLastUpdateRepo, SQLiteUserRepo
from src.api.deps import (
    get_clock,
    get_country_scope,
    get_game_plan_repo,
    get_last_update_repo,
    get_media_sufficiency_repo,
    get_user_repo,
    require_admin,
    require_permission,
)
from src.components.reports import (
    AdminReportInput,
    MediaSufficiencyReportInput,
    ReachReportInput,
    ReportOutput,
    run_admin_report,
    run_media_sufficiency_report,
    run_reach_report,
)
from src.domain.entities import User

router = APIRouter()
admin_router = APIRouter()


def _payload(result: ReportOutput) -> dict[str, Any]:
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


@router.get("/media-sufficiency")
def media_sufficiency_dashboard(
    last_update_id: int | None = Query(default=None, alias="lastUpdateId"),
    current_user: User = Depends(require_permission("reports:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    plans: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    inp = MediaSufficiencyReportInput(country_ids=country_ids, last_update_id=last_update_id)
    return _payload(run_media_sufficiency_report(inp, plans, clock))


@router.get("/media-sufficiency-reach")
def reach_dashboard(
    last_updates: str | None = Query(default=None, alias="lastUpdates"),
    current_user: User = Depends(require_permission("reports:view")),
    country_ids: list[int] | None = Depends(get_country_scope),
    reach: SQLiteMediaSufficiencyRepo = Depends(get_media_sufficiency_repo),
    plans: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
) -> dict[str, Any]:
    """Reach figures for the comma separated financial cycles in ``lastUpdates``."""
    names = [n.strip() for n in (last_updates or "").split(",") if n.strip()]
    inp = ReachReportInput(last_updates=names, country_ids=country_ids)
    return _payload(run_reach_report(inp, reach, plans))


@admin_router.get("/dashboard")
def admin_dashboard(
    current_user: User = Depends(require_admin),
    country_ids: list[int] | None = Depends(get_country_scope),
    users: SQLiteUserRepo = Depends(get_user_repo),
    plans: SQLiteGamePlanRepo = Depends(get_game_plan_repo),
    last_updates: SQLiteLastUpdateRepo = Depends(get_last_update_repo),
) -> dict[str, Any]:
    user_access = {
        "role": current_user.role,
        "isRestricted": country_ids is not None,
        "accessibleCountryIds": country_ids,
    }
    inp = AdminReportInput(country_ids=country_ids, user_access=user_access)
    return _payload(run_admin_report(inp, users, plans, last_updates))
