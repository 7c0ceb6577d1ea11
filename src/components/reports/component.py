"""
Reports component - dashboard entry points.

Callers resolve the user's accessible countries first; every query below
is restricted to them.
"""

from __future__ import annotations

import logging
import sqlite3

from src.core.services.values import normalise_key

from ._aggregate import admin_overview, financial_cycles, media_sufficiency_summary, reach_summary
from .models import AdminReportInput, MediaSufficiencyReportInput, ReachReportInput, ReportOutput
from .ports import ClockPort, GamePlanSourcePort, LastUpdateSourcePort, ReachSourcePort, UserSourcePort

logger = logging.getLogger(__name__)


def run_media_sufficiency_report(
    inp: MediaSufficiencyReportInput, plans: GamePlanSourcePort, time: ClockPort
) -> ReportOutput:
    try:
        rows = plans.list_filtered({"last_update_id": inp.last_update_id}, inp.country_ids)
    except sqlite3.Error:
        logger.exception("Failed to load game plans for the dashboard")
        return ReportOutput(data={}, success=False, error="Failed to fetch dashboard data")
    return ReportOutput(data=media_sufficiency_summary(rows, time.now_utc()))


def run_reach_report(
    inp: ReachReportInput, reach: ReachSourcePort, plans: GamePlanSourcePort
) -> ReportOutput:
    try:
        rows = reach.list_filtered(inp.last_updates or None, inp.country_ids)
        campaign_names = {normalise_key(r.campaign) for r in rows if r.campaign}
        cycles = {normalise_key(n) for n in inp.last_updates}
        matching = [
            p
            for p in plans.list_filtered(None, inp.country_ids)
            if normalise_key(p.get("campaign")) in campaign_names
            and (not cycles or normalise_key(p.get("last_update")) in cycles)
        ]
    except sqlite3.Error:
        logger.exception("Failed to load reach planning rows")
        return ReportOutput(data={}, success=False, error="Failed to fetch reach data")
    return ReportOutput(data=reach_summary(rows, matching))


def run_admin_report(
    inp: AdminReportInput,
    users: UserSourcePort,
    plans: GamePlanSourcePort,
    last_updates: LastUpdateSourcePort,
) -> ReportOutput:
    try:
        plan_rows = plans.list_filtered(None, inp.country_ids)
        all_users = users.list_all()
        cycle_count = len(last_updates.list_with_counts())
    except sqlite3.Error:
        logger.exception("Failed to build admin dashboard")
        return ReportOutput(data={}, success=False, error="Failed to fetch dashboard data")

    return ReportOutput(
        data={
            "overall": admin_overview(all_users, plan_rows, cycle_count, inp.user_access),
            "financialCycles": financial_cycles(plan_rows),
        }
    )
