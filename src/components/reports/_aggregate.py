"""
Dashboard aggregations over game plans and reach planning rows.

Functions here take rows that are already filtered by country access and
return JSON-ready dicts with camelCase keys.

Reach figures are stored as 0..1 fractions; dashboards show them as
percentages.
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from src.domain.entities import MediaSufficiency, User

UNKNOWN = "Unknown"

_CYCLE_YEAR_RE = re.compile(r"20\d{2}")

# (planned reach, ideal reach, target size) per reach channel
_CHANNELS: dict[str, tuple[str, str, Callable[[MediaSufficiency], float]]] = {
    "tv": ("tv_planned_r1_plus", "tv_potential_r1_plus", lambda r: r.tv_target_size or 0.0),
    "digital": (
        "digital_planned_r1_plus",
        "digital_potential_r1_plus",
        lambda r: r.digital_target_size_abs or 0.0,
    ),
    "combined": (
        "planned_combined_reach",
        "combined_potential_reach",
        lambda r: max(r.tv_target_size or 0.0, r.digital_target_size_abs or 0.0),
    ),
}


def _num(value: Any) -> float:
    return float(value) if value is not None else 0.0


def _percent(value: float) -> float:
    return round(value * 100, 2)


def _average(values: Iterable[float | None]) -> float:
    present = [v for v in values if v is not None]
    return sum(present) / len(present) if present else 0.0


# --- Media sufficiency (game plans) ---


def media_sufficiency_summary(plans: list[dict[str, Any]], now: datetime) -> dict[str, Any]:
    """
    Budget breakdowns for the user dashboard.

    ``plans`` are joined game plan rows as returned by the game plan
    repository's ``list_filtered``.
    """
    by_media_type: dict[str, float] = defaultdict(float)
    by_country: dict[str, float] = defaultdict(float)
    by_category: dict[str, float] = defaultdict(float)
    by_quarter = {"Q1": 0.0, "Q2": 0.0, "Q3": 0.0, "Q4": 0.0}
    by_pm_type: dict[str, int] = defaultdict(int)
    campaigns: set[str] = set()
    total = 0.0

    for plan in plans:
        budget = _num(plan.get("total_budget"))
        total += budget
        by_media_type[plan.get("media_type") or UNKNOWN] += budget
        by_country[plan.get("country") or UNKNOWN] += budget
        by_category[plan.get("category") or UNKNOWN] += budget
        for i, quarter in enumerate(by_quarter, start=1):
            by_quarter[quarter] += _num(plan.get(f"q{i}_budget"))
        by_pm_type[plan.get("pm_type") or UNKNOWN] += 1
        if plan.get("campaign"):
            campaigns.add(plan["campaign"])

    percentages = {
        name: (amount / total * 100 if total > 0 else 0.0) for name, amount in by_category.items()
    }

    return {
        "budgetByMediaType": dict(by_media_type),
        "budgetByCountry": dict(by_country),
        "budgetByCategory": dict(by_category),
        "budgetByCategoryPercentage": percentages,
        "budgetByQuarter": by_quarter,
        "campaignsByPMType": dict(by_pm_type),
        "summary": {
            "totalBudget": total,
            "campaignCount": len(campaigns),
            "mediaTypeCount": len(by_media_type),
            "countryCount": len(by_country),
            "gamePlanCount": len(plans),
            "lastUpdate": now.isoformat(),
        },
    }


# --- Reach ---


def empty_reach_summary() -> dict[str, Any]:
    return {
        "summary": {
            "totalRecords": 0,
            "countries": 0,
            "campaigns": 0,
            "totalWoa": 0,
            "totalWoff": 0,
            "totalWeeks": 0,
        },
        "tvReachData": [],
        "digitalReachData": [],
        "combinedReachData": [],
        "countryReachAnalysis": [],
        "categoryReachAnalysis": [],
    }


def reach_by_campaign(rows: list[MediaSufficiency], channel: str) -> list[dict[str, Any]]:
    """
    Per-campaign reach for one channel (tv, digital or combined).

    Only rows carrying both a planned and an ideal reach are counted.
    ``reachAbs`` is the summed planned reach times the summed target size.
    """
    planned_field, ideal_field, target_size = _CHANNELS[channel]
    groups: dict[str, list[MediaSufficiency]] = defaultdict(list)
    for row in rows:
        if getattr(row, planned_field) and getattr(row, ideal_field):
            groups[row.campaign or UNKNOWN].append(row)

    result = []
    for campaign, records in groups.items():
        planned = [getattr(r, planned_field) for r in records]
        ideal = [getattr(r, ideal_field) for r in records]
        current = _percent(_average(planned))
        target = _percent(_average(ideal))
        potential = sum(target_size(r) for r in records)
        result.append(
            {
                "campaign": campaign,
                "country": records[0].country or UNKNOWN,
                "category": records[0].category or UNKNOWN,
                "currentReach": current,
                "idealReach": target,
                "gap": round(target - current, 2),
                "reachAbs": sum(planned) * potential,
                "potential": potential,
            }
        )
    return result


def reach_analysis(rows: list[MediaSufficiency], key: str) -> list[dict[str, Any]]:
    """Average planned vs ideal reach per country or category."""
    groups: dict[str, list[MediaSufficiency]] = defaultdict(list)
    for row in rows:
        groups[getattr(row, key) or UNKNOWN].append(row)

    result = []
    for name, records in sorted(groups.items()):
        entry: dict[str, Any] = {
            key: name,
            "campaigns": len({r.campaign for r in records if r.campaign}),
        }
        for channel, label in (("tv", "Tv"), ("digital", "Digital"), ("combined", "Combined")):
            planned_field, ideal_field, _ = _CHANNELS[channel]
            current = _percent(_average(getattr(r, planned_field) for r in records))
            ideal = _percent(_average(getattr(r, ideal_field) for r in records))
            entry[f"avg{label}Reach"] = current
            entry[f"avg{label}Ideal"] = ideal
            entry[f"{channel}Gap"] = round(ideal - current, 2)
        result.append(entry)
    return result


def reach_summary(rows: list[MediaSufficiency], plans: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Reach dashboard payload.

    ``plans`` are the game plans of the campaigns present in ``rows``; they
    supply the weeks-on-air totals.
    """
    if not rows:
        return empty_reach_summary()

    return {
        "summary": {
            "totalRecords": len(rows),
            "countries": len({r.country for r in rows if r.country}),
            "campaigns": len({r.campaign for r in rows if r.campaign}),
            "totalWoa": sum(_num(p.get("total_woa")) for p in plans),
            "totalWoff": sum(_num(p.get("total_woff")) for p in plans),
            "totalWeeks": sum(_num(p.get("total_weeks")) for p in plans),
        },
        "tvReachData": reach_by_campaign(rows, "tv"),
        "digitalReachData": reach_by_campaign(rows, "digital"),
        "combinedReachData": reach_by_campaign(rows, "combined"),
        "countryReachAnalysis": reach_analysis(rows, "country"),
        "categoryReachAnalysis": reach_analysis(rows, "category"),
    }


# --- Admin dashboard ---


def cycle_year(name: str | None, fallback: int | None) -> int | None:
    """Year of a financial cycle: the first 20xx in its name, else ``fallback``."""
    if name:
        m = _CYCLE_YEAR_RE.search(name)
        if m:
            return int(m.group(0))
    return fallback


def financial_cycles(plans: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Group game plans by financial cycle, newest year first.

    Plans without a cycle are grouped by their own year as "<year> Cycle".
    """
    groups: dict[str, dict[str, Any]] = {}
    for plan in plans:
        name = plan.get("last_update")
        if name:
            key = f"cycle-{plan.get('last_update_id')}"
            year = cycle_year(name, plan.get("year"))
        else:
            year = plan.get("year")
            key = f"Year-{year}"
            name = f"{year} Cycle"

        group = groups.setdefault(
            key,
            {
                "id": plan.get("last_update_id"),
                "name": name,
                "year": year,
                "plans": 0,
                "campaigns": set(),
                "budget": 0.0,
                "countries": set(),
                "businessUnits": set(),
                "mediaTypes": set(),
                "lastUpdated": None,
            },
        )
        group["plans"] += 1
        group["budget"] += _num(plan.get("total_budget"))
        for field, column in (
            ("campaigns", "campaign"),
            ("countries", "country"),
            ("businessUnits", "business_unit"),
            ("mediaTypes", "media_type"),
        ):
            if plan.get(column):
                group[field].add(plan[column])
        updated = plan.get("updated_at")
        if updated and (group["lastUpdated"] is None or str(updated) > group["lastUpdated"]):
            group["lastUpdated"] = str(updated)

    cycles = [
        {
            "id": g["id"],
            "name": g["name"],
            "year": g["year"],
            "totalGamePlans": g["plans"],
            "totalCampaigns": len(g["campaigns"]),
            "totalBudget": g["budget"],
            "countriesCount": len(g["countries"]),
            "businessUnitsCount": len(g["businessUnits"]),
            "mediaTypesCount": len(g["mediaTypes"]),
            "countries": sorted(g["countries"]),
            "businessUnits": sorted(g["businessUnits"]),
            "mediaTypes": sorted(g["mediaTypes"]),
            "lastUpdated": g["lastUpdated"],
        }
        for g in groups.values()
    ]
    cycles.sort(key=lambda c: c["year"] or 0, reverse=True)
    return cycles


def admin_overview(
    users: list[User],
    plans: list[dict[str, Any]],
    cycle_count: int,
    user_access: dict[str, Any],
) -> dict[str, Any]:
    updated = [str(p["updated_at"]) for p in plans if p.get("updated_at")]
    return {
        "totalUsers": len(users),
        "totalAdmins": sum(1 for u in users if u.is_admin),
        "totalGamePlans": len(plans),
        "totalCampaigns": len({p["campaign"] for p in plans if p.get("campaign")}),
        "totalBudget": sum(_num(p.get("total_budget")) for p in plans),
        "uniqueCountries": len({p["country"] for p in plans if p.get("country")}),
        "totalFinancialCycles": cycle_count,
        "lastUpdated": max(updated) if updated else None,
        "userAccess": user_access,
    }
