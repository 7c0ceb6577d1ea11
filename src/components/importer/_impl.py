"""
Game plan importer.

Turns validated upload rows into game plans, resolving every taxonomy name
to an id on the way. Lookups go through per-import caches keyed by the
lower-cased name so a large upload touches the database once per distinct
entity rather than once per row.

Key behaviors:
- Existing plans for the countries in the upload and the chosen financial
  cycle are deleted first
- Missing regions, countries, business units, categories, ranges,
  campaigns and media entities are created
- In auto-create mode new ranges and campaigns are flagged for review
- A row repeating campaign, subtype and dates updates the earlier plan
- A failing row is logged and counted; the import carries on
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from src.components.validation import MONTH_COLUMNS, column_value, is_record_empty
from src.core.services.values import (
    clean_text,
    is_blank,
    normalise_key,
    parse_date,
    parse_number,
    parse_reach,
)
from src.domain.entities import (
    MONTH_FIELDS,
    BusinessUnit,
    Campaign,
    Category,
    Country,
    GamePlan,
    MediaSubType,
    MediaType,
    PMType,
    Range,
    Region,
    SubRegion,
    utc_now,
)

from .models import ImportInput, ImportOutput, ImportProgress, ImportRepos, ProgressCallback
from .registry import AUTO_CREATED_BY, AutoCreateRegistry

logger = logging.getLogger(__name__)

ROW_ERRORS_KEPT = 50


class ImportRowError(ValueError):
    """A row cannot be turned into a game plan."""


def _first(record: dict[str, Any], *names: str) -> str:
    for name in names:
        value = record.get(name)
        if not is_blank(value):
            return clean_text(value)
    return ""


class GamePlanImporter:
    def __init__(
        self,
        repos: ImportRepos,
        auto_create: bool = False,
        session_id: str | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.repos = repos
        self.auto_create = auto_create
        self.registry = AutoCreateRegistry(session_id)
        self.on_progress = on_progress
        self._cache: dict[str, dict[str, Any]] = {}

    # --- Progress ---

    def _progress(self, current: int, total: int, stage: str) -> None:
        if self.on_progress is not None:
            self.on_progress(ImportProgress(current=current, total=total, stage=stage))

    # --- Caching helpers ---

    def _cached(self, kind: str, key: str) -> Any:
        return self._cache.get(kind, {}).get(normalise_key(key))

    def _remember(self, kind: str, key: str, entity: Any) -> Any:
        self._cache.setdefault(kind, {})[normalise_key(key)] = entity
        return entity

    def _status_fields(self, context: str) -> dict[str, Any]:
        if not self.auto_create:
            return {}
        return {
            "status": "pending_review",
            "created_by": AUTO_CREATED_BY,
            "notes": self.registry.note(context),
        }

    # --- Find or create ---

    def region(self, name: str) -> Region | None:
        if not name:
            return None
        hit = self._cached("region", name)
        if hit:
            return hit
        region = self.repos.regions.get_region_by_name(name) or self.repos.regions.save_region(
            Region(name=name)
        )
        return self._remember("region", name, region)

    def sub_region(self, name: str, region: Region | None) -> SubRegion | None:
        if not name:
            return None
        hit = self._cached("sub_region", name)
        if hit:
            return hit
        sub_region = self.repos.regions.get_sub_region_by_name(name)
        if sub_region is None:
            sub_region = self.repos.regions.save_sub_region(
                SubRegion(name=name, region_id=region.id if region else None)
            )
        return self._remember("sub_region", name, sub_region)

    def country(self, name: str, region: Region | None, sub_region: SubRegion | None) -> Country:
        hit = self._cached("country", name)
        if hit:
            return hit
        country = self.repos.countries.get_by_name(name)
        if country is None:
            country = self.repos.countries.save(
                Country(
                    name=name,
                    region_id=region.id if region else None,
                    sub_region_id=sub_region.id if sub_region else None,
                )
            )
            logger.info("Created country %r", name)
        return self._remember("country", name, country)

    def business_unit(self, name: str) -> BusinessUnit | None:
        if not name:
            return None
        hit = self._cached("business_unit", name)
        if hit:
            return hit
        repo = self.repos.business_units
        bu = repo.get_by_name(name) or repo.save(BusinessUnit(name=name))
        return self._remember("business_unit", name, bu)

    def category(self, name: str, bu: BusinessUnit | None) -> Category:
        key = f"{name}|{bu.id if bu else ''}"
        hit = self._cached("category", key)
        if hit:
            return hit
        repo = self.repos.categories
        category = None
        if bu is not None and bu.id is not None:
            category = repo.find_in_business_unit(name, bu.id)
        if category is None:
            category = repo.get_by_name(name) or repo.save(Category(name=name))
        if bu is not None and bu.id is not None and category.id is not None:
            self.repos.business_units.link_category(bu.id, category.id)
        return self._remember("category", key, category)

    def range(self, name: str, category: Category) -> Range:
        key = f"{name}|{category.id}"
        hit = self._cached("range", key)
        if hit:
            return hit
        repo = self.repos.ranges
        item = repo.get_by_name(name)
        if item is None:
            item = repo.save(
                Range(name=name, **self._status_fields(f"range in category '{category.name}'"))
            )
            if self.auto_create and item.id is not None:
                self.registry.register("range", name, item.id)
        if item.id is None or category.id is None:
            raise ImportRowError(f"Range '{name}' could not be linked to a category")
        if category.id not in repo.category_ids(item.id):
            repo.add_category(item.id, category.id)
        return self._remember("range", key, item)

    def campaign(self, name: str, item: Range) -> Campaign:
        key = f"{name}|{item.id}"
        hit = self._cached("campaign", key)
        if hit:
            return hit
        repo = self.repos.campaigns
        campaign = repo.get_by_name(name)
        if campaign is None:
            campaign = repo.save(
                Campaign(
                    name=name,
                    range_id=item.id,
                    **self._status_fields(f"campaign in range '{item.name}'"),
                )
            )
            if self.auto_create and campaign.id is not None:
                self.registry.register("campaign", name, campaign.id)
        elif campaign.range_id is None and item.id is not None:
            campaign.range_id = item.id
            campaign.updated_at = utc_now()
            campaign = repo.save(campaign)
        return self._remember("campaign", key, campaign)

    def media_type(self, name: str) -> MediaType:
        hit = self._cached("media_type", name)
        if hit:
            return hit
        repo = self.repos.media
        media_type = repo.get_media_type_by_name(name) or repo.save_media_type(MediaType(name=name))
        return self._remember("media_type", name, media_type)

    def media_sub_type(self, name: str, media_type: MediaType) -> MediaSubType:
        key = f"{name}|{media_type.id}"
        hit = self._cached("media_sub_type", key)
        if hit:
            return hit
        repo = self.repos.media
        if media_type.id is None:
            raise ImportRowError(f"Media type '{media_type.name}' has no id")
        sub_type = repo.find_sub_type(name, media_type.id) or repo.save_sub_type(
            MediaSubType(name=name, media_type_id=media_type.id)
        )
        return self._remember("media_sub_type", key, sub_type)

    def pm_type(self, name: str) -> PMType | None:
        if not name:
            return None
        hit = self._cached("pm_type", name)
        if hit:
            return hit
        repo = self.repos.media
        pm_type = repo.get_pm_type_by_name(name) or repo.save_pm_type(PMType(name=name))
        return self._remember("pm_type", name, pm_type)

    # --- Row mapping ---

    def _country_name(self, record: dict[str, Any], selected_country: str | None) -> str:
        return _first(record, "Country") or clean_text(selected_country)

    def build_plan(
        self,
        record: dict[str, Any],
        last_update_id: int,
        selected_country: str | None,
    ) -> GamePlan:
        """Resolve a row's names and build an unsaved game plan."""
        campaign_name = clean_text(column_value(record, "Campaign"))
        range_name = clean_text(column_value(record, "Range"))
        category_name = clean_text(column_value(record, "Category"))
        media_name = clean_text(column_value(record, "Media"))
        subtype_name = clean_text(column_value(record, "Media Subtype"))
        country_name = self._country_name(record, selected_country)

        missing = [
            label
            for label, value in (
                ("Campaign", campaign_name),
                ("Range", range_name),
                ("Category", category_name),
                ("Media", media_name),
                ("Media Subtype", subtype_name),
                ("Country", country_name),
            )
            if not value
        ]
        if missing:
            raise ImportRowError(f"Missing required field(s): {', '.join(missing)}")

        start = parse_date(column_value(record, "Initial Date"))
        end = parse_date(column_value(record, "End Date"))
        if start is None or end is None:
            raise ImportRowError("Initial Date and End Date must be valid dates")

        region = self.region(_first(record, "Region"))
        sub_region = self.sub_region(_first(record, "Sub Region", "Sub-Region"), region)
        country = self.country(country_name, region, sub_region)
        bu = self.business_unit(_first(record, "Business Unit", "BU"))
        category = self.category(category_name, bu)
        item = self.range(range_name, category)
        campaign = self.campaign(campaign_name, item)
        media_type = self.media_type(media_name)
        sub_type = self.media_sub_type(subtype_name, media_type)
        pm_type = self.pm_type(_first(record, "PM Type"))

        if campaign.id is None or sub_type.id is None:
            raise ImportRowError(
                f"Campaign '{campaign_name}' or media subtype '{subtype_name}' could not be saved"
            )
        year = parse_number(record.get("Year"))
        burst = parse_number(column_value(record, "Burst"))
        plan = GamePlan(
            campaign_id=campaign.id,
            media_sub_type_id=sub_type.id,
            pm_type_id=pm_type.id if pm_type else None,
            country_id=country.id,
            region_id=country.region_id or (region.id if region else None) or (
                sub_region.region_id if sub_region else None
            ),
            sub_region_id=country.sub_region_id or (sub_region.id if sub_region else None),
            business_unit_id=bu.id if bu else None,
            category_id=category.id,
            range_id=item.id,
            last_update_id=last_update_id,
            playbook_id=clean_text(column_value(record, "Playbook ID")) or None,
            campaign_archetype=clean_text(column_value(record, "Campaign Archetype")) or None,
            burst=int(burst) if burst is not None else None,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            year=int(year) if year is not None else start.year,
            total_weeks=parse_number(column_value(record, "Total Weeks")),
            total_budget=parse_number(column_value(record, "Total Budget")) or 0.0,
            total_woa=parse_number(column_value(record, "Total WOA")),
            total_woff=parse_number(column_value(record, "Total WOFF")),
            total_trps=parse_number(column_value(record, "Total TRPs")),
            total_r1_plus=parse_reach(column_value(record, "Total R1+ (%)")),
            total_r3_plus=parse_reach(column_value(record, "Total R3+ (%)")),
        )
        for column, attr in zip(MONTH_COLUMNS, MONTH_FIELDS, strict=True):
            setattr(plan, attr, parse_number(record.get(column)))
        plan.derive_quarters()
        return plan

    def save_plan(self, plan: GamePlan) -> bool:
        """Save ``plan``; returns True when an existing duplicate was updated."""
        existing = self.repos.game_plans.find_duplicate(
            plan.campaign_id,
            plan.media_sub_type_id,
            plan.start_date,
            plan.end_date,
            plan.last_update_id,
            plan.country_id,
        )
        if existing is not None:
            plan.id = existing.id
            plan.created_at = existing.created_at
            plan.updated_at = utc_now()
            self.repos.game_plans.save(plan)
            return True
        self.repos.game_plans.save(plan)
        return False

    # --- Driver ---

    def _clear_existing(self, inp: ImportInput, records: list[dict[str, Any]]) -> int:
        names = {self._country_name(r, inp.selected_country) for r in records}
        country_ids = []
        for name in sorted(n for n in names if n):
            country = self.repos.countries.get_by_name(name)
            if country is not None and country.id is not None:
                country_ids.append(country.id)
        if not country_ids:
            return 0
        deleted = self.repos.game_plans.delete_for_countries(country_ids, inp.last_update_id)
        logger.info(
            "Deleted %d existing game plans for %d countries (last_update_id=%s)",
            deleted,
            len(country_ids),
            inp.last_update_id,
        )
        return deleted

    def run(self, inp: ImportInput) -> ImportOutput:
        records = [r for r in inp.records if not is_record_empty(r)]
        total = len(records)
        self._progress(0, total, "Preparing import")

        deleted = self._clear_existing(inp, records)

        created = updated = failed = 0
        row_errors: list[str] = []
        for i, record in enumerate(records, start=1):
            try:
                plan = self.build_plan(record, inp.last_update_id, inp.selected_country)
                if self.save_plan(plan):
                    updated += 1
                else:
                    created += 1
            except (ValueError, sqlite3.Error) as e:
                failed += 1
                logger.error("Import row %d failed: %s", i, e)
                if len(row_errors) < ROW_ERRORS_KEPT:
                    row_errors.append(f"Row {i}: {e}")
            self._progress(i, total, f"Creating game plans ({i}/{total})")

        self._progress(total, total, "Import completed")
        logger.info(
            "Import finished: %d created, %d updated, %d failed, %d deleted",
            created,
            updated,
            failed,
            deleted,
        )
        return ImportOutput(
            success=True,
            created=created,
            updated=updated,
            deleted=deleted,
            failed=failed,
            total=total,
            auto_created=self.registry.summary(),
            row_errors=row_errors,
        )
