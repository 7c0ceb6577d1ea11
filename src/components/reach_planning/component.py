"""
Reach planning component - validate and import entry points.
"""

from __future__ import annotations

import logging
import sqlite3

from src.components.validation import can_import, validation_summary

from ._impl import ReachPlanningValidator, to_media_sufficiency
from .models import ReachImportInput, ReachImportOutput, ReachValidateInput, ReachValidateOutput
from .ports import CountryLookupPort, LastUpdateLookupPort, MediaSufficiencyRepoPort

logger = logging.getLogger(__name__)


def run_validate_reach(inp: ReachValidateInput, reach_levels: list[str]) -> ReachValidateOutput:
    issues = ReachPlanningValidator(inp.master_data, reach_levels).validate_all(inp.records)
    return ReachValidateOutput(
        issues=issues,
        summary=validation_summary(issues),
        can_import=can_import(issues),
    )


def run_import_reach(
    inp: ReachImportInput,
    repo: MediaSufficiencyRepoPort,
    last_updates: LastUpdateLookupPort,
    countries: CountryLookupPort,
) -> ReachImportOutput:
    """
    Store each staged row in media_sufficiency.

    Financial cycle and country names are resolved to ids where they exist
    so reports can filter on them. Failing rows are counted and skipped.
    """
    if not inp.records:
        return ReachImportOutput(success=False, error="No records to import")

    imported = failed = 0
    row_errors: list[str] = []
    cycle_ids: dict[str, int | None] = {}
    country_ids: dict[str, int | None] = {}

    for i, record in enumerate(inp.records):
        try:
            row = to_media_sufficiency(
                record, uploaded_by=inp.uploaded_by, upload_session=inp.session_id
            )
            if row.last_update:
                if row.last_update not in cycle_ids:
                    cycle = last_updates.get_by_name(row.last_update)
                    cycle_ids[row.last_update] = cycle.id if cycle else None
                row.last_update_id = cycle_ids[row.last_update]
            if row.country:
                if row.country not in country_ids:
                    country = countries.get_by_name(row.country)
                    country_ids[row.country] = country.id if country else None
                row.country_id = country_ids[row.country]
            repo.save(row)
            imported += 1
        except (ValueError, sqlite3.Error) as e:
            failed += 1
            logger.error("Reach planning row %d failed: %s", i, e)
            row_errors.append(f"Row {i + 1}: {e}")

    logger.info(
        "Reach planning import for %s: %d imported, %d failed", inp.session_id, imported, failed
    )
    return ReachImportOutput(
        success=True,
        total=len(inp.records),
        imported=imported,
        failed=failed,
        row_errors=row_errors[:20],
    )
