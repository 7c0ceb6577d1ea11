"""
Share of voice component - validate and save entry points.
"""

from __future__ import annotations

import logging
import sqlite3

from src.components.validation import can_import, validation_summary
from src.domain.entities import utc_now

from ._impl import ShareOfVoiceValidator, build_entities, group_by_category
from .models import MEDIA_TYPES, SovSaveInput, SovSaveOutput, SovValidateInput, SovValidateOutput
from .ports import ShareOfVoiceRepoPort

logger = logging.getLogger(__name__)


def run_validate_sov(inp: SovValidateInput) -> SovValidateOutput:
    validator = ShareOfVoiceValidator(inp.business_unit, inp.valid_categories, inp.media_type)
    issues = validator.validate_all(inp.records)
    return SovValidateOutput(
        issues=issues,
        summary=validation_summary(issues),
        can_import=can_import(issues),
    )


def run_save_sov(inp: SovSaveInput, repo: ShareOfVoiceRepoPort) -> SovSaveOutput:
    """Replace all share of voice rows for the country and business unit."""
    if inp.media_type not in MEDIA_TYPES:
        return SovSaveOutput(success=False, errors=["Invalid media type"])

    missing = [
        f"Row {i + 1}: category and company are required"
        for i, row in enumerate(inp.rows)
        if not row.category.strip() or not row.company.strip()
    ]
    if missing:
        return SovSaveOutput(success=False, total=len(inp.rows), errors=missing)

    groups, dropped = group_by_category(inp.rows)
    session = inp.upload_session or f"grid-{int(utc_now().timestamp() * 1000)}"
    entities = build_entities(
        groups, inp.country_id, inp.business_unit_id, inp.media_type, inp.uploaded_by, session
    )
    try:
        saved = repo.replace_for(inp.country_id, inp.business_unit_id, entities)
    except sqlite3.Error as e:
        logger.error("Failed to save share of voice data: %s", e)
        return SovSaveOutput(success=False, total=len(inp.rows), errors=[str(e)])

    logger.info(
        "Saved %d %s share of voice rows for country %s / business unit %s",
        saved,
        inp.media_type,
        inp.country_id,
        inp.business_unit_id,
    )
    return SovSaveOutput(success=True, saved=saved, total=len(inp.rows), duplicates_dropped=dropped)
