"""
Importer component - game plan import entry point.

Shell Layer - wraps the importer so callers always get an ImportOutput.
"""

from __future__ import annotations

import logging
import sqlite3

from ._impl import GamePlanImporter
from .models import ImportInput, ImportOutput, ImportRepos, ProgressCallback

logger = logging.getLogger(__name__)


def run_import(
    inp: ImportInput,
    repos: ImportRepos,
    on_progress: ProgressCallback | None = None,
) -> ImportOutput:
    """
    Import staged game plan rows.

    Row-level failures are counted in the output. A failure outside the row
    loop (for example while clearing existing plans) fails the whole import.
    """
    if not inp.records:
        return ImportOutput(success=False, error="No records to import")

    importer = GamePlanImporter(
        repos,
        auto_create=inp.auto_create,
        session_id=inp.session_id,
        on_progress=on_progress,
    )
    try:
        return importer.run(inp)
    except (sqlite3.Error, ValueError) as e:
        logger.exception("Game plan import failed")
        return ImportOutput(success=False, total=len(inp.records), error=str(e))
