"""
Shared helpers for the upload/review/import routes.
"""

import logging
import os
from typing import Any

from fastapi import HTTPException, UploadFile

from src.adapters.sqlite.repos import SQLiteMasterDataRepo
from src.components.validation import ValidationIssue, build_master_data, load_master_data
from src.domain.entities import UploadSession
from src.rules.models import UploadRules

logger = logging.getLogger(__name__)


def read_upload(
    file: UploadFile, rules: UploadRules, allowed: tuple[str, ...] | None = None
) -> tuple[str, bytes]:
    """Read an uploaded file, enforcing the extension allowlist and size limit."""
    filename = file.filename or ""
    if not filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    extension = os.path.splitext(filename)[1].lower()
    permitted = allowed or tuple(rules.allowlist_extensions)
    if extension not in permitted:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Allowed: {', '.join(permitted)}",
        )

    content = file.file.read()
    if len(content) > rules.max_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File is too large. Maximum size is {rules.max_upload_bytes // (1024 * 1024)}MB",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    return filename, content


def master_data_snapshot(
    path: str, source: SQLiteMasterDataRepo, selected_country: str | None = None
) -> dict[str, Any]:
    """The saved snapshot when one exists, otherwise a fresh one from the database."""
    data = load_master_data(path)
    if data is None:
        logger.info("No master data snapshot at %s; building from database", path)
        data = build_master_data(source)
    if selected_country:
        data["selectedCountry"] = selected_country
    return data


def stored_issues(session: UploadSession) -> list[ValidationIssue]:
    return [ValidationIssue.from_dict(i) for i in session.data.get("issues", [])]


def require_validated(session: UploadSession) -> None:
    """Import may only follow a validation pass with no critical issues."""
    if "issues" not in session.data:
        raise HTTPException(status_code=400, detail="Please validate the data before importing")
    critical = [i for i in stored_issues(session) if i.severity == "critical"]
    if critical:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot import: {len(critical)} critical issue(s) must be fixed first",
        )
