"""
Media sufficiency (game plan) upload routes.

Upload a CSV into a staged session, review and edit the rows, validate them
against master data, then import in the background while the client polls
for progress.
"""

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.repos import (
    SQLiteBusinessUnitRepo,
    SQLiteCampaignRepo,
    SQLiteCategoryRepo,
    SQLiteCountryRepo,
    SQLiteGamePlanRepo,
    SQLiteLastUpdateRepo,
    SQLiteMasterDataRepo,
    SQLiteMediaRepo,
    SQLiteRangeRepo,
    SQLiteRegionRepo,
)
from src.api.deps import (
    Settings,
    get_country_repo,
    get_last_update_repo,
    get_master_data_repo,
    get_rules,
    get_session_store,
    get_settings,
    get_valid_upload_session,
    require_admin,
)
from src.api.schemas import (
    ImportRequest,
    RecordsUpdateRequest,
    ValidateRequest,
    session_view,
)
from src.api.uploads import master_data_snapshot, read_upload, require_validated
from src.components.importer import (
    ImportInput,
    ImportOutput,
    ImportProgress,
    ImportRepos,
    run_import,
)
from src.components.uploads import UploadParseError, parse_csv
from src.components.validation import (
    ValidateInput,
    build_master_data,
    check_import_readiness,
    run_validate,
    save_master_data,
    suggest_field_mappings,
)
from src.domain.entities import UploadSession, User
from src.domain.policy import has_country_access
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


def build_import_repos(db_path: str) -> ImportRepos:
    return ImportRepos(
        regions=SQLiteRegionRepo(db_path),
        countries=SQLiteCountryRepo(db_path),
        business_units=SQLiteBusinessUnitRepo(db_path),
        categories=SQLiteCategoryRepo(db_path),
        ranges=SQLiteRangeRepo(db_path),
        campaigns=SQLiteCampaignRepo(db_path),
        media=SQLiteMediaRepo(db_path),
        game_plans=SQLiteGamePlanRepo(db_path),
    )


def _import_in_background(
    session: UploadSession,
    auto_create: bool,
    store: FileSessionStore,
    settings: Settings,
) -> None:
    """Run the import, writing progress into the session as rows complete."""

    def on_progress(progress: ImportProgress) -> None:
        session.data["import_progress"] = progress.to_dict()
        store.save_session(session)

    inp = ImportInput(
        records=session.records,
        last_update_id=session.last_update_id or 0,
        selected_country=session.country,
        auto_create=auto_create,
        session_id=session.id,
    )
    try:
        result = run_import(inp, build_import_repos(settings.db_path), on_progress)
    except Exception as e:
        # a background task has no caller; the session carries the failure
        logger.exception("Import for session %s crashed", session.id)
        result = ImportOutput(success=False, total=len(inp.records), error=str(e))

    session.status = "imported" if result.success else "failed"
    session.data["import_result"] = result.to_dict()
    store.save_session(session)

    if result.success and any(result.auto_created.values()):
        # new master data rows were created; refresh the snapshot
        save_master_data(
            settings.master_data_path, build_master_data(SQLiteMasterDataRepo(settings.db_path))
        )
    logger.info("Import for session %s finished with status %s", session.id, session.status)


@router.post("/upload")
def upload(
    file: UploadFile = File(...),
    last_update_id: int | None = Form(default=None, alias="lastUpdateId"),
    country: str | None = Form(default=None),
    current_user: User = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    store: FileSessionStore = Depends(get_session_store),
    last_updates: SQLiteLastUpdateRepo = Depends(get_last_update_repo),
    countries: SQLiteCountryRepo = Depends(get_country_repo),
    master_repo: SQLiteMasterDataRepo = Depends(get_master_data_repo),
) -> dict[str, Any]:
    """Stage a game plan CSV for review."""
    if last_update_id is None:
        raise HTTPException(status_code=400, detail="Financial cycle (lastUpdateId) is required")
    if not country or not country.strip():
        raise HTTPException(status_code=400, detail="Country is required")

    cycle = last_updates.get_by_id(last_update_id)
    if cycle is None:
        raise HTTPException(status_code=400, detail="Invalid financial cycle")

    country = country.strip()
    existing = countries.get_by_name(country)
    if existing is not None and not has_country_access(current_user, existing.id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")

    filename, content = read_upload(file, rules.uploads, allowed=(".csv",))
    try:
        parsed = parse_csv(content)
    except UploadParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    master_data = master_data_snapshot(settings.master_data_path, master_repo, country)
    session = store.create_session(
        "media_sufficiency",
        filename,
        len(content),
        parsed.records,
        last_update_id=last_update_id,
        country=country,
        data={"master_data": master_data, "financial_cycle": cycle.name},
    )
    return {
        "success": True,
        "sessionId": session.id,
        "recordCount": session.record_count,
        "columns": parsed.headers,
        "fieldMappingSuggestions": [
            {"header": s.header, "suggestions": s.suggestions, "matchType": s.match_type}
            for s in suggest_field_mappings(parsed.headers)
        ],
        "expiresAt": session.expires_at,
    }


@router.get("/master-data")
def get_master_data(
    current_user: User = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    master_repo: SQLiteMasterDataRepo = Depends(get_master_data_repo),
) -> dict[str, Any]:
    return master_data_snapshot(settings.master_data_path, master_repo)


@router.get("/session/{session_id}")
def get_session(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
) -> dict[str, Any]:
    return session_view(session)


@router.put("/session/{session_id}/records")
def update_records(
    req: RecordsUpdateRequest,
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    """Replace the staged rows with the reviewer's edits; prior validation is discarded."""
    session.data["records"] = req.records
    for key in ("issues", "summary", "can_import"):
        session.data.pop(key, None)
    session.status = "uploaded"
    store.save_session(session)
    return {"success": True, "recordCount": session.record_count}


@router.delete("/session/{session_id}")
def delete_session(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    store.delete_session(session.id)
    return {"success": True}


@router.post("/session/{session_id}/validate")
def validate_session(
    req: ValidateRequest | None = None,
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    auto_create = req.auto_create if req else False
    inp = ValidateInput(
        records=session.records,
        master_data=session.data.get("master_data") or {},
        auto_create=auto_create,
        financial_cycle=session.data.get("financial_cycle"),
    )
    result = run_validate(inp, rules.validation)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "Validation failed")

    issues = [i.to_dict() for i in result.issues]
    session.data.update(
        issues=issues,
        summary=result.summary.to_dict(),
        can_import=result.can_import,
        auto_create=auto_create,
    )
    session.status = "validated"
    store.save_session(session)
    return {
        "success": True,
        "issues": issues,
        "summary": result.summary.to_dict(),
        "canImport": result.can_import,
    }


@router.get("/session/{session_id}/readiness")
def import_readiness(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
) -> dict[str, Any]:
    readiness = check_import_readiness(session.records, session.data.get("master_data"))
    return {
        "isValid": readiness.is_valid,
        "errors": readiness.errors,
        "warnings": readiness.warnings,
        "recordCount": readiness.record_count,
        "invalidRecords": readiness.invalid_records,
    }


@router.post("/session/{session_id}/import", status_code=202)
def import_session(
    background_tasks: BackgroundTasks,
    req: ImportRequest | None = None,
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Start the import; poll ``/progress`` for status."""
    if session.status == "importing":
        raise HTTPException(status_code=409, detail="Import already in progress")
    require_validated(session)

    auto_create = req.auto_create if req else bool(session.data.get("auto_create"))
    readiness = check_import_readiness(session.records, session.data.get("master_data"))
    if not readiness.is_valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Records are not ready for import", "errors": readiness.errors},
        )

    session.status = "importing"
    session.data["import_progress"] = ImportProgress(0, session.record_count, "starting").to_dict()
    session.data.pop("import_result", None)
    store.save_session(session)

    background_tasks.add_task(_import_in_background, session, auto_create, store, settings)
    logger.info("Queued import of %d rows for session %s", session.record_count, session.id)
    return {"success": True, "message": "Import started", "sessionId": session.id}


@router.get("/session/{session_id}/progress")
def import_progress(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
) -> dict[str, Any]:
    return {
        "status": session.status,
        "progress": session.data.get("import_progress"),
        "result": session.data.get("import_result"),
    }
