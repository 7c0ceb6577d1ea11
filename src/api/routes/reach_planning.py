"""
Reach planning upload routes: CSV or Excel sheet -> media_sufficiency rows.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.governance_repos import SQLiteMediaSufficiencyRepo
from src.adapters.sqlite.repos import SQLiteCountryRepo, SQLiteLastUpdateRepo, SQLiteMasterDataRepo
from src.api.deps import (
    Settings,
    get_country_repo,
    get_last_update_repo,
    get_master_data_repo,
    get_media_sufficiency_repo,
    get_rules,
    get_session_store,
    get_settings,
    get_valid_upload_session,
    require_admin,
)
from src.api.schemas import RecordsUpdateRequest, session_view
from src.api.uploads import master_data_snapshot, read_upload, require_validated
from src.components.reach_planning import (
    ReachImportInput,
    ReachValidateInput,
    run_import_reach,
    run_validate_reach,
)
from src.components.uploads import (
    UploadParseError,
    is_csv_file,
    parse_csv,
    parse_reach_planning_excel,
)
from src.domain.entities import UploadSession, User
from src.rules.models import Rules

router = APIRouter()


@router.post("/upload")
def upload(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    store: FileSessionStore = Depends(get_session_store),
    master_repo: SQLiteMasterDataRepo = Depends(get_master_data_repo),
) -> dict[str, Any]:
    filename, content = read_upload(file, rules.uploads)
    try:
        if is_csv_file(filename):
            parsed = parse_csv(content)
        else:
            parsed = parse_reach_planning_excel(content, rules.uploads.reach_sheet)
    except UploadParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    session = store.create_session(
        "reach_planning",
        filename,
        len(content),
        parsed.records,
        data={"master_data": master_data_snapshot(settings.master_data_path, master_repo)},
    )
    return {
        "success": True,
        "sessionId": session.id,
        "recordCount": session.record_count,
        "columns": parsed.headers,
        "sheetUsed": parsed.sheet_used,
        "availableSheets": parsed.available_sheets,
    }


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
    session.data["records"] = req.records
    for key in ("issues", "summary", "can_import"):
        session.data.pop(key, None)
    session.status = "uploaded"
    store.save_session(session)
    return {"success": True, "recordCount": session.record_count}


@router.post("/session/{session_id}/validate")
def validate_session(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    inp = ReachValidateInput(session.records, session.data.get("master_data"))
    result = run_validate_reach(inp, rules.validation.reach_level_values)

    issues = [i.to_dict() for i in result.issues]
    session.data.update(issues=issues, summary=result.summary.to_dict(), can_import=result.can_import)
    session.status = "validated"
    store.save_session(session)
    return {
        "success": True,
        "issues": issues,
        "summary": result.summary.to_dict(),
        "canImport": result.can_import,
    }


@router.post("/session/{session_id}/import")
def import_session(
    current_user: User = Depends(require_admin),
    session: UploadSession = Depends(get_valid_upload_session),
    store: FileSessionStore = Depends(get_session_store),
    repo: SQLiteMediaSufficiencyRepo = Depends(get_media_sufficiency_repo),
    last_updates: SQLiteLastUpdateRepo = Depends(get_last_update_repo),
    countries: SQLiteCountryRepo = Depends(get_country_repo),
) -> dict[str, Any]:
    require_validated(session)

    inp = ReachImportInput(session.records, session.id, uploaded_by=current_user.email)
    result = run_import_reach(inp, repo, last_updates, countries)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    session.status = "imported"
    session.data["import_result"] = {
        "total": result.total,
        "imported": result.imported,
        "failed": result.failed,
        "rowErrors": result.row_errors,
    }
    store.save_session(session)
    return {"success": True, **session.data["import_result"]}
