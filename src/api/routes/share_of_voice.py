"""
Share of voice routes: upload/validate/import sheets, save the editable grid
and read the stored figures.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.governance_repos import SQLiteShareOfVoiceRepo
from src.adapters.sqlite.repos import SQLiteBusinessUnitRepo, SQLiteCountryRepo
from src.api.deps import (
    get_business_unit_repo,
    get_country_repo,
    get_country_scope,
    get_rules,
    get_session_store,
    get_share_of_voice_repo,
    get_valid_upload_session,
    require_admin,
)
from src.api.schemas import RecordsUpdateRequest, SovSaveRequest, camelize, session_view
from src.api.uploads import read_upload, require_validated
from src.components.share_of_voice import (
    MEDIA_TYPES,
    SovGridRow,
    SovSaveInput,
    SovSaveOutput,
    SovValidateInput,
    rows_from_records,
    run_save_sov,
    run_validate_sov,
)
from src.components.uploads import UploadParseError, parse_upload
from src.domain.entities import BusinessUnit, UploadSession, User
from src.domain.policy import has_country_access
from src.rules.models import Rules

router = APIRouter()


def _business_unit(business_unit_id: int | None, repo: SQLiteBusinessUnitRepo) -> BusinessUnit:
    bu = repo.get_by_id(business_unit_id) if business_unit_id is not None else None
    if bu is None or bu.id is None:
        raise HTTPException(status_code=400, detail="Invalid business unit ID")
    return bu


def _check_country(user: User, country_id: int | None, countries: SQLiteCountryRepo) -> None:
    if country_id is None or countries.get_by_id(country_id) is None:
        raise HTTPException(status_code=400, detail="Invalid country ID")
    if not has_country_access(user, country_id):
        raise HTTPException(status_code=403, detail="You do not have access to this country")


def _media_type(value: str | None) -> str:
    media_type = (value or "tv").strip().lower()
    if media_type not in MEDIA_TYPES:
        raise HTTPException(status_code=400, detail="Media type must be 'tv' or 'digital'")
    return media_type


def valid_categories(bu: BusinessUnit, rules: Rules, repo: SQLiteBusinessUnitRepo) -> list[str]:
    """Configured categories for the business unit, else those linked in the database."""
    configured = rules.validation.share_of_voice_categories.get(bu.name)
    if configured:
        return list(configured)
    return repo.category_names(bu.id) if bu.id is not None else []


def _saved(result: SovSaveOutput) -> dict[str, Any]:
    if not result.success:
        raise HTTPException(status_code=400, detail={"message": "Save failed", "errors": result.errors})
    return {
        "success": True,
        "saved": result.saved,
        "total": result.total,
        "duplicatesDropped": result.duplicates_dropped,
    }


@router.get("")
def list_share_of_voice(
    country_id: int | None = Query(default=None, alias="countryId"),
    business_unit_id: int | None = Query(default=None, alias="businessUnitId"),
    category: str | None = None,
    current_user: User = Depends(require_admin),
    country_ids: list[int] | None = Depends(get_country_scope),
    repo: SQLiteShareOfVoiceRepo = Depends(get_share_of_voice_repo),
) -> dict[str, Any]:
    rows = repo.list_filtered(country_id, business_unit_id, category, country_ids)
    return {"data": [camelize(r) for r in rows]}


@router.get("/categories")
def list_categories(
    business_unit_id: int = Query(alias="businessUnitId"),
    current_user: User = Depends(require_admin),
    rules: Rules = Depends(get_rules),
    business_units: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
) -> dict[str, Any]:
    bu = _business_unit(business_unit_id, business_units)
    return {"businessUnit": bu.name, "categories": valid_categories(bu, rules, business_units)}


@router.post("/upload")
def upload(
    file: UploadFile = File(...),
    country_id: int | None = Form(default=None, alias="countryId"),
    business_unit_id: int | None = Form(default=None, alias="businessUnitId"),
    media_type: str | None = Form(default=None, alias="mediaType"),
    current_user: User = Depends(require_admin),
    rules: Rules = Depends(get_rules),
    store: FileSessionStore = Depends(get_session_store),
    countries: SQLiteCountryRepo = Depends(get_country_repo),
    business_units: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
) -> dict[str, Any]:
    _check_country(current_user, country_id, countries)
    bu = _business_unit(business_unit_id, business_units)
    kind = _media_type(media_type)

    filename, content = read_upload(file, rules.uploads)
    try:
        parsed = parse_upload(filename, content)
    except UploadParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    session = store.create_session(
        "share_of_voice",
        filename,
        len(content),
        parsed.records,
        country_id=country_id,
        business_unit_id=bu.id,
        media_type=kind,
    )
    return {
        "success": True,
        "sessionId": session.id,
        "recordCount": session.record_count,
        "columns": parsed.headers,
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
    business_units: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
) -> dict[str, Any]:
    bu = _business_unit(session.business_unit_id, business_units)
    inp = SovValidateInput(
        records=session.records,
        business_unit=bu.name,
        valid_categories=valid_categories(bu, rules, business_units),
        media_type="digital" if session.media_type == "digital" else "tv",
    )
    result = run_validate_sov(inp)

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
    repo: SQLiteShareOfVoiceRepo = Depends(get_share_of_voice_repo),
) -> dict[str, Any]:
    require_validated(session)
    if session.country_id is None or session.business_unit_id is None:
        raise HTTPException(status_code=400, detail="Session is missing country or business unit")

    inp = SovSaveInput(
        country_id=session.country_id,
        business_unit_id=session.business_unit_id,
        media_type="digital" if session.media_type == "digital" else "tv",
        rows=rows_from_records(session.records),
        uploaded_by=current_user.email,
        upload_session=session.id,
    )
    response = _saved(run_save_sov(inp, repo))

    session.status = "imported"
    session.data["import_result"] = response
    store.save_session(session)
    return response


@router.post("/save")
def save_grid(
    req: SovSaveRequest,
    current_user: User = Depends(require_admin),
    countries: SQLiteCountryRepo = Depends(get_country_repo),
    business_units: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
    repo: SQLiteShareOfVoiceRepo = Depends(get_share_of_voice_repo),
) -> dict[str, Any]:
    """Replace the country/business unit's figures with the edited grid."""
    _check_country(current_user, req.country_id, countries)
    _business_unit(req.business_unit_id, business_units)
    inp = SovSaveInput(
        country_id=req.country_id,
        business_unit_id=req.business_unit_id,
        media_type="digital" if _media_type(req.media_type) == "digital" else "tv",
        rows=[SovGridRow(**row.model_dump()) for row in req.rows],
        uploaded_by=current_user.email,
        upload_session=req.session_id,
    )
    return _saved(run_save_sov(inp, repo))
