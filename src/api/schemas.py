from typing import Any, NoReturn

from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.domain.entities import UploadSession, User

# error_code values returned by components -> HTTP status
ERROR_STATUS = {
    "invalid": 400,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
}


class CamelModel(BaseModel):
    """Request body accepting camelCase (or snake_case) keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def camelize(row: dict[str, Any]) -> dict[str, Any]:
    return {to_camel(key): value for key, value in row.items()}


def serialize(item: BaseModel | dict[str, Any], exclude: set[str] | None = None) -> dict[str, Any]:
    """Entity or joined row -> JSON-ready dict with camelCase keys."""
    if isinstance(item, BaseModel):
        data = item.model_dump(mode="json", exclude=exclude)
    else:
        data = {k: v for k, v in item.items() if k not in (exclude or set())}
    return camelize(data)


def raise_for_error(error: str | None, error_code: str | None = None) -> NoReturn:
    raise HTTPException(status_code=ERROR_STATUS.get(error_code or "invalid", 400), detail=error)


# --- Users ---
_PRIVATE_USER_FIELDS = {
    "password_hash",
    "verification_token",
    "password_reset_token",
    "password_reset_expires",
}


def user_profile(user: User) -> dict[str, Any]:
    """Public view of a user: no hashes or tokens."""
    return serialize(user, exclude=_PRIVATE_USER_FIELDS)


class UserCreateRequest(CamelModel):
    email: str
    password: str
    name: str = ""
    role: str = "user"
    accessible_countries: str | None = None
    accessible_brands: str | None = None
    accessible_pages: str | None = None
    can_access_user_dashboard: bool = True


class UserUpdateRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str | None = None
    accessible_countries: str | None = None
    accessible_brands: str | None = None
    accessible_pages: str | None = None
    can_access_user_dashboard: bool | None = None


# --- Taxonomy ---
class NameRequest(CamelModel):
    name: str = ""


class SubRegionRequest(CamelModel):
    name: str = ""
    region_id: int | None = None


class CountryRequest(CamelModel):
    name: str = ""
    region_id: int | None = None
    sub_region_id: int | None = None
    cluster_id: int | None = None


class MediaSubTypeRequest(CamelModel):
    name: str = ""
    media_type_id: int | None = None


class CategoryCreateRequest(CamelModel):
    name: str = ""
    business_unit_id: int | None = None


class RangeRequest(CamelModel):
    name: str = ""
    category_ids: list[int] = []


class CampaignRequest(CamelModel):
    name: str = ""
    range_id: int | None = None


# --- Game plans ---
class GamePlanUpdateRequest(CamelModel):
    total_budget: float | None = None
    jan: float | None = None
    feb: float | None = None
    mar: float | None = None
    apr: float | None = None
    may: float | None = None
    jun: float | None = None
    jul: float | None = None
    aug: float | None = None
    sep: float | None = None
    oct: float | None = None
    nov: float | None = None
    dec: float | None = None
    total_woa: float | None = None
    total_woff: float | None = None
    total_weeks: float | None = None
    total_trps: float | None = None
    total_r1_plus: float | None = None
    total_r3_plus: float | None = None


class BulkDeleteRequest(CamelModel):
    country_id: int
    last_update_id: int


# --- Upload sessions ---
class RecordsUpdateRequest(CamelModel):
    records: list[dict[str, Any]]


class ValidateRequest(CamelModel):
    auto_create: bool = False


class ImportRequest(CamelModel):
    auto_create: bool = False


def session_view(session: UploadSession, include_records: bool = True) -> dict[str, Any]:
    """Session metadata plus its staged records, issues and summaries."""
    data = serialize(session, exclude={"data"})
    data["sessionId"] = session.id
    if include_records:
        data["records"] = session.records
    for key in ("issues", "summary", "import_progress", "import_result", "can_import"):
        if key in session.data:
            data[to_camel(key)] = session.data[key]
    return data


# --- Share of voice ---
class SovRowRequest(CamelModel):
    category: str = ""
    company: str = ""
    total_tv_investment: float | None = None
    total_tv_trps: float | None = None
    total_digital_spend: float | None = None
    total_digital_impressions: float | None = None


class SovSaveRequest(CamelModel):
    country_id: int
    business_unit_id: int
    media_type: str = "tv"
    rows: list[SovRowRequest] = []
    session_id: str | None = None


# --- Governance ---
class ComplianceRuleRequest(CamelModel):
    platform: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    status: str | None = None
    priority: str | None = None


class ChangeRequestCreateRequest(CamelModel):
    score_id: int
    requested_score: int
    comments: str | None = None


class ChangeRequestReviewRequest(CamelModel):
    status: str
    comments: str | None = None


class RatingRequest(CamelModel):
    criterion_id: int | None = None
    country_id: int | None = None
    brand_id: int | None = None
    rating: int | None = None
    month: str | None = None
