from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["super_admin", "admin", "user"]
EntityStatus = Literal["active", "pending_review", "archived"]
ChangeRequestStatus = Literal["submitted", "approved", "rejected"]
SessionStatus = Literal["uploaded", "validated", "importing", "imported", "failed"]
SessionKind = Literal["media_sufficiency", "share_of_voice", "reach_planning"]
Severity = Literal["critical", "warning", "suggestion"]

ADMIN_ROLES: tuple[str, ...] = ("super_admin", "admin")


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- User & Auth ---


class User(BaseModel):
    id: int | None = None
    email: str
    name: str = ""
    password_hash: str = ""
    role: RoleType = "user"
    # Comma-separated id lists; empty means unrestricted
    accessible_countries: str | None = None
    accessible_brands: str | None = None
    accessible_pages: str | None = None
    can_access_user_dashboard: bool = True
    email_verified: bool = False
    verification_token: str | None = None
    password_reset_token: str | None = None
    password_reset_expires: datetime | None = None
    is_demo: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


# --- Organisational hierarchy ---


class Region(BaseModel):
    id: int | None = None
    name: str


class SubRegion(BaseModel):
    id: int | None = None
    name: str
    region_id: int | None = None


class Cluster(BaseModel):
    id: int | None = None
    name: str


class Country(BaseModel):
    id: int | None = None
    name: str
    region_id: int | None = None
    sub_region_id: int | None = None
    cluster_id: int | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# --- Product taxonomy ---


class BusinessUnit(BaseModel):
    id: int | None = None
    name: str


class Category(BaseModel):
    id: int | None = None
    name: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Range(BaseModel):
    id: int | None = None
    name: str
    status: EntityStatus = "active"
    created_by: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Campaign(BaseModel):
    id: int | None = None
    name: str
    range_id: int | None = None
    status: EntityStatus = "active"
    created_by: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# --- Media taxonomy ---


class MediaType(BaseModel):
    id: int | None = None
    name: str


class MediaSubType(BaseModel):
    id: int | None = None
    name: str
    media_type_id: int | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PMType(BaseModel):
    id: int | None = None
    name: str


# --- Planning ---


class LastUpdate(BaseModel):
    """A financial cycle such as "ABP 2025"."""

    id: int | None = None
    name: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


MONTH_FIELDS: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)


class GamePlan(BaseModel):
    id: int | None = None
    campaign_id: int
    media_sub_type_id: int
    pm_type_id: int | None = None
    country_id: int | None = None
    region_id: int | None = None
    sub_region_id: int | None = None
    business_unit_id: int | None = None
    category_id: int | None = None
    range_id: int | None = None
    last_update_id: int | None = None
    playbook_id: str | None = None
    campaign_archetype: str | None = None
    burst: int | None = None
    start_date: str
    end_date: str
    year: int | None = None
    total_weeks: float | None = None
    total_budget: float = 0.0
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
    q1_budget: float | None = None
    q2_budget: float | None = None
    q3_budget: float | None = None
    q4_budget: float | None = None
    total_woa: float | None = None
    total_woff: float | None = None
    total_trps: float | None = None
    total_r1_plus: float | None = None
    total_r3_plus: float | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def monthly_budgets(self) -> list[float | None]:
        return [getattr(self, m) for m in MONTH_FIELDS]

    def derive_quarters(self) -> None:
        """Fill q1..q4 from the monthly budgets."""
        months = [m or 0.0 for m in self.monthly_budgets()]
        self.q1_budget = sum(months[0:3])
        self.q2_budget = sum(months[3:6])
        self.q3_budget = sum(months[6:9])
        self.q4_budget = sum(months[9:12])


# --- Governance ---


class Brand(BaseModel):
    id: int | None = None
    name: str


class ComplianceRule(BaseModel):
    id: int | None = None
    platform: str
    title: str
    description: str = ""
    category: str = ""
    status: str = "active"
    priority: str = "medium"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Score(BaseModel):
    id: int | None = None
    rule_id: int
    platform: str
    country_id: int
    brand_id: int
    score: int
    trend: int = 0
    month: str
    evaluation: str = "NA"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ChangeRequest(BaseModel):
    id: int | None = None
    score_id: int
    user_id: int | None = None
    requested_score: int
    comments: str = ""
    status: ChangeRequestStatus = "submitted"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FiveStarsCriterion(BaseModel):
    id: int | None = None
    name: str
    description: str = ""


class FiveStarsRating(BaseModel):
    id: int | None = None
    criterion_id: int
    country_id: int
    brand_id: int
    rating: int
    month: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ShareOfVoice(BaseModel):
    id: int | None = None
    country_id: int
    business_unit_id: int
    category: str
    company: str
    position: int = 0
    total_tv_investment: float | None = None
    total_tv_trps: float | None = None
    total_digital_spend: float | None = None
    total_digital_impressions: float | None = None
    uploaded_by: str | None = None
    upload_session: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class MediaSufficiency(BaseModel):
    """One reach-planning row (TV, digital and combined reach)."""

    id: int | None = None
    last_update: str | None = None
    last_update_id: int | None = None
    sub_region: str | None = None
    country: str | None = None
    country_id: int | None = None
    bu: str | None = None
    category: str | None = None
    range: str | None = None
    campaign: str | None = None
    franchise_ns: str | None = None
    campaign_socio_demo_target: str | None = None
    total_country_population_on_target: float | None = None
    tv_copy_length: str | None = None
    tv_target_size: float | None = None
    woa_open_tv: float | None = None
    woa_paid_tv: float | None = None
    total_trps: float | None = None
    tv_planned_r1_plus: float | None = None
    tv_planned_r3_plus: float | None = None
    tv_potential_r1_plus: float | None = None
    cpp_2024: float | None = None
    cpp_2025: float | None = None
    digital_target: str | None = None
    digital_target_size_abs: float | None = None
    woa_pm_ff: float | None = None
    woa_influencers_amplification: float | None = None
    digital_planned_r1_plus: float | None = None
    digital_potential_r1_plus: float | None = None
    planned_combined_reach: float | None = None
    combined_potential_reach: float | None = None
    digital_reach_level_check: str | None = None
    tv_reach_level_check: str | None = None
    combined_reach_level_check: str | None = None
    uploaded_by: str | None = None
    upload_session: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


# --- Upload sessions ---


class UploadSession(BaseModel):
    """Staged upload state persisted between upload, review and import."""

    id: str
    kind: SessionKind = "media_sufficiency"
    original_filename: str = ""
    file_size: int = 0
    record_count: int = 0
    last_update_id: int | None = None
    country: str | None = None
    business_unit_id: int | None = None
    country_id: int | None = None
    media_type: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime | None = None
    last_accessed_at: datetime | None = None
    status: SessionStatus = "uploaded"
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def records(self) -> list[dict[str, Any]]:
        return list(self.data.get("records", []))
