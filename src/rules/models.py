from pydantic import BaseModel, Field

RoleName = str


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class DemoAccount(BaseModel):
    email: str
    password: str
    name: str = "Demo"
    role: RoleName
    token: str
    accessible_countries: str | None = None
    accessible_pages: str | None = None


class DemoRules(BaseModel):
    enabled: bool = False
    accounts: list[DemoAccount] = Field(default_factory=list)


class AuthRules(BaseModel):
    token_ttl_minutes: int = 60 * 24 * 7
    password_min_length: int = 8
    verification_token_ttl_hours: int = 48
    reset_token_ttl_minutes: int = 60
    demo: DemoRules = Field(default_factory=DemoRules)


class RbacRules(BaseModel):
    roles: dict[RoleName, list[str]]


class UploadRules(BaseModel):
    max_upload_bytes: int
    allowlist_extensions: list[str]
    game_plan_sheet: str = "NIVEA Game Plan Table"
    reach_sheet: str = "NIVEA Reach Sufficiency Table"


class PmTypeCompatibility(BaseModel):
    subtypes: list[str]
    allowed: list[str]


class ValidationRules(BaseModel):
    money_tolerance: float = 0.01
    default_media_types: list[str] = Field(default_factory=lambda: ["Digital", "Traditional"])
    campaign_archetypes: list[str]
    tv_subtypes: list[str]
    r1_required_keywords: list[str]
    r3_required_subtypes: list[str]
    pm_type_compatibility: list[PmTypeCompatibility]
    reach_level_values: list[str]
    share_of_voice_categories: dict[str, list[str]] = Field(default_factory=dict)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    auth: AuthRules
    rbac: RbacRules
    uploads: UploadRules
    validation: ValidationRules
    ops: OpsRules = Field(default_factory=OpsRules)
