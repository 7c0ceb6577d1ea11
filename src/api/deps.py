import os
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.governance_repos import (
    SQLiteBrandRepo,
    SQLiteChangeRequestRepo,
    SQLiteComplianceRuleRepo,
    SQLiteFiveStarsRepo,
    SQLiteMediaSufficiencyRepo,
    SQLiteScoreRepo,
    SQLiteShareOfVoiceRepo,
)
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
    SQLiteUserRepo,
)
from src.components.auth.demo import find_demo_by_id, find_demo_by_token
from src.domain.entities import UploadSession, User
from src.domain.policy import PolicyEngine, get_accessible_country_ids
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("MG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "media_governance.db")
        self.sessions_dir = self.data_dir / "sessions"
        self.master_data_path = str(self.data_dir / "master_data.json")
        self.migrations_dir = str(self.base_dir / "migrations")
        self.rules_path = self.base_dir / "rules.yaml"
        self.app_url = os.environ.get("MG_APP_URL", "http://localhost:3000").rstrip("/")
        self.session_timeout_hours = float(os.environ.get("SESSION_TIMEOUT_HOURS", "6"))
        self.session_cleanup_interval_hours = float(
            os.environ.get("SESSION_CLEANUP_INTERVAL_HOURS", "6")
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_region_repo(settings: Settings = Depends(get_settings)) -> SQLiteRegionRepo:
    return SQLiteRegionRepo(settings.db_path)


def get_country_repo(settings: Settings = Depends(get_settings)) -> SQLiteCountryRepo:
    return SQLiteCountryRepo(settings.db_path)


def get_business_unit_repo(settings: Settings = Depends(get_settings)) -> SQLiteBusinessUnitRepo:
    return SQLiteBusinessUnitRepo(settings.db_path)


def get_category_repo(settings: Settings = Depends(get_settings)) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path)


def get_range_repo(settings: Settings = Depends(get_settings)) -> SQLiteRangeRepo:
    return SQLiteRangeRepo(settings.db_path)


def get_campaign_repo(settings: Settings = Depends(get_settings)) -> SQLiteCampaignRepo:
    return SQLiteCampaignRepo(settings.db_path)


def get_media_repo(settings: Settings = Depends(get_settings)) -> SQLiteMediaRepo:
    return SQLiteMediaRepo(settings.db_path)


def get_last_update_repo(settings: Settings = Depends(get_settings)) -> SQLiteLastUpdateRepo:
    return SQLiteLastUpdateRepo(settings.db_path)


def get_game_plan_repo(settings: Settings = Depends(get_settings)) -> SQLiteGamePlanRepo:
    return SQLiteGamePlanRepo(settings.db_path)


def get_master_data_repo(settings: Settings = Depends(get_settings)) -> SQLiteMasterDataRepo:
    return SQLiteMasterDataRepo(settings.db_path)


def get_brand_repo(settings: Settings = Depends(get_settings)) -> SQLiteBrandRepo:
    return SQLiteBrandRepo(settings.db_path)


def get_compliance_rule_repo(settings: Settings = Depends(get_settings)) -> SQLiteComplianceRuleRepo:
    return SQLiteComplianceRuleRepo(settings.db_path)


def get_score_repo(settings: Settings = Depends(get_settings)) -> SQLiteScoreRepo:
    return SQLiteScoreRepo(settings.db_path)


def get_change_request_repo(settings: Settings = Depends(get_settings)) -> SQLiteChangeRequestRepo:
    return SQLiteChangeRequestRepo(settings.db_path)


def get_five_stars_repo(settings: Settings = Depends(get_settings)) -> SQLiteFiveStarsRepo:
    return SQLiteFiveStarsRepo(settings.db_path)


def get_share_of_voice_repo(settings: Settings = Depends(get_settings)) -> SQLiteShareOfVoiceRepo:
    return SQLiteShareOfVoiceRepo(settings.db_path)


def get_media_sufficiency_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteMediaSufficiencyRepo:
    return SQLiteMediaSufficiencyRepo(settings.db_path)


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# Adapters needed for component injection
def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter()


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


_email_instance: DevEmailAdapter | None = None


def get_email_adapter() -> DevEmailAdapter:
    """Get email adapter singleton (logs instead of sending)."""
    global _email_instance
    if _email_instance is None:
        _email_instance = DevEmailAdapter()
    return _email_instance


def get_session_store(settings: Settings = Depends(get_settings)) -> FileSessionStore:
    return FileSessionStore(str(settings.sessions_dir), settings.session_timeout_hours)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
) -> User:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ", 1)[1]

    if not token:
        raise _unauthorized("Not authenticated")

    # 2. Static demo tokens
    demo = find_demo_by_token(rules.auth, token)
    if demo is not None:
        return demo

    # 3. Decode
    payload = auth_adapter.decode_token(token)
    if not payload:
        raise _unauthorized("Invalid token")

    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload") from None

    # 4. Fetch User (demo users carry negative ids)
    user = find_demo_by_id(rules.auth, user_id) if user_id < 0 else user_repo.get_by_id(user_id)
    if not user:
        raise _unauthorized("User not found")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_permission(permission: str) -> Callable[..., User]:
    """Dependency factory: the current user must hold ``permission``."""

    def checker(
        current_user: User = Depends(get_current_user),
        policy: PolicyEngine = Depends(get_policy),
    ) -> User:
        if not policy.check_permission(current_user, permission):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return current_user

    return checker


def get_country_scope(current_user: User = Depends(get_current_user)) -> list[int] | None:
    """Country ids visible to the caller; None means unrestricted."""
    return get_accessible_country_ids(current_user)


# --- Upload sessions ---
SESSION_MISSING = "Session not found or has expired. Please upload a file again."


def get_valid_upload_session(
    session_id: str | None = None,
    session_id_query: str | None = Query(default=None, alias="sessionId"),
    store: FileSessionStore = Depends(get_session_store),
) -> UploadSession:
    """Resolve the session id from the path (or ``?sessionId=``) to a live session."""
    sid = session_id or session_id_query
    if not sid:
        raise HTTPException(status_code=400, detail="Session ID is required")
    session = store.get_valid_session(sid)
    if session is None:
        raise HTTPException(status_code=404, detail=SESSION_MISSING)
    return session
