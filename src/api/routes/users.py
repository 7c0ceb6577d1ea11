from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api.deps import (
    get_auth_adapter,
    get_clock,
    get_policy,
    get_rules,
    get_user_repo,
    require_admin,
)
from src.api.schemas import UserCreateRequest, UserUpdateRequest, raise_for_error, user_profile
from src.components.auth import (
    CreateUserInput,
    DeleteUserInput,
    ListUsersInput,
    UpdateUserInput,
    run_create_user,
    run_delete_user,
    run_list_users,
    run_update_user,
)
from src.domain.entities import ADMIN_ROLES, RoleType, User
from src.domain.policy import PolicyEngine
from src.rules.models import Rules

router = APIRouter()

VALID_ROLES = (*ADMIN_ROLES, "user")


def _role(value: str | None) -> RoleType | None:
    if value is None:
        return None
    if value not in VALID_ROLES:
        raise HTTPException(status_code=400, detail=f"Role must be one of: {', '.join(VALID_ROLES)}")
    return cast(RoleType, value)


@router.get("")
def list_users(
    current_user: User = Depends(require_admin),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> dict[str, Any]:
    """List all users (admin only)."""
    result = run_list_users(ListUsersInput(actor=current_user), user_repo=user_repo, policy=policy)
    if not result.success:
        raise HTTPException(status_code=403, detail=result.error or "Access denied")
    return {"users": [user_profile(u) for u in result.users]}


@router.get("/{user_id}")
def get_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> dict[str, Any]:
    user = user_repo.get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": user_profile(user)}


@router.post("", status_code=201)
def create_user(
    req: UserCreateRequest,
    current_user: User = Depends(require_admin),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Create a new user (admin only)."""
    inp = CreateUserInput(
        actor=current_user,
        email=req.email,
        password=req.password,
        name=req.name,
        role=_role(req.role) or "user",
        accessible_countries=req.accessible_countries,
        accessible_brands=req.accessible_brands,
        accessible_pages=req.accessible_pages,
        can_access_user_dashboard=req.can_access_user_dashboard,
    )
    result = run_create_user(inp, user_repo, auth_adapter, policy, clock, rules.auth)
    if not result.success or result.user is None:
        raise_for_error(result.error, result.error_code)
    return {"user": user_profile(result.user)}


@router.put("/{user_id}")
def update_user(
    user_id: int,
    req: UserUpdateRequest,
    current_user: User = Depends(require_admin),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Update a user (admin only)."""
    inp = UpdateUserInput(
        actor=current_user,
        target_id=user_id,
        email=req.email,
        name=req.name,
        role=_role(req.role),
        password=req.password,
        accessible_countries=req.accessible_countries,
        accessible_brands=req.accessible_brands,
        accessible_pages=req.accessible_pages,
        can_access_user_dashboard=req.can_access_user_dashboard,
    )
    result = run_update_user(inp, user_repo, auth_adapter, policy, clock, rules.auth)
    if not result.success or result.user is None:
        raise_for_error(result.error, result.error_code)
    return {"user": user_profile(result.user)}


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> dict[str, Any]:
    result = run_delete_user(
        DeleteUserInput(actor=current_user, target_id=user_id), user_repo, policy
    )
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return {"success": True, "message": "User deleted successfully"}
