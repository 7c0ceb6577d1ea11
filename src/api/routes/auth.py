from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api.deps import (
    Settings,
    get_auth_adapter,
    get_clock,
    get_current_user,
    get_email_adapter,
    get_rules,
    get_settings,
    get_user_repo,
)
from src.api.schemas import CamelModel, raise_for_error, user_profile
from src.components.auth import (
    AuthOutput,
    ForgotPasswordInput,
    LoginInput,
    RegisterInput,
    ResetPasswordInput,
    VerifyEmailInput,
    run_forgot_password,
    run_login,
    run_register,
    run_reset_password,
    run_verify_email,
)
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""
    login_type: str = "user"


class RegisterRequest(CamelModel):
    email: str
    password: str
    name: str = ""


class TokenRequest(CamelModel):
    token: str = ""


class ForgotPasswordRequest(CamelModel):
    email: str = ""


class ResetPasswordRequest(CamelModel):
    token: str = ""
    password: str = ""


def _set_auth_cookie(response: Response, token: str, ttl_minutes: int) -> None:
    # HttpOnly cookie mirrors the token returned in the body
    response.set_cookie(
        key="access_token",
        value=f"Bearer {token}",
        httponly=True,
        max_age=ttl_minutes * 60,
        expires=ttl_minutes * 60,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )


def _login_response(result: AuthOutput, response: Response, rules: Rules) -> dict[str, Any]:
    if not result.success or result.user is None or result.token is None:
        code = status.HTTP_403_FORBIDDEN if result.error_code == "forbidden" else status.HTTP_401_UNAUTHORIZED
        raise HTTPException(status_code=code, detail=result.error)

    _set_auth_cookie(response, result.token, rules.auth.token_ttl_minutes)
    return {
        "success": True,
        "token": result.token,
        "access_token": result.token,
        "token_type": "bearer",
        "user": user_profile(result.user),
    }


@router.post("/login")
def login(
    req: LoginRequest,
    response: Response,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Authenticate with email/password and return a JWT plus the user profile."""
    login_type = "admin" if req.login_type == "admin" else "user"
    inp = LoginInput(email=req.email, password=req.password, login_type=login_type)
    result = run_login(inp, user_repo, auth_adapter, rules.auth)
    return _login_response(result, response, rules)


@router.post("/token")
def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """OAuth2 password flow (used by the interactive docs and scripts)."""
    inp = LoginInput(email=form_data.username, password=form_data.password)
    result = run_login(inp, user_repo, auth_adapter, rules.auth)
    return _login_response(result, response, rules)


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Log out user by clearing cookie."""
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me")
def read_users_me(current_user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Get current user info."""
    return {"user": user_profile(current_user)}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    email: DevEmailAdapter = Depends(get_email_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    inp = RegisterInput(email=req.email, password=req.password, name=req.name)
    result = run_register(inp, user_repo, auth_adapter, email, clock, rules.auth, settings.app_url)
    if not result.success or result.user is None:
        raise_for_error(result.error, result.error_code)
    return {
        "success": True,
        "message": "Registration successful. Please check your email to verify your account.",
        "user": user_profile(result.user),
    }


@router.post("/verify-email")
def verify_email(
    req: TokenRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_verify_email(VerifyEmailInput(token=req.token), user_repo, clock)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return {"success": True, "message": result.message}


@router.post("/forgot-password")
def forgot_password(
    req: ForgotPasswordRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    email: DevEmailAdapter = Depends(get_email_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    result = run_forgot_password(
        ForgotPasswordInput(email=req.email),
        user_repo,
        auth_adapter,
        email,
        clock,
        rules.auth,
        settings.app_url,
    )
    return {"success": True, "message": result.message}


@router.post("/reset-password")
def reset_password(
    req: ResetPasswordRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    result = run_reset_password(
        ResetPasswordInput(token=req.token, password=req.password),
        user_repo,
        auth_adapter,
        clock,
        rules.auth,
    )
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return {"success": True, "message": result.message}
