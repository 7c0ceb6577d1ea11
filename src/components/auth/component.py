from datetime import timedelta

from src.core.ports.email import EmailPort, password_reset_email, verification_email
from src.domain.entities import User
from src.domain.policy import PolicyEngine
from src.rules.models import AuthRules

from .demo import find_demo_login
from .models import (
    AuthOutput,
    CreateUserInput,
    DeleteUserInput,
    ForgotPasswordInput,
    ListUsersInput,
    LoginInput,
    MessageOutput,
    RegisterInput,
    ResetPasswordInput,
    UpdateUserInput,
    UserListOutput,
    UserOutput,
    VerifyEmailInput,
)
from .ports import AuthAdapterPort, TimePort, UserRepoPort

INVALID_LOGIN = "Invalid email or password"
NOT_ADMIN = "You do not have admin privileges. Please login as a regular user."
FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


def _password_error(password: str, rules: AuthRules) -> str | None:
    if len(password) < rules.password_min_length:
        return f"Password must be at least {rules.password_min_length} characters long"
    return None


def run_login(
    inp: LoginInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    rules: AuthRules,
) -> AuthOutput:
    email = inp.email.strip().lower()
    if not email or not inp.password:
        return AuthOutput(success=False, error="Email and password are required", error_code="invalid")

    user = find_demo_login(rules, email, inp.password)
    if user is None:
        user = user_repo.get_by_email(email)
        if not user or not auth_adapter.verify_password(inp.password, user.password_hash):
            return AuthOutput(success=False, error=INVALID_LOGIN, error_code="invalid")

    if inp.login_type == "admin" and not user.is_admin:
        return AuthOutput(success=False, error=NOT_ADMIN, error_code="forbidden")

    token = auth_adapter.create_token(user, rules.token_ttl_minutes)
    return AuthOutput(user=user, token=token, success=True)


def run_register(
    inp: RegisterInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    email_port: EmailPort,
    time: TimePort,
    rules: AuthRules,
    app_url: str,
) -> UserOutput:
    email = inp.email.strip().lower()
    if not email or "@" not in email:
        return UserOutput(success=False, error="A valid email address is required", error_code="invalid")
    error = _password_error(inp.password, rules)
    if error:
        return UserOutput(success=False, error=error, error_code="invalid")
    if user_repo.get_by_email(email):
        return UserOutput(
            success=False, error="An account with this email already exists", error_code="conflict"
        )

    now = time.now_utc()
    token = auth_adapter.new_random_token()
    user = user_repo.save(
        User(
            email=email,
            name=inp.name.strip(),
            password_hash=auth_adapter.hash_password(inp.password),
            role="user",
            email_verified=False,
            verification_token=token,
            created_at=now,
            updated_at=now,
        )
    )

    subject, html, text = verification_email(user.name, f"{app_url}/verify-email?token={token}")
    email_port.send_email(user.email, subject, html, text)
    return UserOutput(user=user, success=True)


def run_verify_email(inp: VerifyEmailInput, user_repo: UserRepoPort, time: TimePort) -> MessageOutput:
    if not inp.token:
        return MessageOutput(success=False, error="Verification token is required")

    user = user_repo.get_by_verification_token(inp.token)
    if not user:
        return MessageOutput(success=False, error="Invalid verification token")

    if user.email_verified:
        return MessageOutput(success=True, message="Email already verified")

    user.email_verified = True
    user.verification_token = None
    user.updated_at = time.now_utc()
    user_repo.save(user)
    return MessageOutput(success=True, message="Email verified successfully")


def run_forgot_password(
    inp: ForgotPasswordInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    email_port: EmailPort,
    time: TimePort,
    rules: AuthRules,
    app_url: str,
) -> MessageOutput:
    """Always answers with the same message so accounts cannot be enumerated."""
    user = user_repo.get_by_email(inp.email.strip().lower()) if inp.email else None
    if user:
        now = time.now_utc()
        token = auth_adapter.new_random_token()
        user.password_reset_token = token
        user.password_reset_expires = now + timedelta(minutes=rules.reset_token_ttl_minutes)
        user.updated_at = now
        user_repo.save(user)

        subject, html, text = password_reset_email(
            user.name, f"{app_url}/reset-password?token={token}", rules.reset_token_ttl_minutes
        )
        email_port.send_email(user.email, subject, html, text)

    return MessageOutput(success=True, message=FORGOT_PASSWORD_MESSAGE)


def run_reset_password(
    inp: ResetPasswordInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    rules: AuthRules,
) -> MessageOutput:
    if not inp.token or not inp.password:
        return MessageOutput(success=False, error="Token and password are required")

    user = user_repo.get_by_reset_token(inp.token)
    now = time.now_utc()
    expires = user.password_reset_expires if user else None
    if expires is not None and expires.tzinfo is None:
        expires = expires.replace(tzinfo=now.tzinfo)
    if not user or expires is None or expires < now:
        return MessageOutput(success=False, error="Invalid or expired reset token")

    error = _password_error(inp.password, rules)
    if error:
        return MessageOutput(success=False, error=error)

    user.password_hash = auth_adapter.hash_password(inp.password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.updated_at = now
    user_repo.save(user)
    return MessageOutput(success=True, message="Password has been reset successfully")


# --- User administration ---


def run_list_users(
    inp: ListUsersInput, user_repo: UserRepoPort, policy: PolicyEngine
) -> UserListOutput:
    if not policy.can_manage_users(inp.actor):
        return UserListOutput(users=[], success=False, error="Access denied")

    return UserListOutput(users=user_repo.list_all(), success=True)


def run_create_user(
    inp: CreateUserInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    policy: PolicyEngine,
    time: TimePort,
    rules: AuthRules,
) -> UserOutput:
    if not policy.can_manage_users(inp.actor):
        return UserOutput(success=False, error="Access denied", error_code="forbidden")

    if inp.role == "super_admin" and inp.actor.role != "super_admin":
        return UserOutput(
            success=False, error="Only a super admin can create super admin accounts", error_code="forbidden"
        )

    email = inp.email.strip().lower()
    if not email:
        return UserOutput(success=False, error="Email is required", error_code="invalid")
    error = _password_error(inp.password, rules)
    if error:
        return UserOutput(success=False, error=error, error_code="invalid")
    if user_repo.get_by_email(email):
        return UserOutput(success=False, error="Email already in use", error_code="conflict")

    now = time.now_utc()
    new_user = User(
        email=email,
        name=inp.name or email.split("@")[0],
        password_hash=auth_adapter.hash_password(inp.password),
        role=inp.role,
        accessible_countries=inp.accessible_countries,
        accessible_brands=inp.accessible_brands,
        accessible_pages=inp.accessible_pages,
        can_access_user_dashboard=inp.can_access_user_dashboard,
        email_verified=True,
        created_at=now,
        updated_at=now,
    )
    return UserOutput(user=user_repo.save(new_user), success=True)


def run_update_user(
    inp: UpdateUserInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    policy: PolicyEngine,
    time: TimePort,
    rules: AuthRules,
) -> UserOutput:
    if not policy.can_manage_users(inp.actor):
        return UserOutput(success=False, error="Access denied", error_code="forbidden")

    target = user_repo.get_by_id(inp.target_id)
    if not target:
        return UserOutput(success=False, error="User not found", error_code="not_found")

    if target.role == "super_admin" and inp.actor.role != "super_admin":
        return UserOutput(
            success=False, error="Only a super admin can modify super admin accounts", error_code="forbidden"
        )

    # Self-lockout check
    if target.id == inp.actor.id and inp.role is not None and inp.role != target.role:
        return UserOutput(success=False, error="You cannot change your own role", error_code="invalid")

    if inp.email is not None:
        email = inp.email.strip().lower()
        other = user_repo.get_by_email(email)
        if other and other.id != target.id:
            return UserOutput(success=False, error="Email already in use", error_code="conflict")
        target.email = email

    if inp.password:
        error = _password_error(inp.password, rules)
        if error:
            return UserOutput(success=False, error=error, error_code="invalid")
        target.password_hash = auth_adapter.hash_password(inp.password)

    if inp.name is not None:
        target.name = inp.name
    if inp.role is not None:
        target.role = inp.role
    if inp.accessible_countries is not None:
        target.accessible_countries = inp.accessible_countries or None
    if inp.accessible_brands is not None:
        target.accessible_brands = inp.accessible_brands or None
    if inp.accessible_pages is not None:
        target.accessible_pages = inp.accessible_pages or None
    if inp.can_access_user_dashboard is not None:
        target.can_access_user_dashboard = inp.can_access_user_dashboard

    target.updated_at = time.now_utc()
    return UserOutput(user=user_repo.save(target), success=True)


def run_delete_user(
    inp: DeleteUserInput, user_repo: UserRepoPort, policy: PolicyEngine
) -> UserOutput:
    if not policy.can_manage_users(inp.actor):
        return UserOutput(success=False, error="Access denied", error_code="forbidden")

    target = user_repo.get_by_id(inp.target_id)
    if not target:
        return UserOutput(success=False, error="User not found", error_code="not_found")

    allowed, reason = policy.can_delete_user(inp.actor, target)
    if not allowed:
        return UserOutput(success=False, error=reason, error_code="forbidden")

    assert target.id is not None
    user_repo.delete(target.id)
    return UserOutput(user=target, success=True)
