"""
Auth component - Authentication and user management.

Handles login (database and demo accounts), self-registration with email
verification, password reset and user administration.
"""

from .component import (
    run_create_user,
    run_delete_user,
    run_forgot_password,
    run_list_users,
    run_login,
    run_register,
    run_reset_password,
    run_update_user,
    run_verify_email,
)
from .demo import demo_user, find_demo_by_id, find_demo_by_token, find_demo_login
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

__all__ = [
    # Entry points
    "run_create_user",
    "run_delete_user",
    "run_forgot_password",
    "run_list_users",
    "run_login",
    "run_register",
    "run_reset_password",
    "run_update_user",
    "run_verify_email",
    # Demo accounts
    "demo_user",
    "find_demo_by_id",
    "find_demo_by_token",
    "find_demo_login",
    # Models
    "AuthOutput",
    "CreateUserInput",
    "DeleteUserInput",
    "ForgotPasswordInput",
    "ListUsersInput",
    "LoginInput",
    "MessageOutput",
    "RegisterInput",
    "ResetPasswordInput",
    "UpdateUserInput",
    "UserListOutput",
    "UserOutput",
    "VerifyEmailInput",
    # Ports
    "AuthAdapterPort",
    "TimePort",
    "UserRepoPort",
]
