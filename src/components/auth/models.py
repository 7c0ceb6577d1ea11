from dataclasses import dataclass, field
from typing import Literal

from src.domain.entities import RoleType, User

LoginType = Literal["user", "admin"]
AuthErrorCode = Literal["invalid", "forbidden", "not_found", "conflict"]


@dataclass
class LoginInput:
    email: str
    password: str
    login_type: LoginType = "user"


@dataclass
class RegisterInput:
    email: str
    password: str
    name: str = ""


@dataclass
class VerifyEmailInput:
    token: str


@dataclass
class ForgotPasswordInput:
    email: str


@dataclass
class ResetPasswordInput:
    token: str
    password: str


@dataclass
class CreateUserInput:
    actor: User
    email: str
    password: str
    name: str = ""
    role: RoleType = "user"
    accessible_countries: str | None = None
    accessible_brands: str | None = None
    accessible_pages: str | None = None
    can_access_user_dashboard: bool = True


@dataclass
class UpdateUserInput:
    actor: User
    target_id: int
    email: str | None = None
    name: str | None = None
    role: RoleType | None = None
    password: str | None = None
    accessible_countries: str | None = None
    accessible_brands: str | None = None
    accessible_pages: str | None = None
    can_access_user_dashboard: bool | None = None


@dataclass
class DeleteUserInput:
    actor: User
    target_id: int


@dataclass
class ListUsersInput:
    actor: User


@dataclass
class AuthOutput:
    user: User | None = None
    token: str | None = None
    success: bool = False
    error: str | None = None
    error_code: AuthErrorCode | None = None


@dataclass
class MessageOutput:
    success: bool = False
    message: str | None = None
    error: str | None = None


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
    error_code: AuthErrorCode | None = None


@dataclass
class UserListOutput:
    users: list[User] = field(default_factory=list)
    success: bool = False
    error: str | None = None
