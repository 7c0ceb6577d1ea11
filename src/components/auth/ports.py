from datetime import datetime
from typing import Protocol

from src.core.ports.email import EmailPort
from src.domain.entities import User


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: int) -> User | None: ...
    def get_by_verification_token(self, token: str) -> User | None: ...
    def get_by_reset_token(self, token: str) -> User | None: ...
    def save(self, user: User) -> User: ...
    def delete(self, user_id: int) -> None: ...
    def list_all(self) -> list[User]: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, user: User, ttl_minutes: int) -> str: ...
    def new_random_token(self) -> str: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


__all__ = ["AuthAdapterPort", "EmailPort", "TimePort", "UserRepoPort"]
