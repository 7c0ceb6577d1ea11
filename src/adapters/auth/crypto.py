from datetime import timedelta
from typing import Any

from src.api.auth_utils import (
    create_access_token,
    decode_access_token,
    generate_token,
    get_password_hash,
    verify_password,
)
from src.domain.entities import User


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib for password hashing."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(self, user: User, ttl_minutes: int) -> str:
        claims = {"sub": str(user.id), "email": user.email, "role": user.role}
        return create_access_token(claims, timedelta(minutes=ttl_minutes))

    def decode_token(self, token: str) -> dict[str, Any] | None:
        return decode_access_token(token)

    def new_random_token(self) -> str:
        return generate_token()
