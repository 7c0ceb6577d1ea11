from typing import Any

from src.domain.entities import User
from src.rules.models import Rules


def _parse_id_list(value: str | None) -> list[int]:
    ids: list[int] = []
    for part in (value or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


def get_accessible_country_ids(user: User) -> list[int] | None:
    """
    Country ids the user may see.

    None means unrestricted: super admins and users without an access list.
    """
    if user.role == "super_admin":
        return None
    ids = _parse_id_list(user.accessible_countries)
    return ids or None


def has_country_access(user: User, country_id: int | str | None) -> bool:
    allowed = get_accessible_country_ids(user)
    if allowed is None:
        return True
    try:
        return int(str(country_id)) in allowed
    except (TypeError, ValueError):
        return False


def country_filter_clause(user: User, column: str = "country_id") -> tuple[str, list[Any]]:
    """
    SQL fragment (without leading AND/WHERE) restricting ``column`` to the
    user's countries. Returns ("", []) when unrestricted.
    """
    allowed = get_accessible_country_ids(user)
    if allowed is None:
        return "", []
    placeholders = ", ".join("?" for _ in allowed)
    return f"{column} IN ({placeholders})", list(allowed)


def has_page_access(user: User, page: str) -> bool:
    if user.is_admin:
        return True
    pages = [p.strip() for p in (user.accessible_pages or "").split(",") if p.strip()]
    if not pages:
        return user.can_access_user_dashboard
    return page in pages


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(self, user: User | None, action: str) -> bool:
        """
        Role-based check against the rules file.

        ``*`` grants everything; ``scope:*`` grants every action in the scope.
        """
        if not user:
            return False

        allowed_actions = self.rules.rbac.roles.get(user.role, [])
        if "*" in allowed_actions or action in allowed_actions:
            return True

        # Scoped wildcards (e.g. "taxonomy:*" matches "taxonomy:edit")
        if ":" in action:
            scope = action.split(":")[0]
            if f"{scope}:*" in allowed_actions:
                return True

        return False

    def can_manage_users(self, user: User) -> bool:
        return self.check_permission(user, "users:manage")

    def can_delete_user(self, actor: User, target: User) -> tuple[bool, str | None]:
        if target.role == "super_admin":
            return False, "Super admin accounts cannot be deleted"
        if target.role == "admin" and actor.role != "super_admin":
            return False, "Only a super admin can delete admin accounts"
        if actor.id is not None and actor.id == target.id:
            return False, "You cannot delete your own account"
        return True, None
