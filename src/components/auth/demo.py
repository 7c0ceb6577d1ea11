"""
Demo accounts from the rules file.

Demo users never touch the database. They get negative ids so a JWT issued
for one can be told apart from a real user's token.
"""

from typing import cast

from src.domain.entities import RoleType, User
from src.rules.models import AuthRules, DemoAccount


def demo_user(account: DemoAccount, index: int) -> User:
    return User(
        id=-(index + 1),
        email=account.email.lower(),
        name=account.name,
        role=cast(RoleType, account.role),
        accessible_countries=account.accessible_countries,
        accessible_pages=account.accessible_pages,
        can_access_user_dashboard=True,
        email_verified=True,
        is_demo=True,
    )


def find_demo_login(rules: AuthRules, email: str, password: str) -> User | None:
    if not rules.demo.enabled:
        return None
    for i, account in enumerate(rules.demo.accounts):
        if account.email.lower() == email and account.password == password:
            return demo_user(account, i)
    return None


def find_demo_by_token(rules: AuthRules, token: str) -> User | None:
    if not rules.demo.enabled:
        return None
    for i, account in enumerate(rules.demo.accounts):
        if account.token == token:
            return demo_user(account, i)
    return None


def find_demo_by_id(rules: AuthRules, user_id: int) -> User | None:
    index = -user_id - 1
    if not rules.demo.enabled or not 0 <= index < len(rules.demo.accounts):
        return None
    return demo_user(rules.demo.accounts[index], index)
