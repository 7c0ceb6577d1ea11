import pytest

from src.domain.entities import User
from src.domain.policy import (
    PolicyEngine,
    country_filter_clause,
    get_accessible_country_ids,
    has_country_access,
    has_page_access,
)


@pytest.fixture
def engine(rules):
    return PolicyEngine(rules)


def test_super_admin_has_everything(engine):
    user = User(email="a@example.com", role="super_admin")
    assert engine.check_permission(user, "anything:really") is True


def test_scoped_wildcard(engine):
    admin = User(email="a@example.com", role="admin")
    assert engine.check_permission(admin, "taxonomy:edit") is True
    assert engine.check_permission(admin, "change_requests:review") is True
    assert engine.check_permission(admin, "settings:edit") is False


def test_user_permissions(engine):
    user = User(email="u@example.com", role="user")
    assert engine.check_permission(user, "reports:view") is True
    assert engine.check_permission(user, "change_requests:create") is True
    assert engine.check_permission(user, "governance:edit") is False
    assert engine.check_permission(None, "reports:view") is False


def test_super_admin_ignores_country_list():
    user = User(email="a@example.com", role="super_admin", accessible_countries="1,2")
    assert get_accessible_country_ids(user) is None
    assert has_country_access(user, 99) is True


def test_restricted_admin():
    user = User(email="a@example.com", role="admin", accessible_countries=" 4, 33 ,x")
    assert get_accessible_country_ids(user) == [4, 33]
    assert has_country_access(user, "33") is True
    assert has_country_access(user, 5) is False
    assert has_country_access(user, None) is False


def test_empty_list_is_unrestricted():
    user = User(email="a@example.com", role="admin", accessible_countries="")
    assert get_accessible_country_ids(user) is None


def test_country_filter_clause():
    restricted = User(email="a@example.com", role="user", accessible_countries="4,33")
    assert country_filter_clause(restricted, "gp.country_id") == ("gp.country_id IN (?, ?)", [4, 33])

    open_user = User(email="b@example.com", role="user")
    assert country_filter_clause(open_user) == ("", [])


def test_page_access():
    admin = User(email="a@example.com", role="admin", accessible_pages="reach")
    assert has_page_access(admin, "anything") is True

    user = User(email="u@example.com", role="user", accessible_pages="media-sufficiency, reach")
    assert has_page_access(user, "reach") is True
    assert has_page_access(user, "governance") is False

    locked = User(email="l@example.com", role="user", can_access_user_dashboard=False)
    assert has_page_access(locked, "reach") is False


def test_can_delete_self(engine):
    actor = User(id=5, email="a@example.com", role="super_admin")
    assert engine.can_delete_user(actor, actor) == (False, "Super admin accounts cannot be deleted")

    admin = User(id=6, email="b@example.com", role="admin")
    target = User(id=6, email="b@example.com", role="user")
    assert engine.can_delete_user(admin, target) == (False, "You cannot delete your own account")
