"""Tests for staff accounts, API keys and role checks."""

import json

import pytest
from fastapi import HTTPException

from marketdesk.auth.models import Role, User
from marketdesk.auth.permissions import as_moderator, has_permission, require_role
from marketdesk.auth.store import UserStore


@pytest.fixture()
def store(tmp_path):
    return UserStore(tmp_path / "auth")


def test_create_and_get_user(store):
    store.create_user(User(id="mod-1", name="Admin", email="admin@example.com", role=Role.platform_admin))
    user = store.get_user("mod-1")
    assert user.role is Role.platform_admin
    assert user.created_at
    assert [u.id for u in store.list_users()] == ["mod-1"]
    assert store.get_user("nobody") is None


def test_duplicate_user_is_rejected(store):
    store.create_user(User(id="mod-1", name="Admin", email="a@example.com"))
    with pytest.raises(ValueError):
        store.create_user(User(id="mod-1", name="Other", email="b@example.com"))


def test_api_key_round_trip(store, tmp_path):
    store.create_user(User(id="mod-1", name="Admin", email="a@example.com", role="platform_admin"))
    api_key, raw = store.create_api_key("mod-1", "laptop")

    assert raw.startswith("mkd_")
    assert api_key.prefix == raw[:8]
    stored = (tmp_path / "auth" / "staff.json").read_text()
    assert raw not in stored

    assert store.validate_api_key(raw).id == "mod-1"
    assert json.loads((tmp_path / "auth" / "staff.json").read_text())["keys"][0]["last_used"]
    assert store.validate_api_key("mkd_wrong") is None


def test_expired_key_is_refused(store):
    store.create_user(User(id="mod-1", name="Admin", email="a@example.com"))
    _, raw = store.create_api_key("mod-1", "old", expires_in_days=-1)
    assert store.validate_api_key(raw) is None


def test_api_key_needs_known_user_and_name(store):
    with pytest.raises(ValueError):
        store.create_api_key("ghost", "key")
    store.create_user(User(id="mod-1", name="Admin", email="a@example.com"))
    with pytest.raises(ValueError):
        store.create_api_key("mod-1", "  ")


def test_role_hierarchy():
    admin = User(id="a", name="A", email="a@x", role=Role.platform_admin)
    agent = User(id="b", name="B", email="b@x", role=Role.agent)
    assert has_permission(admin, Role.agent)
    assert not has_permission(agent, Role.platform_admin)

    with pytest.raises(HTTPException) as excinfo:
        require_role(agent, Role.platform_admin)
    assert excinfo.value.status_code == 403


def test_only_platform_admins_can_moderate():
    admin = User(id="a", name="Admin", email="a@x", role=Role.platform_admin)
    moderator = as_moderator(admin)
    assert (moderator.id, moderator.name) == ("a", "Admin")

    with pytest.raises(HTTPException):
        as_moderator(User(id="b", name="Agent", email="b@x", role=Role.agent))
