"""Tests for local role resolution and idempotent grant/revoke."""

from unittest.mock import MagicMock

import pytest

from rolesync.services.role_mutator import grant_role, resolve_local_role, revoke_role
from rolesync.store.memory import InMemoryRoleStore, InMemoryUser
from rolesync.store.protocol import LocalRole, RoleNotFoundError, RoleStoreError


@pytest.fixture
def store() -> InMemoryRoleStore:
    store = InMemoryRoleStore()
    store.add_realm_role("acme", "admin")
    store.add_client_role("acme", "myclient", "editor")
    return store


@pytest.fixture
def user() -> MagicMock:
    """A user that records calls while keeping real in-memory state."""
    return MagicMock(wraps=InMemoryUser(username="alice"), username="alice")


class TestResolveLocalRole:
    def test_realm_role(self, store):
        assert resolve_local_role(store, "acme", "admin") == LocalRole(realm="acme", name="admin")

    def test_client_role(self, store):
        role = resolve_local_role(store, "acme", "myclient.editor")
        assert role.client_id == "myclient"
        assert role.name == "editor"

    def test_missing_role(self, store):
        with pytest.raises(RoleNotFoundError) as exc_info:
            resolve_local_role(store, "acme", "auditor")
        assert exc_info.value.realm == "acme"
        assert exc_info.value.role == "auditor"
        assert str(exc_info.value) == "Unable to find role: auditor"

    def test_missing_role_is_store_error(self, store):
        with pytest.raises(RoleStoreError):
            resolve_local_role(store, "acme", "otherclient.editor")

    def test_store_errors_propagate(self):
        store = MagicMock()
        store.find_role.side_effect = RoleStoreError("connection refused")
        with pytest.raises(RoleStoreError, match="connection refused"):
            resolve_local_role(store, "acme", "admin")


class TestGrantRole:
    def test_grant(self, user):
        role = LocalRole(realm="acme", name="admin")
        assert grant_role(user, role) is True
        assert user.has_role(role)
        user.grant_role.assert_called_once_with(role)

    def test_grant_twice_is_noop(self, user):
        role = LocalRole(realm="acme", name="admin")
        grant_role(user, role)
        assert grant_role(user, role) is False
        assert user.has_role(role)
        user.grant_role.assert_called_once_with(role)


class TestRevokeRole:
    def test_revoke_held_role(self, user):
        role = LocalRole(realm="acme", name="admin")
        grant_role(user, role)
        assert revoke_role(user, role) is True
        assert not user.has_role(role)
        user.delete_role_mapping.assert_called_once_with(role)

    def test_revoke_unheld_role_is_noop(self, user):
        role = LocalRole(realm="acme", name="admin")
        assert revoke_role(user, role) is False
        user.delete_role_mapping.assert_not_called()

    def test_revoke_twice(self, user):
        role = LocalRole(realm="acme", name="admin")
        grant_role(user, role)
        revoke_role(user, role)
        assert revoke_role(user, role) is False
        assert not user.has_role(role)
        user.delete_role_mapping.assert_called_once_with(role)
