"""
In-memory role store.

Holds realm roles, client roles and users in process memory. Used by the
CLI and tests; documents load from YAML in the form::

    realms:
      acme:
        roles: [admin, viewer]
        clients:
          myclient: [editor]
        users:
          alice: [viewer, myclient.editor]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from rolesync.auth.role_names import parse_role
from rolesync.logging_config import get_logger
from rolesync.store.protocol import LocalRole, RoleNotFoundError

logger = get_logger(__name__)


@dataclass
class InMemoryUser:
    """A user whose role mappings live in memory."""

    username: str
    roles: set[LocalRole] = field(default_factory=set)

    def has_role(self, role: LocalRole) -> bool:
        return role in self.roles

    def grant_role(self, role: LocalRole) -> None:
        self.roles.add(role)

    def delete_role_mapping(self, role: LocalRole) -> None:
        self.roles.discard(role)

    def role_names(self) -> list[str]:
        return sorted(role.qualified_name for role in self.roles)


@dataclass
class RealmRoles:
    """Roles defined in one realm."""

    roles: set[str] = field(default_factory=set)
    clients: dict[str, set[str]] = field(default_factory=dict)
    users: dict[str, InMemoryUser] = field(default_factory=dict)


class InMemoryRoleStore:
    """RoleStore backed by plain dicts."""

    def __init__(self) -> None:
        self._realms: dict[str, RealmRoles] = {}

    def add_realm_role(self, realm: str, name: str) -> LocalRole:
        self._realm(realm).roles.add(name)
        return LocalRole(realm=realm, name=name)

    def add_client_role(self, realm: str, client_id: str, name: str) -> LocalRole:
        self._realm(realm).clients.setdefault(client_id, set()).add(name)
        return LocalRole(realm=realm, name=name, client_id=client_id)

    def add_user(self, realm: str, username: str) -> InMemoryUser:
        users = self._realm(realm).users
        if username not in users:
            users[username] = InMemoryUser(username=username)
        return users[username]

    def get_user(self, realm: str, username: str) -> InMemoryUser | None:
        realm_roles = self._realms.get(realm)
        if realm_roles is None:
            return None
        return realm_roles.users.get(username)

    def find_role(self, realm: str, scoped_name: str) -> LocalRole | None:
        realm_roles = self._realms.get(realm)
        if realm_roles is None:
            return None

        ref = parse_role(scoped_name)
        if ref.scope is None:
            if ref.name in realm_roles.roles:
                return LocalRole(realm=realm, name=ref.name)
            return None

        client_roles = realm_roles.clients.get(ref.scope)
        if client_roles is None or ref.name not in client_roles:
            return None
        return LocalRole(realm=realm, name=ref.name, client_id=ref.scope)

    def _realm(self, realm: str) -> RealmRoles:
        if realm not in self._realms:
            self._realms[realm] = RealmRoles()
        return self._realms[realm]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryRoleStore:
        """Build a store from a parsed document (see module docstring).

        Raises:
            RoleNotFoundError: If a user lists a role the realm does not define.
        """
        store = cls()
        for realm, realm_data in (data.get("realms") or {}).items():
            realm_data = realm_data or {}
            store._realm(realm)
            for name in realm_data.get("roles") or []:
                store.add_realm_role(realm, name)
            for client_id, names in (realm_data.get("clients") or {}).items():
                store._realm(realm).clients.setdefault(client_id, set())
                for name in names or []:
                    store.add_client_role(realm, client_id, name)
            for username, role_names in (realm_data.get("users") or {}).items():
                user = store.add_user(realm, username)
                for scoped_name in role_names or []:
                    role = store.find_role(realm, scoped_name)
                    if role is None:
                        raise RoleNotFoundError(realm, scoped_name)
                    user.grant_role(role)

        logger.debug("In-memory role store loaded", realms=sorted(store._realms))
        return store

    @classmethod
    def from_yaml(cls, path: str | Path) -> InMemoryRoleStore:
        """Load a store document from a YAML file."""
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})
