"""
Role store protocol and types for rolesync.

Defines the RoleStore and BrokeredUser Protocols that persistence backends
must satisfy, along with the LocalRole handle and store exceptions.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# --- Data Types ---


@dataclass(frozen=True)
class LocalRole:
    """Handle to a grantable role in the local authorization store.

    Valid for the duration of one synchronization call; never cached.
    """

    realm: str
    name: str
    client_id: str | None = None

    @property
    def qualified_name(self) -> str:
        if self.client_id is None:
            return self.name
        return f"{self.client_id}.{self.name}"


# --- Exceptions ---


class RoleStoreError(Exception):
    """Base exception for role store operations."""


class RoleNotFoundError(RoleStoreError):
    """Raised when a configured role reference does not resolve in the store."""

    def __init__(self, realm: str, role: str) -> None:
        self.realm = realm
        self.role = role
        super().__init__(f"Unable to find role: {role}")


# --- Protocols ---


@runtime_checkable
class RoleStore(Protocol):
    """Lookup side of the local authorization store.

    Implementations must satisfy this interface structurally (duck typing),
    no inheritance required. Calls may block on the backend's I/O; the
    caller does not retry or time them out.
    """

    def find_role(self, realm: str, scoped_name: str) -> LocalRole | None:
        """Look up a realm role ('name') or client role ('client.name').

        Args:
            realm: Realm name.
            scoped_name: Role reference, split on its first dot.

        Returns:
            The role handle, or None if the role (or client) does not exist.
        """
        ...


@runtime_checkable
class BrokeredUser(Protocol):
    """A local user account linked to an external identity."""

    @property
    def username(self) -> str: ...

    def has_role(self, role: LocalRole) -> bool:
        """Whether the role is directly mapped to the user."""
        ...

    def grant_role(self, role: LocalRole) -> None:
        """Map the role to the user."""
        ...

    def delete_role_mapping(self, role: LocalRole) -> None:
        """Remove the role mapping from the user."""
        ...
