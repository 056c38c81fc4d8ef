"""Parsing of 'client.role' style role references."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleRef:
    """A role reference split into an optional client scope and a bare name."""

    scope: str | None
    name: str

    @property
    def is_client_role(self) -> bool:
        return self.scope is not None

    @property
    def qualified_name(self) -> str:
        if self.scope is None:
            return self.name
        return f"{self.scope}.{self.name}"


def parse_role(raw: str) -> RoleRef:
    """Split a role reference on its first dot.

    'myclient.admin' -> RoleRef('myclient', 'admin')
    'a.b.c'          -> RoleRef('a', 'b.c')
    'admin'          -> RoleRef(None, 'admin')

    No validation is done here; an empty string yields an empty name.
    """
    scope, sep, name = raw.partition(".")
    if not sep:
        return RoleRef(scope=None, name=raw)
    return RoleRef(scope=scope, name=name)
