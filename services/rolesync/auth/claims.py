"""Dotted-path lookup into decoded token claims."""

from collections.abc import Mapping
from typing import Any

ClaimSet = Mapping[str, Any]


def resolve_claim(claims: ClaimSet, path: str) -> Any | None:
    """Resolve a dot-delimited path (e.g. 'realm_access.roles') against claims.

    Descends one segment at a time through nested mappings. Returns None when
    any segment is missing or an intermediate value is not a mapping; a
    missing claim is a normal outcome, not an error.
    """
    if not path:
        return None

    current: Any = claims
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment)
        if current is None:
            return None
    return current
