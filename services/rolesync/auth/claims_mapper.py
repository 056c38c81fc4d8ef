"""External role membership check against token claims.

Realm roles are read from ``realm_access.roles`` and client roles from
``resource_access.<client>.roles``. Claims can be strings or lists; any
other shape (or a missing claim) counts as no membership.
"""

from typing import Any

from rolesync.auth.claims import ClaimSet, resolve_claim
from rolesync.auth.role_names import RoleRef, parse_role
from rolesync.logging_config import get_logger

logger = get_logger(__name__)

REALM_ROLES_CLAIM = "realm_access.roles"
CLIENT_ROLES_CLAIM = "resource_access.{client}.roles"


def external_role_claim_path(ref: RoleRef) -> str:
    """Claim path holding the roles for the reference's scope."""
    if ref.scope is None:
        return REALM_ROLES_CLAIM
    return CLIENT_ROLES_CLAIM.format(client=ref.scope)


def has_external_role(claims: ClaimSet, external_role: str) -> bool:
    """Check whether the token asserts membership in an external role.

    Args:
        claims: Decoded, already-verified token claims.
        external_role: Raw role reference, 'role' or 'client.role'.

    Returns:
        True if the role claim for the reference's scope contains the role name.
    """
    ref = parse_role(external_role)
    claim_name = external_role_claim_path(ref)
    claim_value = resolve_claim(claims, claim_name)

    matched = claim_value is not None and _matches(claim_value, ref.name)
    logger.debug(
        "External role checked",
        external_role=external_role,
        claim=claim_name,
        claim_present=claim_value is not None,
        matched=matched,
    )
    return matched


def _matches(claim_value: Any, role_name: str) -> bool:
    """Check if a claim value matches a role name.

    Supports:
    - List membership: role_name in claim_value (exact string match)
    - Scalar equality: str(claim_value) == role_name for strings and numbers
    """
    if isinstance(claim_value, (list, tuple)):
        return role_name in claim_value
    # bool is an int subclass but never names a role
    if isinstance(claim_value, bool):
        return False
    if isinstance(claim_value, (str, int, float)):
        return str(claim_value) == role_name
    return False
