"""Role mutator: resolves the configured local role and applies grants/revokes.

Grant and revoke are idempotent. Granting a role the user already holds, or
revoking one they do not hold, performs no store mutation.
"""

from rolesync.logging_config import get_logger
from rolesync.store.protocol import BrokeredUser, LocalRole, RoleNotFoundError, RoleStore

logger = get_logger(__name__)


def resolve_local_role(store: RoleStore, realm: str, role: str) -> LocalRole:
    """Resolve a 'name' or 'client.name' reference to a local role.

    Raises:
        RoleNotFoundError: If the role (or its client) does not exist.
    """
    local_role = store.find_role(realm, role)
    if local_role is None:
        logger.warning("Local role not found", realm=realm, role=role)
        raise RoleNotFoundError(realm, role)
    return local_role


def grant_role(user: BrokeredUser, role: LocalRole) -> bool:
    """Grant a role to a user. Returns True if a mapping was added."""
    if user.has_role(role):
        logger.debug("Role already held", user=user.username, role=role.qualified_name)
        return False

    user.grant_role(role)
    logger.info("Role granted", user=user.username, role=role.qualified_name, realm=role.realm)
    return True


def revoke_role(user: BrokeredUser, role: LocalRole) -> bool:
    """Remove a role mapping from a user. Returns True if a mapping was removed."""
    if not user.has_role(role):
        logger.debug("Role not held", user=user.username, role=role.qualified_name)
        return False

    user.delete_role_mapping(role)
    logger.info("Role revoked", user=user.username, role=role.qualified_name, realm=role.realm)
    return True
