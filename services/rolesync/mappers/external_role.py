"""External role to role mapper.

Looks for an external role in a Keycloak access token. If the external role
is present, the user is granted the configured realm or client role.
"""

from dataclasses import dataclass, field

from rolesync.auth.claims import ClaimSet
from rolesync.auth.claims_mapper import has_external_role
from rolesync.auth.sync_policy import SyncAction, SyncEvent, decide_action
from rolesync.config import EXTERNAL_ROLE, ROLE, MapperConfig, SyncMode
from rolesync.logging_config import get_logger
from rolesync.mappers.base import (
    BrokerSession,
    ConfigProperty,
    ConfigPropertyType,
    ConfigSchema,
    RoleNotFound,
    SyncResult,
)
from rolesync.services.role_mutator import grant_role, resolve_local_role, revoke_role
from rolesync.store.protocol import BrokeredUser, RoleNotFoundError

logger = get_logger(__name__)

PROVIDER_ID = "keycloak-oidc-role-to-role-idp-mapper"
KEYCLOAK_OIDC_PROVIDER_ID = "keycloak-oidc"

CONFIG_PROPERTIES: ConfigSchema = (
    ConfigProperty(
        name=EXTERNAL_ROLE,
        label="External role",
        help_text=(
            "External role to check for.  To reference a client role the syntax is "
            "clientname.clientrole, i.e. myclient.myrole"
        ),
        type=ConfigPropertyType.STRING,
    ),
    ConfigProperty(
        name=ROLE,
        label="Role",
        help_text=(
            "Role to grant to user if external role is present.  To reference a client "
            "role the syntax is clientname.clientrole, i.e. myclient.myrole"
        ),
        type=ConfigPropertyType.ROLE,
    ),
)


@dataclass(frozen=True)
class ExternalRoleToRoleMapper:
    """Grants (and on FORCE re-sync, revokes) a local role from an external one."""

    config_properties: ConfigSchema = CONFIG_PROPERTIES
    provider_id: str = PROVIDER_ID
    compatible_providers: tuple[str, ...] = (KEYCLOAK_OIDC_PROVIDER_ID,)
    display_category: str = "Role Importer"
    display_type: str = "External Role to Role"
    help_text: str = (
        "Looks for an external role in a keycloak access token.  If external role exists, "
        "grant the user the specified realm or client role."
    )
    # Every declared mode; narrow this set to whitelist modes.
    sync_modes: frozenset[SyncMode] = field(default_factory=lambda: frozenset(SyncMode))

    def supported_sync_modes(self) -> frozenset[SyncMode]:
        return self.sync_modes

    def supports_sync_mode(self, mode: SyncMode) -> bool:
        return mode in self.sync_modes

    def on_first_login(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        return self._sync(SyncEvent.FIRST_LOGIN, session, user, config, claims)

    def on_resync(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        return self._sync(SyncEvent.RESYNC, session, user, config, claims)

    def on_legacy_resync(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        # Legacy re-sync never touched roles; keep it that way.
        return SyncResult(action=SyncAction.NONE)

    def _sync(
        self,
        event: SyncEvent,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        action = decide_action(event, has_external_role(claims, config.external_role))
        logger.debug(
            "Sync decision",
            event=event,
            user=user.username,
            external_role=config.external_role,
            role=config.role,
            action=action,
        )
        if action is SyncAction.NONE:
            return SyncResult(action=action)

        # Resolve before mutating so a missing role leaves the user untouched
        try:
            role = resolve_local_role(session.store, session.realm, config.role)
        except RoleNotFoundError as e:
            return SyncResult(action=action, failure=RoleNotFound(realm=e.realm, role=e.role))

        if action is SyncAction.GRANT:
            applied = grant_role(user, role)
        else:
            applied = revoke_role(user, role)
        return SyncResult(action=action, applied=applied)
