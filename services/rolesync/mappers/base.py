"""Identity provider mapper interface.

Mapper variants are plain classes that satisfy IdentityProviderMapper
structurally. The broker dispatches to them through this interface; nothing
here is meant to be subclassed.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

from rolesync.auth.claims import ClaimSet
from rolesync.auth.sync_policy import SyncAction
from rolesync.config import MapperConfig, SyncMode
from rolesync.store.protocol import BrokeredUser, RoleStore


class ConfigPropertyType(StrEnum):
    STRING = "String"
    ROLE = "Role"


@dataclass(frozen=True)
class ConfigProperty:
    """One entry of a mapper's configuration schema, as shown to admins."""

    name: str
    label: str
    help_text: str
    type: ConfigPropertyType = ConfigPropertyType.STRING


ConfigSchema = tuple[ConfigProperty, ...]


@dataclass(frozen=True)
class BrokerSession:
    """Store and realm a mapper runs against for one synchronization call."""

    store: RoleStore
    realm: str


# --- Results ---


@dataclass(frozen=True)
class RoleNotFound:
    """The configured local role does not exist in the realm."""

    realm: str
    role: str

    @property
    def message(self) -> str:
        return f"Unable to find role: {self.role}"


# Union of typed failures a mapper hook can report
SyncFailure = RoleNotFound


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one mapper hook.

    action is what the sync policy decided; applied is whether the store was
    actually changed (False for no-ops and idempotent repeats).
    """

    action: SyncAction
    applied: bool = False
    failure: SyncFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


# --- Protocol ---


@runtime_checkable
class IdentityProviderMapper(Protocol):
    """Capabilities every mapper variant exposes to the broker."""

    @property
    def provider_id(self) -> str: ...

    @property
    def compatible_providers(self) -> tuple[str, ...]: ...

    @property
    def display_category(self) -> str: ...

    @property
    def display_type(self) -> str: ...

    @property
    def help_text(self) -> str: ...

    @property
    def config_properties(self) -> ConfigSchema: ...

    def supported_sync_modes(self) -> frozenset[SyncMode]: ...

    def supports_sync_mode(self, mode: SyncMode) -> bool: ...

    def on_first_login(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        """Run when a brokered identity is first linked to a local account."""
        ...

    def on_resync(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        """Run on later logins when the sync mode asks for updates."""
        ...

    def on_legacy_resync(
        self,
        session: BrokerSession,
        user: BrokeredUser,
        config: MapperConfig,
        claims: ClaimSet,
    ) -> SyncResult:
        """Run on later logins under the legacy sync mode."""
        ...
