"""Broker sync service.

Runs every mapper configured on an identity provider for one brokered login:
1. Resolve the mapper's effective sync mode (INHERIT -> provider's mode)
2. Skip mappers that are unknown, incompatible with the provider type, or
   do not support the effective mode
3. Dispatch to the hook matching the call site and mode

One mapper's failure is reported in its result and does not stop the rest.
Store exceptions other than a missing role propagate to the caller.
"""

from dataclasses import dataclass

from pydantic import ValidationError

from rolesync.auth.claims import ClaimSet
from rolesync.config import IdentityProviderConfig, IdentityProviderMapperModel, MapperConfig, SyncMode
from rolesync.logging_config import get_logger
from rolesync.mappers import get_mapper
from rolesync.mappers.base import BrokerSession, IdentityProviderMapper, SyncResult
from rolesync.store.protocol import BrokeredUser

logger = get_logger(__name__)


@dataclass(frozen=True)
class MapperSyncResult:
    """Result of running (or skipping) one configured mapper."""

    mapper_name: str
    mapper_type: str
    sync_mode: SyncMode | None
    result: SyncResult | None = None
    skipped_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is None or self.result.ok


def effective_sync_mode(config: MapperConfig, provider: IdentityProviderConfig) -> SyncMode:
    if config.sync_mode is SyncMode.INHERIT:
        return provider.sync_mode
    return config.sync_mode


def sync_brokered_user(
    session: BrokerSession,
    user: BrokeredUser,
    provider: IdentityProviderConfig,
    claims: ClaimSet,
    *,
    first_login: bool,
) -> list[MapperSyncResult]:
    """Run the provider's mappers for a brokered login.

    Args:
        session: Store and realm to synchronize into.
        user: Local account linked to the external identity.
        provider: Identity provider config, including its mapper instances.
        claims: Verified, decoded token claims.
        first_login: True when the account was just linked.

    Returns:
        One MapperSyncResult per configured mapper, in configuration order.
    """
    logger.info(
        "Syncing brokered user",
        provider=provider.alias,
        user=user.username,
        first_login=first_login,
        mappers=len(provider.mappers),
    )
    return [
        _run_mapper(session, user, provider, model, claims, first_login=first_login)
        for model in provider.mappers
    ]


def _run_mapper(
    session: BrokerSession,
    user: BrokeredUser,
    provider: IdentityProviderConfig,
    model: IdentityProviderMapperModel,
    claims: ClaimSet,
    *,
    first_login: bool,
) -> MapperSyncResult:
    mapper = get_mapper(model.mapper_type)
    if mapper is None:
        return _skipped(model, None, "unknown mapper type")

    if provider.provider_id not in mapper.compatible_providers:
        return _skipped(model, None, f"incompatible with provider type {provider.provider_id}")

    try:
        config = MapperConfig.from_config(model.config)
    except ValidationError as e:
        return _skipped(model, None, f"invalid mapper config ({e.error_count()} errors)")

    mode = effective_sync_mode(config, provider)
    if not mapper.supports_sync_mode(mode):
        return _skipped(model, mode, f"sync mode {mode} not supported")

    result = _dispatch(mapper, mode, session, user, config, claims, first_login=first_login)
    if result is None:
        logger.debug("Mapper not updated in import mode", mapper=model.name, user=user.username)
        return MapperSyncResult(mapper_name=model.name, mapper_type=model.mapper_type, sync_mode=mode)

    if result.failure is not None:
        logger.warning(
            "Mapper sync failed",
            mapper=model.name,
            user=user.username,
            error=result.failure.message,
        )
    return MapperSyncResult(
        mapper_name=model.name,
        mapper_type=model.mapper_type,
        sync_mode=mode,
        result=result,
    )


def _dispatch(
    mapper: IdentityProviderMapper,
    mode: SyncMode,
    session: BrokerSession,
    user: BrokeredUser,
    config: MapperConfig,
    claims: ClaimSet,
    *,
    first_login: bool,
) -> SyncResult | None:
    if first_login:
        return mapper.on_first_login(session, user, config, claims)

    match mode:
        case SyncMode.FORCE:
            return mapper.on_resync(session, user, config, claims)
        case SyncMode.LEGACY_IMPORT:
            return mapper.on_legacy_resync(session, user, config, claims)
        case _:
            # IMPORT only applies mappers when the account is first linked
            return None


def _skipped(
    model: IdentityProviderMapperModel, mode: SyncMode | None, reason: str
) -> MapperSyncResult:
    logger.warning("Mapper skipped", mapper=model.name, mapper_type=model.mapper_type, reason=reason)
    return MapperSyncResult(
        mapper_name=model.name,
        mapper_type=model.mapper_type,
        sync_mode=mode,
        skipped_reason=reason,
    )
