"""Identity provider mapper registry.

Manages the mapper variants available to the broker, keyed by mapper id.
"""

from rolesync.logging_config import get_logger
from rolesync.mappers.base import IdentityProviderMapper

logger = get_logger(__name__)

# Registry of mapper variants
_mappers: dict[str, IdentityProviderMapper] = {}


def init_mappers() -> None:
    """Register all built-in mapper variants.

    Called once during startup, before any synchronization runs.
    """
    from rolesync.mappers.external_role import ExternalRoleToRoleMapper

    _mappers.clear()

    for mapper in (ExternalRoleToRoleMapper(),):
        _mappers[mapper.provider_id] = mapper
        logger.info("Registered mapper", mapper=mapper.provider_id)

    logger.info("Mappers initialized", count=len(_mappers))


def get_mapper(provider_id: str) -> IdentityProviderMapper | None:
    """Get a mapper variant by id.

    Registers the built-in variants on first use if startup has not.
    """
    if not _mappers:
        init_mappers()
    return _mappers.get(provider_id)


def list_mappers() -> list[dict[str, object]]:
    """Describe registered mappers (id, category, type, help text, config keys)."""
    if not _mappers:
        init_mappers()
    return [
        {
            "id": m.provider_id,
            "category": m.display_category,
            "type": m.display_type,
            "help_text": m.help_text,
            "compatible_providers": list(m.compatible_providers),
            "config_properties": [p.name for p in m.config_properties],
        }
        for m in _mappers.values()
    ]
