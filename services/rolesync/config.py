"""
Configuration management for rolesync.

Non-secret configuration loaded from YAML file, overridable from environment
variables. Per-mapper configuration arrives as a flat string key/value map,
the way the broker's configuration store hands it over.
"""

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Keys of the per-mapper configuration map
EXTERNAL_ROLE = "external.role"
ROLE = "role"
SYNC_MODE = "syncMode"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path("/etc/rolesync/config.yaml")
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Sync Modes ---


class SyncMode(StrEnum):
    """When mapper decisions are (re-)applied after an account is first linked.

    The set is open-ended: mappers declare which members they support and the
    broker only dispatches to a mapper for a mode it declared.
    """

    IMPORT = "IMPORT"
    FORCE = "FORCE"
    LEGACY_IMPORT = "LEGACY"
    INHERIT = "INHERIT"


# --- Mapper Configuration Models ---


class MapperConfig(BaseModel):
    """Configuration snapshot for one external-role-to-role mapper instance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    external_role: str = Field(
        default="",
        alias=EXTERNAL_ROLE,
        description="External role to look for: 'name' or 'client.name'",
    )
    role: str = Field(
        default="",
        alias=ROLE,
        description="Local role to grant or revoke: 'name' or 'client.name'",
    )
    sync_mode: SyncMode = Field(
        default=SyncMode.INHERIT,
        alias=SYNC_MODE,
        description="Sync mode for this mapper; INHERIT uses the provider's mode",
    )

    @classmethod
    def from_config(cls, config: Mapping[str, str]) -> "MapperConfig":
        """Build from the raw key/value map of the configuration store."""
        return cls.model_validate(dict(config))


class IdentityProviderMapperModel(BaseModel):
    """A configured mapper instance attached to an identity provider."""

    name: str = Field(description="Mapper instance name (unique per provider)")
    mapper_type: str = Field(description="Registered mapper id, e.g. 'keycloak-oidc-role-to-role-idp-mapper'")
    config: dict[str, str] = Field(
        default_factory=dict,
        description="Raw mapper configuration (external.role, role, syncMode, ...)",
    )


class IdentityProviderConfig(BaseModel):
    """A brokered identity provider and the mappers attached to it."""

    alias: str = Field(description="Unique provider alias (e.g., 'corp-keycloak')")
    provider_id: str = Field(
        default="keycloak-oidc",
        description="Provider type; mappers declare which types they are compatible with",
    )
    sync_mode: SyncMode = Field(
        default=SyncMode.IMPORT,
        description="Default sync mode for mappers configured with INHERIT",
    )
    mappers: list[IdentityProviderMapperModel] = Field(default_factory=list)

    @field_validator("sync_mode")
    @classmethod
    def _no_inherit(cls, value: SyncMode) -> SyncMode:
        if value is SyncMode.INHERIT:
            raise ValueError("identity provider sync_mode cannot be INHERIT")
        return value


class BrokerConfig(BaseModel):
    """Identity broker configuration."""

    identity_providers: list[IdentityProviderConfig] = Field(default_factory=list)

    def get_provider(self, alias: str) -> IdentityProviderConfig | None:
        for provider in self.identity_providers:
            if provider.alias == alias:
                return provider
        return None


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="ROLESYNC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="rolesync")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    # Realm the broker synchronizes into
    realm: str = Field(default="master")

    # Broker
    broker: BrokerConfig = Field(default_factory=BrokerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
