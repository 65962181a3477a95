"""Configuration loading and validation for Levante Catalog."""

from levante_catalog.config.env import expand_env_vars
from levante_catalog.config.loader import find_config_file, load_catalog_config, validate_config
from levante_catalog.config.schema import (
    AnnouncementsSettings,
    CatalogConfig,
    CatalogSettings,
    HttpClientSettings,
    ProviderConfig,
    ServerSettings,
)

__all__ = [
    "AnnouncementsSettings",
    "CatalogConfig",
    "CatalogSettings",
    "HttpClientSettings",
    "ProviderConfig",
    "ServerSettings",
    "expand_env_vars",
    "find_config_file",
    "load_catalog_config",
    "validate_config",
]
