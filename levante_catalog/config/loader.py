"""Locate, read and validate ``config.yaml``.

The file is optional: without one the catalog serves ``data/mcps`` with no
external providers and no announcements backend.  ``${VAR}`` references
are expanded before validation, and all validation problems are reported
together in one :class:`ConfigurationError`.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from levante_catalog.config.env import expand_env_vars, is_unresolved
from levante_catalog.config.schema import CatalogConfig
from levante_catalog.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LEVANTE_CATALOG_CONFIG"

_CWD_CANDIDATES = ("config.yaml", "config.yml")
_ACCEPTED_SUFFIXES = (".yaml", ".yml")

# Fallbacks for announcement settings left empty in the file.
_SUPABASE_ENV = {
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_SERVICE_ROLE_KEY",
}


def find_config_file(explicit: Optional[str] = None) -> Optional[str]:
    """First of: *explicit*, ``$LEVANTE_CATALOG_CONFIG``, ``./config.y(a)ml``.

    ``None`` means no configuration file is in use.
    """
    for chosen in (explicit, os.environ.get(CONFIG_ENV_VAR)):
        if chosen:
            return chosen
    here = os.getcwd()
    return next(
        (
            os.path.join(here, name)
            for name in _CWD_CANDIDATES
            if os.path.isfile(os.path.join(here, name))
        ),
        None,
    )


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Parse *cfg_fpath* as YAML; an empty document yields ``{}``."""
    if not cfg_fpath.lower().endswith(_ACCEPTED_SUFFIXES):
        raise ConfigurationError(
            f"Unsupported config file '{os.path.basename(cfg_fpath)}': "
            "expected a .yaml or .yml file."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except Exception as exc:
        raise ConfigurationError(f"Error reading configuration file {cfg_fpath}: {exc}") from exc

    if document is None:
        return {}
    if isinstance(document, dict):
        return document
    raise ConfigurationError(
        f"Configuration root must be a mapping, got {type(document).__name__}."
    )


def _format_validation_errors(exc: ValidationError) -> str:
    return "\n".join(
        f"  • {' → '.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def _apply_env_defaults(config: CatalogConfig) -> CatalogConfig:
    """Fill unset (or still ``${...}``) Supabase settings from the environment."""
    current = config.announcements
    patch: Dict[str, Optional[str]] = {}
    for field_name, env_name in _SUPABASE_ENV.items():
        value = getattr(current, field_name)
        if not value or is_unresolved(value):
            patch[field_name] = os.environ.get(env_name) or None
    if not patch:
        return config
    return config.model_copy(update={"announcements": current.model_copy(update=patch)})


def validate_config(raw_data: Dict[str, Any]) -> CatalogConfig:
    """Expand env references in *raw_data* and validate it."""
    try:
        config = CatalogConfig.model_validate(expand_env_vars(raw_data))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration, {exc.error_count()} problem(s):\n"
            f"{_format_validation_errors(exc)}"
        ) from exc
    return _apply_env_defaults(config)


def load_catalog_config(cfg_fpath: Optional[str] = None) -> CatalogConfig:
    """Resolve, read and validate the configuration.

    Raises:
        ConfigurationError: The chosen file is missing, unreadable or
            invalid.
    """
    resolved = find_config_file(cfg_fpath)
    if resolved is None:
        logger.info("No configuration file found; using defaults.")
        return validate_config({})
    if not os.path.isfile(resolved):
        raise ConfigurationError(f"Configuration file does not exist: {resolved}")

    logger.debug("Loading configuration file: %s", resolved)
    config = validate_config(_read_config_file(resolved))
    logger.info(
        "Configuration '%s' loaded: %d provider(s), data dir '%s'.",
        resolved,
        len(config.providers),
        config.catalog.data_dir,
    )
    return config
