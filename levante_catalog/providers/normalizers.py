"""Per-provider normalizers into :class:`CanonicalDescriptor`.

Each normalizer has the signature ``(payload, provider_id) -> list`` and
never raises on malformed per-item data: bad items either degrade to safe
defaults or, for pass-through formats, are skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from levante_catalog.catalog.models import (
    CanonicalDescriptor,
    Configuration,
    DescriptorMetadata,
    InputDefinition,
    StdioTemplate,
)

logger = logging.getLogger(__name__)

Normalizer = Callable[[Any, str], List[CanonicalDescriptor]]

DEFAULT_COMMAND = "npx"


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _item_name(value: Any) -> str:
    # Numeric names are stringified; missing or structured ones become "".
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    return str(value)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _parse_server_content(name: str, content: Any) -> tuple:
    """Extract ``(command, args, env)`` from an embedded ``mcpServers`` blob.

    Falls back to ``("npx", [], {})`` when the blob is not valid JSON or
    lacks the expected structure.  Only the first server key is read.
    """
    command, args, env = DEFAULT_COMMAND, [], {}
    try:
        content_obj = json.loads(content)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.warning("Failed to parse AITempl server content for %s: %s", name, exc)
        return command, args, env

    servers = content_obj.get("mcpServers") if isinstance(content_obj, dict) else None
    if not isinstance(servers, dict) or not servers:
        logger.warning("AITempl server content for %s has no mcpServers mapping.", name)
        return command, args, env

    server_key = next(iter(servers))
    if len(servers) > 1:
        logger.debug(
            "AITempl item %s declares %d servers; using only '%s'.",
            name,
            len(servers),
            server_key,
        )
    server_cfg = servers[server_key]
    if not isinstance(server_cfg, dict):
        logger.warning("AITempl server '%s' in %s is not a mapping.", server_key, name)
        return command, args, env

    command = _str_or(server_cfg.get("command"), DEFAULT_COMMAND)
    raw_args = server_cfg.get("args")
    if isinstance(raw_args, list):
        args = [str(a) for a in raw_args]
    raw_env = server_cfg.get("env")
    if isinstance(raw_env, dict):
        env = {str(k): "" if v is None else str(v) for k, v in raw_env.items()}
    return command, args, env


def _env_to_inputs(env: Dict[str, str]) -> Dict[str, InputDefinition]:
    return {
        key: InputDefinition(
            label=key,
            required=True,
            type="string",
            default=value,
            description=f"Environment variable: {key}",
        )
        for key, value in env.items()
    }


def normalize_aitempl(payload: Any, provider_id: str) -> List[CanonicalDescriptor]:
    """Normalize an AITempl ``{"mcps": [...]}`` response.

    Every item is emitted; each environment variable of the embedded
    server config becomes a required string input.
    """
    items = payload.get("mcps") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("AITempl payload for '%s' has no 'mcps' list.", provider_id)
        return []

    result: List[CanonicalDescriptor] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object AITempl item from '%s'.", provider_id)
            continue
        name = _item_name(item.get("name"))
        command, args, env = _parse_server_content(name, item.get("content"))
        logo_url = item.get("logoUrl")
        downloads = _as_int(item.get("downloads"))
        result.append(
            CanonicalDescriptor(
                id=f"{provider_id}-{name}",
                name=name,
                description=_str_or(item.get("description"), ""),
                category=_str_or(item.get("category"), "general"),
                icon="server",
                logo_url=logo_url if isinstance(logo_url, str) else None,
                source="community",
                version="latest",
                transport="stdio",
                inputs=_env_to_inputs(env),
                configuration=Configuration(
                    template=StdioTemplate(command=command, args=args, env=env)
                ),
                provider=provider_id,
                metadata=DescriptorMetadata(use_count=downloads),
            )
        )
    return result


def normalize_levante(payload: Any, provider_id: str) -> List[CanonicalDescriptor]:
    """Pass through an already-canonical ``{"servers": [...]}`` response.

    Each descriptor is tagged with *provider_id*.  Items that do not
    validate are skipped with a warning.
    """
    items = payload.get("servers") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("Levante payload for '%s' has no 'servers' list.", provider_id)
        return []

    result: List[CanonicalDescriptor] = []
    for item in items:
        if isinstance(item, CanonicalDescriptor):
            result.append(item.model_copy(update={"provider": provider_id}))
            continue
        if not isinstance(item, dict):
            logger.warning("Skipping non-object Levante item from '%s'.", provider_id)
            continue
        try:
            result.append(CanonicalDescriptor.model_validate({**item, "provider": provider_id}))
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid descriptor '%s' from '%s' (%d validation error(s)).",
                item.get("id", "?"),
                provider_id,
                exc.error_count(),
            )
    return result


NORMALIZERS: Dict[str, Normalizer] = {
    "aitempl": normalize_aitempl,
    "levante": normalize_levante,
}


def get_normalizer(provider_id: str) -> Optional[Normalizer]:
    return NORMALIZERS.get(provider_id)
