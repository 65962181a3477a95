"""Pydantic configuration models for Levante Catalog.

Defines the validated structure of ``config.yaml``.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from levante_catalog.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_HOST,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_USER_AGENT,
)


class ServerSettings(BaseModel):
    """Listen address for the HTTP server."""

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)


class CatalogSettings(BaseModel):
    data_dir: str = Field(
        default=DEFAULT_DATA_DIR,
        description="Root of the folder-per-service descriptor tree.",
    )


class HttpClientSettings(BaseModel):
    """Outbound HTTP settings shared by provider and announcement clients."""

    timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    user_agent: str = DEFAULT_USER_AGENT


class ProviderConfig(BaseModel):
    """One descriptor provider (the local tree or an external API)."""

    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    type: Literal["local", "api"]
    endpoint: str = ""
    enabled: bool = True
    homepage: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Provider id must be a non-empty string")
        return stripped


class AnnouncementsSettings(BaseModel):
    """Connection settings for the Supabase announcements table."""

    supabase_url: Optional[str] = Field(
        default=None, description="Project URL; supports ${SUPABASE_URL}."
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Service role key; supports ${SUPABASE_SERVICE_ROLE_KEY}.",
    )
    table: str = "announcements"


class CatalogConfig(BaseModel):
    """Top-level validated configuration::

        {
            "server": {"host": ..., "port": ...},
            "catalog": {"data_dir": "data/mcps"},
            "http": {"timeout": 10.0},
            "providers": [{"id": "levante", "type": "local"}, ...],
            "announcements": {"supabase_url": ..., "supabase_key": ...}
        }
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    http: HttpClientSettings = Field(default_factory=HttpClientSettings)
    providers: List[ProviderConfig] = Field(default_factory=list)
    announcements: AnnouncementsSettings = Field(default_factory=AnnouncementsSettings)

    @field_validator("providers")
    @classmethod
    def _unique_provider_ids(cls, v: List[ProviderConfig]) -> List[ProviderConfig]:
        seen = set()
        for provider in v:
            if provider.id in seen:
                raise ValueError(f"Duplicate provider id '{provider.id}'")
            seen.add(provider.id)
        return v
