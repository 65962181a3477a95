"""Pydantic response schemas for the catalog API.

Field names match the JSON served to clients (camelCase where the
public contract uses it).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# ── Errors ───────────────────────────────────────────────────────────────


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    timestamp: Optional[str] = None


# ── /mcps.json, /mcps/service/{service} ─────────────────────────────────


class StoreProvider(BaseModel):
    id: str
    name: str
    homepage: Optional[str] = None


class StoreResponse(BaseModel):
    version: str
    provider: StoreProvider
    servers: List[Dict[str, Any]] = Field(default_factory=list)


# ── /mcps/services ───────────────────────────────────────────────────────


class ServicesResponse(BaseModel):
    services: List[Dict[str, Any]] = Field(default_factory=list)


# ── /mcps/stats ──────────────────────────────────────────────────────────


class StatsResponse(BaseModel):
    total: int = 0
    official: int = 0
    community: int = 0
    services: int = 0
    serviceList: List[str] = Field(default_factory=list)


# ── /providers ───────────────────────────────────────────────────────────


class ProviderDetail(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    type: str
    endpoint: str = ""
    enabled: bool = True
    homepage: Optional[str] = None


class ProvidersResponse(BaseModel):
    providers: List[ProviderDetail] = Field(default_factory=list)


# ── /announcements ───────────────────────────────────────────────────────


class AnnouncementItem(BaseModel):
    id: str
    title: str
    full_text: str
    category: str
    created_at: str


class AnnouncementResponse(BaseModel):
    announcement: Optional[AnnouncementItem] = None


class AnnouncementsResponse(BaseModel):
    announcements: List[AnnouncementItem] = Field(default_factory=list)
    total: int = 0
