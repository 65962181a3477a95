"""Read-only async client for the Supabase ``announcements`` table.

Talks to the project's PostgREST endpoint (``/rest/v1/<table>``) with the
service role key.  Each lookup returns the newest row of a category.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from levante_catalog.announcements.models import Announcement
from levante_catalog.constants import DEFAULT_HTTP_TIMEOUT
from levante_catalog.errors import AnnouncementError, ConfigurationError

logger = logging.getLogger(__name__)


class AnnouncementService:
    """Latest-announcement lookups by category and language.

    Parameters
    ----------
    supabase_url:
        Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        Service role key, sent as ``apikey`` and bearer token.
    table:
        Table name.
    timeout:
        HTTP request timeout in seconds.
    transport:
        Optional httpx transport (tests inject ``httpx.MockTransport``).
    """

    def __init__(
        self,
        supabase_url: Optional[str],
        supabase_key: Optional[str],
        *,
        table: str = "announcements",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = (supabase_url or "").rstrip("/")
        self._key = supabase_key or ""
        self._table = table
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ── lifecycle ───────────────────────────────────────────────────

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            if not self._url or not self._key:
                raise ConfigurationError(
                    "Missing Supabase settings: SUPABASE_URL and "
                    "SUPABASE_SERVICE_ROLE_KEY are required"
                )
            self._client = httpx.AsyncClient(
                base_url=f"{self._url}/rest/v1",
                headers={
                    "apikey": self._key,
                    "Authorization": f"Bearer {self._key}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ── public API ──────────────────────────────────────────────────

    async def get_latest(self, category: str, language: str) -> Optional[Announcement]:
        """Newest announcement of *category*, or ``None`` if there is none."""
        client = self._ensure_client()
        params: Dict[str, Any] = {
            "select": "*",
            "category": f"eq.{category}",
            "order": "created_at.desc",
            "limit": 1,
        }
        try:
            resp = await client.get(f"/{self._table}", params=params)
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPStatusError as exc:
            raise AnnouncementError(
                f"Failed to fetch announcement: {exc.response.status_code} "
                f"{exc.response.text}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AnnouncementError(f"Failed to fetch announcement: {exc}") from exc

        if not isinstance(rows, list) or not rows:
            logger.debug("No announcement found for category '%s'.", category)
            return None
        return Announcement.from_row(rows[0], language)

    async def get_latest_many(
        self, categories: Sequence[str], language: str
    ) -> List[Announcement]:
        """Newest announcement per category; categories with none are omitted."""
        results = await asyncio.gather(*(self.get_latest(c, language) for c in categories))
        return [a for a in results if a is not None]
