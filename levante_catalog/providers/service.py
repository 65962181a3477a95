"""Multi-provider sync: fetch each provider's catalog and normalize it.

A single-provider sync either returns descriptors or raises
:class:`ProviderError`.  ``sync_all_providers`` isolates failures: a
failing provider is logged and left out of the result.

Nothing is cached; every call fetches again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.models import CanonicalDescriptor
from levante_catalog.config.schema import ProviderConfig
from levante_catalog.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_USER_AGENT
from levante_catalog.errors import ProviderError
from levante_catalog.providers.normalizers import NORMALIZERS, Normalizer

logger = logging.getLogger(__name__)

LOCAL_CATALOG_PROVIDER = "levante"


class SyncState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Result of syncing one provider."""

    provider_id: str
    state: SyncState = SyncState.PENDING
    servers: List[CanonicalDescriptor] = field(default_factory=list)
    exception: Optional[ProviderError] = None

    @property
    def error(self) -> Optional[str]:
        return str(self.exception) if self.exception is not None else None

    @property
    def ok(self) -> bool:
        return self.state is SyncState.DONE


class ProviderSyncService:
    """Fetches and normalizes descriptors from configured providers.

    Parameters
    ----------
    providers:
        Provider configurations (enabled and disabled).
    aggregator:
        Local catalog used by the ``local`` provider type.
    timeout:
        HTTP request timeout in seconds.
    user_agent:
        ``User-Agent`` header sent to provider APIs.
    normalizers:
        ``provider id → normalizer`` table; defaults to :data:`NORMALIZERS`.
    transport:
        Optional httpx transport (tests inject ``httpx.MockTransport``).
    """

    def __init__(
        self,
        providers: List[ProviderConfig],
        aggregator: Optional[CatalogAggregator] = None,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        normalizers: Optional[Dict[str, Normalizer]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._providers = list(providers)
        self._aggregator = aggregator
        self._timeout = timeout
        self._user_agent = user_agent
        self._normalizers = dict(NORMALIZERS if normalizers is None else normalizers)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ── lifecycle ───────────────────────────────────────────────────

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json", "User-Agent": self._user_agent},
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

    def get_providers(self) -> List[ProviderConfig]:
        """Enabled providers, in configuration order."""
        return [p for p in self._providers if p.enabled]

    def get_provider(self, provider_id: str) -> Optional[ProviderConfig]:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    async def sync_provider(self, provider_id: str) -> List[CanonicalDescriptor]:
        """Fetch and normalize one provider.

        Raises:
            ProviderError: Unknown or disabled provider, fetch failure,
                non-2xx response, or no normalizer for the provider.
        """
        outcome = await self._sync(provider_id)
        if outcome.exception is not None:
            raise outcome.exception
        return outcome.servers

    async def sync_all_outcomes(self) -> List[SyncOutcome]:
        """Sync every enabled provider in order, never raising."""
        return [await self._sync(p.id) for p in self.get_providers()]

    async def sync_all_providers(self) -> List[CanonicalDescriptor]:
        """Union of every provider that synced successfully."""
        servers: List[CanonicalDescriptor] = []
        for outcome in await self.sync_all_outcomes():
            if outcome.ok:
                servers.extend(outcome.servers)
            else:
                logger.error(
                    "Failed to sync provider %s, continuing: %s",
                    outcome.provider_id,
                    outcome.error,
                )
        return servers

    async def get_server_by_id(self, server_id: str) -> Optional[CanonicalDescriptor]:
        """First descriptor with *server_id* across all providers."""
        for server in await self.sync_all_providers():
            if server.id == server_id:
                return server
        return None

    # ── internals ───────────────────────────────────────────────────

    async def _sync(self, provider_id: str) -> SyncOutcome:
        outcome = SyncOutcome(provider_id=provider_id)
        provider = self.get_provider(provider_id)
        if provider is None or not provider.enabled:
            return self._fail(
                outcome,
                ProviderError("Provider not found or disabled", provider_id=provider_id),
            )

        logger.info("Syncing provider: %s (%s)", provider.id, provider.type)
        try:
            outcome.state = SyncState.FETCHING
            if provider.type == "local":
                payload = self._fetch_local(provider)
            else:
                payload = await self._fetch_api(provider)

            outcome.state = SyncState.NORMALIZING
            normalizer = self._normalizers.get(provider.id)
            if normalizer is None:
                raise ProviderError("No normalizer for provider", provider_id=provider.id)
            outcome.servers = normalizer(payload, provider.id)
        except ProviderError as exc:
            return self._fail(outcome, exc)
        except Exception as exc:
            return self._fail(
                outcome, ProviderError(str(exc), provider_id=provider.id, orig_exc=exc)
            )

        outcome.state = SyncState.DONE
        logger.info("Provider %s synced: %d servers", provider.id, len(outcome.servers))
        return outcome

    def _fail(self, outcome: SyncOutcome, exc: ProviderError) -> SyncOutcome:
        logger.warning(
            "Provider %s failed during %s: %s",
            outcome.provider_id,
            outcome.state.value,
            exc,
        )
        outcome.state = SyncState.FAILED
        outcome.exception = exc
        outcome.servers = []
        return outcome

    def _fetch_local(self, provider: ProviderConfig) -> Dict[str, Any]:
        if provider.id != LOCAL_CATALOG_PROVIDER or self._aggregator is None:
            raise ProviderError("Local provider not implemented", provider_id=provider.id)
        return {"servers": self._aggregator.aggregate_all()}

    async def _fetch_api(self, provider: ProviderConfig) -> Any:
        if not provider.endpoint:
            raise ProviderError("No endpoint configured", provider_id=provider.id)
        client = self._ensure_client()
        try:
            resp = await client.get(provider.endpoint)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"API fetch failed: {exc.response.status_code} {exc.response.reason_phrase}",
                provider_id=provider.id,
                orig_exc=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                f"API fetch failed: {exc}", provider_id=provider.id, orig_exc=exc
            ) from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(
                "Provider returned invalid JSON", provider_id=provider.id, orig_exc=exc
            ) from exc
