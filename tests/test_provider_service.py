"""Tests for multi-provider sync."""

from __future__ import annotations

import asyncio
import json
from typing import Dict, List

import httpx
import pytest

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.registry import ServiceRegistry
from levante_catalog.config.schema import ProviderConfig
from levante_catalog.errors import ProviderError
from levante_catalog.providers.normalizers import normalize_aitempl, normalize_levante
from levante_catalog.providers.service import ProviderSyncService, SyncState

from conftest import make_descriptor

_AITEMPL_URL = "https://aitempl.example.com/components.json"
_MIRROR_URL = "https://mirror.example.com/mcps.json"
_BROKEN_URL = "https://broken.example.com/mcps.json"


def _aitempl_payload() -> Dict:
    content = json.dumps({"mcpServers": {"gh": {"command": "npx", "args": ["gh-mcp"]}}})
    return {"mcps": [{"name": "github", "content": content, "downloads": 3}]}


def _mirror_payload() -> Dict:
    return {"servers": [make_descriptor("mirror-one"), make_descriptor("mirror-two")]}


def _handler(seen: List[httpx.Request]):
    def handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        url = str(request.url)
        if url == _AITEMPL_URL:
            return httpx.Response(200, json=_aitempl_payload())
        if url == _MIRROR_URL:
            return httpx.Response(200, json=_mirror_payload())
        if url == _BROKEN_URL:
            return httpx.Response(503)
        raise httpx.ConnectError("unreachable", request=request)

    return handle


def _service(providers, aggregator=None, seen=None, normalizers=None):
    return ProviderSyncService(
        providers,
        aggregator,
        user_agent="Test-Agent/1.0",
        normalizers=normalizers,
        transport=httpx.MockTransport(_handler(seen if seen is not None else [])),
    )


def _run(coro):
    return asyncio.run(coro)


class TestProviderLookup:
    def test_get_providers_enabled_only(self):
        svc = _service(
            [
                ProviderConfig(id="levante", type="local"),
                ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL, enabled=False),
            ]
        )
        assert [p.id for p in svc.get_providers()] == ["levante"]
        assert svc.get_provider("aitempl").enabled is False
        assert svc.get_provider("nope") is None


class TestSyncProvider:
    def test_api_provider(self):
        seen: List[httpx.Request] = []
        svc = _service(
            [ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL)], seen=seen
        )
        servers = _run(svc.sync_provider("aitempl"))
        assert [s.id for s in servers] == ["aitempl-github"]
        assert seen[0].headers["accept"] == "application/json"
        assert seen[0].headers["user-agent"] == "Test-Agent/1.0"

    def test_local_provider(self, alpha_beta_tree):
        aggregator = CatalogAggregator(ServiceRegistry.build(alpha_beta_tree))
        svc = _service([ProviderConfig(id="levante", type="local")], aggregator)
        servers = _run(svc.sync_provider("levante"))
        assert [s.id for s in servers] == ["alpha-one", "alpha-two", "beta-one"]
        assert all(s.provider == "levante" for s in servers)
        # The registry itself is not tagged.
        assert aggregator.get_by_id("alpha-one").provider is None

    def test_unknown_provider(self):
        svc = _service([])
        with pytest.raises(ProviderError) as exc_info:
            _run(svc.sync_provider("ghost"))
        assert exc_info.value.provider_id == "ghost"
        assert "not found or disabled" in str(exc_info.value)

    def test_disabled_provider(self):
        svc = _service(
            [ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL, enabled=False)]
        )
        with pytest.raises(ProviderError):
            _run(svc.sync_provider("aitempl"))

    def test_non_2xx(self):
        svc = _service(
            [ProviderConfig(id="levante", type="api", endpoint=_BROKEN_URL)],
        )
        with pytest.raises(ProviderError, match="503"):
            _run(svc.sync_provider("levante"))

    def test_network_error(self):
        svc = _service(
            [ProviderConfig(id="aitempl", type="api", endpoint="https://down.example.com/")]
        )
        with pytest.raises(ProviderError) as exc_info:
            _run(svc.sync_provider("aitempl"))
        assert isinstance(exc_info.value.orig_exc, httpx.ConnectError)

    def test_missing_normalizer(self):
        svc = _service([ProviderConfig(id="mirror", type="api", endpoint=_MIRROR_URL)])
        with pytest.raises(ProviderError, match="No normalizer"):
            _run(svc.sync_provider("mirror"))

    def test_local_provider_without_aggregator(self):
        svc = _service([ProviderConfig(id="levante", type="local")])
        with pytest.raises(ProviderError, match="not implemented"):
            _run(svc.sync_provider("levante"))

    def test_outcome_states(self):
        svc = _service(
            [
                ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL),
                ProviderConfig(id="levante", type="api", endpoint=_BROKEN_URL),
            ]
        )
        ok, failed = _run(svc.sync_all_outcomes())
        assert ok.state is SyncState.DONE and ok.ok and ok.error is None
        assert failed.state is SyncState.FAILED and not failed.ok
        assert failed.servers == []
        assert "503" in failed.error


class TestSyncAllProviders:
    def _three_providers(self):
        normalizers = {
            "aitempl": normalize_aitempl,
            "mirror": normalize_levante,
            "broken": normalize_levante,
        }
        providers = [
            ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL),
            ProviderConfig(id="broken", type="api", endpoint=_BROKEN_URL),
            ProviderConfig(id="mirror", type="api", endpoint=_MIRROR_URL),
        ]
        return _service(providers, normalizers=normalizers)

    def test_partial_failure_returns_union_of_others(self):
        servers = _run(self._three_providers().sync_all_providers())
        assert [s.id for s in servers] == ["aitempl-github", "mirror-one", "mirror-two"]
        assert {s.provider for s in servers} == {"aitempl", "mirror"}

    def test_all_fail_returns_empty(self):
        svc = _service([ProviderConfig(id="levante", type="api", endpoint=_BROKEN_URL)])
        assert _run(svc.sync_all_providers()) == []

    def test_get_server_by_id(self):
        svc = self._three_providers()

        async def scenario():
            return await svc.get_server_by_id("mirror-two"), await svc.get_server_by_id("nope")

        found, missing = _run(scenario())
        assert found is not None and found.provider == "mirror"
        assert missing is None


class TestClientLifecycle:
    def test_close_is_idempotent(self):
        svc = _service([ProviderConfig(id="aitempl", type="api", endpoint=_AITEMPL_URL)])

        async def scenario():
            await svc.sync_provider("aitempl")
            await svc.close()
            await svc.close()

        _run(scenario())
