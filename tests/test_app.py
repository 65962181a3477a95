"""End-to-end tests for the HTTP API via the Starlette test client."""

from __future__ import annotations

import json
from typing import Dict

import httpx
import pytest
from starlette.requests import Request
from starlette.routing import Route
from starlette.testclient import TestClient

from levante_catalog.announcements.client import AnnouncementService
from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.registry import ServiceRegistry
from levante_catalog.config.schema import CatalogConfig, ProviderConfig
from levante_catalog.providers.service import ProviderSyncService
from levante_catalog.server.app import build_app, create_app

from conftest import make_descriptor, write_service

_AITEMPL_URL = "https://aitempl.example.com/components.json"
_BROKEN_URL = "https://broken.example.com/components.json"


def _provider_transport() -> httpx.MockTransport:
    def handle(request: httpx.Request) -> httpx.Response:
        if str(request.url) == _AITEMPL_URL:
            content = json.dumps({"mcpServers": {"x": {"command": "npx", "args": ["x-mcp"]}}})
            return httpx.Response(
                200, json={"mcps": [{"name": "Mi Servidor (beta)", "content": content}]}
            )
        return httpx.Response(500)

    return httpx.MockTransport(handle)


def _announcement_transport() -> httpx.MockTransport:
    rows: Dict[str, dict] = {
        "privacy": {
            "id": "p-1",
            "title_en": "Privacy",
            "title_es": "Privacidad",
            "full_text_en": "Text",
            "full_text_es": "Texto",
            "category": "privacy",
            "created_at": "2025-05-01T10:00:00Z",
        }
    }

    def handle(request: httpx.Request) -> httpx.Response:
        category = request.url.params["category"].removeprefix("eq.")
        return httpx.Response(200, json=[rows[category]] if category in rows else [])

    return httpx.MockTransport(handle)


@pytest.fixture()
def tree(tmp_path):
    root = str(tmp_path)
    write_service(
        root,
        "alpha",
        make_descriptor("alpha-one", name="Alpha Uno (Beta)", source="official"),
        make_descriptor("alpha-two", source="community", transport="sse"),
    )
    write_service(root, "beta")
    write_service(root, "gamma", make_descriptor("gamma-one", source="community"))
    return root


@pytest.fixture()
def client(tree):
    aggregator = CatalogAggregator(ServiceRegistry.build(tree))
    providers = [
        ProviderConfig(id="levante", name="Levante", type="local"),
        ProviderConfig(id="aitempl", name="AI Templates", type="api", endpoint=_AITEMPL_URL),
        ProviderConfig(id="broken", type="api", endpoint=_BROKEN_URL),
        ProviderConfig(id="hidden", type="api", endpoint=_AITEMPL_URL, enabled=False),
    ]
    provider_service = ProviderSyncService(
        providers, aggregator, transport=_provider_transport()
    )
    announcement_service = AnnouncementService(
        "https://proj.supabase.co",
        "key",
        transport=_announcement_transport(),
    )
    app = create_app(
        aggregator,
        provider_service=provider_service,
        announcement_service=announcement_service,
    )
    with TestClient(app) as test_client:
        yield test_client


# ── Catalog ──────────────────────────────────────────────────────────────


class TestCatalogRoutes:
    def test_full_catalog(self, client):
        resp = client.get("/api/mcps.json")
        assert resp.status_code == 200
        assert resp.headers["cache-control"] == "public, max-age=3600"
        assert resp.headers["content-type"].startswith("application/json")
        body = resp.json()
        assert body["version"] == "1.0.0"
        assert body["provider"]["id"] == "levante-api-services"
        assert [s["id"] for s in body["servers"]] == ["alpha-one", "alpha-two", "gamma-one"]

    def test_names_normalized(self, client):
        server = client.get("/api/mcps.json").json()["servers"][0]
        assert server["name"] == "Alpha_Uno_Beta"
        assert server["displayName"] == "Alpha Uno (Beta)"

    def test_existing_display_name_wins(self, tmp_path):
        root = str(tmp_path)
        write_service(root, "svc", make_descriptor("a", name="A b", displayName="Fancy A"))
        app = create_app(CatalogAggregator(ServiceRegistry.build(root)))
        server = TestClient(app).get("/api/mcps/a").json()
        assert server["name"] == "A_b"
        assert server["displayName"] == "Fancy A"

    def test_source_filter(self, client):
        body = client.get("/api/mcps.json", params={"source": "community"}).json()
        assert [s["id"] for s in body["servers"]] == ["alpha-two", "gamma-one"]

    def test_invalid_source(self, client):
        resp = client.get("/api/mcps.json", params={"source": "vendor"})
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Invalid source",
            "invalidSource": "vendor",
            "validSources": ["official", "community"],
        }

    def test_services(self, client):
        services = client.get("/api/mcps/services").json()["services"]
        assert [s["service"] for s in services] == ["alpha", "beta", "gamma"]
        assert services[0]["displayName"] == "Alpha"

    def test_stats(self, client):
        assert client.get("/api/mcps/stats").json() == {
            "total": 3,
            "official": 1,
            "community": 2,
            "services": 3,
            "serviceList": ["alpha", "beta", "gamma"],
        }

    def test_service(self, client):
        body = client.get("/api/mcps/service/alpha").json()
        assert body["provider"] == {
            "id": "alpha",
            "name": "Alpha",
            "homepage": "https://alpha.example.com",
        }
        assert len(body["servers"]) == 2

    def test_service_without_descriptors_is_404(self, client):
        resp = client.get("/api/mcps/service/beta")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Service not found", "service": "beta"}

    def test_unknown_service_is_404(self, client):
        assert client.get("/api/mcps/service/zzz").status_code == 404

    def test_descriptor(self, client):
        resp = client.get("/api/mcps/gamma-one")
        assert resp.status_code == 200
        assert resp.json()["id"] == "gamma-one"

    def test_descriptor_missing(self, client):
        resp = client.get("/api/mcps/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": "MCP server not found", "id": "nope"}

    def test_redirect(self, client):
        resp = client.get("/api/mcps", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/api/mcps.json"


# ── Providers ────────────────────────────────────────────────────────────


class TestProviderRoutes:
    def test_providers(self, client):
        providers = client.get("/api/providers").json()["providers"]
        assert [p["id"] for p in providers] == ["levante", "aitempl", "broken"]

    def test_multi_provider_catalog(self, client):
        body = client.get("/api/providers/mcps.json").json()
        assert body["provider"]["id"] == "levante-store"
        ids = [s["id"] for s in body["servers"]]
        assert ids == ["alpha-one", "alpha-two", "gamma-one", "aitempl-Mi Servidor (beta)"]
        assert body["servers"][-1]["name"] == "Mi_Servidor_beta"

    def test_single_provider(self, client):
        body = client.get("/api/providers/aitempl/mcps.json").json()
        assert body["provider"]["name"] == "AI Templates"
        assert [s["provider"] for s in body["servers"]] == ["aitempl"]

    def test_failing_provider_is_404(self, client):
        resp = client.get("/api/providers/broken/mcps.json")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Failed to fetch provider"
        assert "500" in body["message"]

    def test_disabled_provider_is_404(self, client):
        assert client.get("/api/providers/hidden/mcps.json").status_code == 404

    def test_provider_descriptor(self, client):
        resp = client.get("/api/providers/mcps/gamma-one")
        assert resp.status_code == 200
        assert resp.json()["provider"] == "levante"
        assert client.get("/api/providers/mcps/nope").status_code == 404


# ── Announcements ────────────────────────────────────────────────────────


class TestAnnouncementRoutes:
    def test_single(self, client):
        resp = client.get("/api/announcements", params={"category": "privacy", "language": "es"})
        assert resp.status_code == 200
        assert resp.headers["cache-control"] == "public, max-age=300"
        assert resp.json()["announcement"]["title"] == "Privacidad"

    def test_single_none(self, client):
        resp = client.get("/api/announcements", params={"category": "app", "language": "en"})
        assert resp.json() == {"announcement": None}

    def test_many(self, client):
        resp = client.get(
            "/api/announcements", params={"category": "privacy,app", "language": "en"}
        )
        body = resp.json()
        assert body["total"] == 1
        assert body["announcements"][0]["title"] == "Privacy"

    @pytest.mark.parametrize(
        "params, error",
        [
            ({"language": "en"}, "Category parameter is required"),
            ({"category": "privacy"}, "Language parameter is required"),
            ({"category": "privacy", "language": "fr"}, "Invalid language"),
            ({"category": " , ", "language": "en"}, "At least one category is required"),
            ({"category": "privacy,news", "language": "en"}, "Invalid categories"),
        ],
    )
    def test_validation(self, client, params, error):
        resp = client.get("/api/announcements", params=params)
        assert resp.status_code == 400
        assert resp.json()["error"] == error

    def test_unconfigured_is_500(self, tree):
        app = create_app(CatalogAggregator(ServiceRegistry.build(tree)))
        resp = TestClient(app).get(
            "/api/announcements", params={"category": "privacy", "language": "en"}
        )
        assert resp.status_code == 500
        assert "SUPABASE_URL" in resp.json()["error"]


# ── Documentation, errors, CORS ──────────────────────────────────────────


class TestAppSurface:
    def test_openapi(self, client):
        spec = client.get("/openapi.json").json()
        assert spec["openapi"].startswith("3.")
        assert "/mcps.json" in spec["paths"]

    def test_swagger_ui(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "swagger-ui" in resp.text

    def test_unknown_route(self, client):
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Not Found"
        assert body["message"] == "Route GET /api/does-not-exist not found"
        assert body["timestamp"].endswith("Z")

    def test_cors(self, client):
        resp = client.get("/api/mcps/stats", headers={"Origin": "https://app.example.com"})
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_cors_preflight(self, client):
        resp = client.options(
            "/api/mcps.json",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.status_code == 200
        assert "GET" in resp.headers["access-control-allow-methods"]

    def test_unhandled_error_is_500(self, client):
        async def explode(request: Request):
            raise RuntimeError("kaboom")

        client.app.router.routes.append(Route("/explode", endpoint=explode))
        resp = client.get("/explode", headers={"Origin": "https://x.example"})
        assert resp.status_code == 500
        assert resp.headers["access-control-allow-origin"] == "*"
        body = resp.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "kaboom"


class TestBuildApp:
    def test_from_config(self, tree):
        config = CatalogConfig.model_validate(
            {"catalog": {"data_dir": tree}, "providers": [{"id": "levante", "type": "local"}]}
        )
        app = build_app(config)
        assert app.state.aggregator.get_service_names() == ["alpha", "beta", "gamma"]
        assert [p.id for p in app.state.provider_service.get_providers()] == ["levante"]
