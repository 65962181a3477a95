"""Catalog API routes: read-only views over the catalog aggregator.

All routes are mounted under ``/api`` by ``server/app.py``.  Served
descriptors carry a normalized ``name``; the original stays in
``displayName``.
"""

import logging
from typing import Any, Dict, List, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.models import SOURCES, CanonicalDescriptor
from levante_catalog.catalog.names import normalize_name
from levante_catalog.constants import (
    API_PREFIX,
    CATALOG_CACHE_CONTROL,
    CATALOG_HOMEPAGE,
    CATALOG_PROVIDER_ID,
    CATALOG_PROVIDER_NAME,
    CATALOG_VERSION,
)
from levante_catalog.errors import ProviderError
from levante_catalog.providers.service import ProviderSyncService
from levante_catalog.server.schemas import (
    ProviderDetail,
    ProvidersResponse,
    ServicesResponse,
    StatsResponse,
    StoreProvider,
    StoreResponse,
)

logger = logging.getLogger(__name__)

_CACHE_HEADERS = {"Cache-Control": CATALOG_CACHE_CONTROL}


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_aggregator(request: Request) -> CatalogAggregator:
    """Retrieve the CatalogAggregator instance from app state."""
    aggregator: Optional[CatalogAggregator] = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise RuntimeError("CatalogAggregator not found on app.state")
    return aggregator


def _get_provider_service(request: Request) -> ProviderSyncService:
    service: Optional[ProviderSyncService] = getattr(
        request.app.state, "provider_service", None
    )
    if service is None:
        raise RuntimeError("ProviderSyncService not found on app.state")
    return service


def serialize_descriptor(descriptor: CanonicalDescriptor) -> Dict[str, Any]:
    """API view of a descriptor with a function-safe ``name``."""
    data = descriptor.to_dict()
    data["displayName"] = descriptor.display_name or descriptor.name
    data["name"] = normalize_name(descriptor.name)
    return data


def _store_json(
    servers: List[CanonicalDescriptor],
    provider: StoreProvider,
) -> JSONResponse:
    body = StoreResponse(
        version=CATALOG_VERSION,
        provider=provider,
        servers=[serialize_descriptor(s) for s in servers],
    )
    return JSONResponse(body.model_dump(exclude_none=True), headers=_CACHE_HEADERS)


_CATALOG_PROVIDER = StoreProvider(
    id=CATALOG_PROVIDER_ID,
    name=CATALOG_PROVIDER_NAME,
    homepage=CATALOG_HOMEPAGE,
)


# ── GET /api/mcps.json ──────────────────────────────────────────────────


async def handle_catalog(request: Request) -> Response:
    """Full catalog, optionally filtered by ``?source=``."""
    aggregator = _get_aggregator(request)
    source = request.query_params.get("source")

    if source is None or source == "":
        servers = aggregator.aggregate_all()
    elif source in SOURCES:
        servers = aggregator.get_by_source(source)
    else:
        return JSONResponse(
            {
                "error": "Invalid source",
                "invalidSource": source,
                "validSources": list(SOURCES),
            },
            status_code=400,
        )
    return _store_json(servers, _CATALOG_PROVIDER)


# ── GET /api/mcps/services ──────────────────────────────────────────────


async def handle_services(request: Request) -> JSONResponse:
    aggregator = _get_aggregator(request)
    body = ServicesResponse(services=[m.to_dict() for m in aggregator.get_services()])
    return JSONResponse(body.model_dump(), headers=_CACHE_HEADERS)


# ── GET /api/mcps/stats ─────────────────────────────────────────────────


async def handle_stats(request: Request) -> JSONResponse:
    aggregator = _get_aggregator(request)
    counts = aggregator.get_count_by_source()
    names = aggregator.get_service_names()
    body = StatsResponse(
        total=counts["official"] + counts["community"],
        official=counts["official"],
        community=counts["community"],
        services=len(names),
        serviceList=names,
    )
    return JSONResponse(body.model_dump(), headers=_CACHE_HEADERS)


# ── GET /api/mcps/service/{service} ─────────────────────────────────────


async def handle_service(request: Request) -> JSONResponse:
    """Descriptors of one service; 404 when the service has none."""
    aggregator = _get_aggregator(request)
    service_name = request.path_params["service"]
    servers = aggregator.get_by_service(service_name)

    if not servers:
        return JSONResponse({"error": "Service not found", "service": service_name}, 404)

    meta = aggregator.get_service_meta(service_name)
    provider = StoreProvider(
        id=service_name,
        name=meta.display_name if meta is not None else service_name,
        homepage=meta.website if meta is not None else None,
    )
    return _store_json(servers, provider)


# ── GET /api/mcps/{id} ──────────────────────────────────────────────────


async def handle_descriptor(request: Request) -> JSONResponse:
    aggregator = _get_aggregator(request)
    descriptor_id = request.path_params["id"]
    descriptor = aggregator.get_by_id(descriptor_id)

    if descriptor is None:
        return JSONResponse({"error": "MCP server not found", "id": descriptor_id}, 404)

    return JSONResponse(serialize_descriptor(descriptor), headers=_CACHE_HEADERS)


# ── GET /api/mcps ───────────────────────────────────────────────────────


async def handle_catalog_redirect(request: Request) -> RedirectResponse:
    return RedirectResponse(f"{API_PREFIX}/mcps.json", status_code=302)


# ── Multi-provider routes ───────────────────────────────────────────────


async def handle_providers(request: Request) -> JSONResponse:
    """Enabled providers."""
    service = _get_provider_service(request)
    body = ProvidersResponse(
        providers=[ProviderDetail(**p.model_dump()) for p in service.get_providers()]
    )
    return JSONResponse(body.model_dump(), headers=_CACHE_HEADERS)


async def handle_providers_catalog(request: Request) -> JSONResponse:
    """Union of every provider that syncs successfully."""
    service = _get_provider_service(request)
    servers = await service.sync_all_providers()
    provider = StoreProvider(id="levante-store", name="Levante MCP Store (Multi-Provider)")
    return _store_json(servers, provider)


async def handle_provider_catalog(request: Request) -> JSONResponse:
    """Descriptors of one provider; 404 when the sync fails."""
    service = _get_provider_service(request)
    provider_id = request.path_params["provider_id"]
    try:
        servers = await service.sync_provider(provider_id)
    except ProviderError as exc:
        logger.error("Error fetching provider %s: %s", provider_id, exc)
        return JSONResponse(
            {"error": "Failed to fetch provider", "message": str(exc)},
            status_code=404,
        )

    config = service.get_provider(provider_id)
    provider = StoreProvider(
        id=provider_id,
        name=(config.name if config is not None and config.name else provider_id),
        homepage=config.homepage if config is not None else None,
    )
    return _store_json(servers, provider)


async def handle_provider_descriptor(request: Request) -> JSONResponse:
    service = _get_provider_service(request)
    descriptor_id = request.path_params["id"]
    descriptor = await service.get_server_by_id(descriptor_id)

    if descriptor is None:
        return JSONResponse({"error": "MCP server not found", "id": descriptor_id}, 404)

    return JSONResponse(serialize_descriptor(descriptor), headers=_CACHE_HEADERS)


# Order matters: fixed paths precede ``/mcps/{id}``.
catalog_routes = [
    Route("/mcps.json", endpoint=handle_catalog, methods=["GET"]),
    Route("/mcps/services", endpoint=handle_services, methods=["GET"]),
    Route("/mcps/stats", endpoint=handle_stats, methods=["GET"]),
    Route("/mcps/service/{service}", endpoint=handle_service, methods=["GET"]),
    Route("/mcps/{id}", endpoint=handle_descriptor, methods=["GET"]),
    Route("/mcps", endpoint=handle_catalog_redirect, methods=["GET"]),
    Route("/providers", endpoint=handle_providers, methods=["GET"]),
    Route("/providers/mcps.json", endpoint=handle_providers_catalog, methods=["GET"]),
    Route("/providers/mcps/{id}", endpoint=handle_provider_descriptor, methods=["GET"]),
    Route(
        "/providers/{provider_id}/mcps.json",
        endpoint=handle_provider_catalog,
        methods=["GET"],
    ),
]
