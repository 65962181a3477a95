"""Starlette ASGI application factory.

The catalog aggregator and the outbound services are built once by the
caller and stored on ``app.state``; routes read them from there.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Mount, Route

from levante_catalog.announcements.client import AnnouncementService
from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.registry import ServiceRegistry
from levante_catalog.config.schema import CatalogConfig
from levante_catalog.constants import API_PREFIX, OPENAPI_PATH, SERVER_NAME
from levante_catalog.providers.service import ProviderSyncService
from levante_catalog.server.announcements import announcement_routes
from levante_catalog.server.middleware import (
    ErrorHandlerMiddleware,
    RequestLogMiddleware,
    not_found_handler,
)
from levante_catalog.server.openapi import handle_openapi, handle_swagger_ui
from levante_catalog.server.routes import catalog_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: Starlette) -> AsyncIterator[None]:
    """Close outbound HTTP clients on shutdown."""
    logger.info("%s started.", SERVER_NAME)
    try:
        yield
    finally:
        await app.state.provider_service.close()
        await app.state.announcement_service.close()
        logger.info("%s shut down.", SERVER_NAME)


def create_app(
    aggregator: CatalogAggregator,
    *,
    provider_service: Optional[ProviderSyncService] = None,
    announcement_service: Optional[AnnouncementService] = None,
) -> Starlette:
    """Create the ASGI application around an already-built aggregator."""
    application = Starlette(
        lifespan=app_lifespan,
        routes=[
            Route("/", endpoint=handle_swagger_ui, methods=["GET"]),
            Route(OPENAPI_PATH, endpoint=handle_openapi, methods=["GET"]),
            Mount(API_PREFIX, routes=catalog_routes + announcement_routes),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "OPTIONS"],
                allow_headers=["Content-Type"],
                max_age=86400,
            ),
            Middleware(ErrorHandlerMiddleware),
            Middleware(RequestLogMiddleware),
        ],
        exception_handlers={404: not_found_handler},
    )
    application.state.aggregator = aggregator
    application.state.provider_service = provider_service or ProviderSyncService(
        [], aggregator
    )
    application.state.announcement_service = announcement_service or AnnouncementService(
        None, None
    )
    logger.info(
        "Starlette ASGI app '%s' created. API on %s, OpenAPI on %s",
        SERVER_NAME,
        API_PREFIX,
        OPENAPI_PATH,
    )
    return application


def build_app(config: CatalogConfig) -> Starlette:
    """Build registry, aggregator and services from *config*, then the app.

    Raises:
        CatalogBuildError: If the descriptor tree cannot be loaded.
    """
    registry = ServiceRegistry.build(config.catalog.data_dir)
    aggregator = CatalogAggregator(registry)
    provider_service = ProviderSyncService(
        config.providers,
        aggregator,
        timeout=config.http.timeout,
        user_agent=config.http.user_agent,
    )
    announcement_service = AnnouncementService(
        config.announcements.supabase_url,
        config.announcements.supabase_key,
        table=config.announcements.table,
        timeout=config.http.timeout,
    )
    return create_app(
        aggregator,
        provider_service=provider_service,
        announcement_service=announcement_service,
    )
