"""HTTP layer: Starlette app factory, routes and middleware."""

from levante_catalog.server.app import build_app, create_app

__all__ = ["build_app", "create_app"]
