"""
Levante Catalog - a read-only HTTP catalog of MCP server descriptors.

Levante Catalog loads a folder-per-service descriptor tree into an in-memory
registry, optionally merges external provider catalogs, and serves the result
through a small REST API with an OpenAPI document.
"""

from levante_catalog.constants import SERVER_NAME, SERVER_VERSION

__version__ = SERVER_VERSION
__app_name__ = SERVER_NAME

__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "__version__",
    "__app_name__",
]
