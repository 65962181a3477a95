"""OpenAPI 3.0 document and Swagger UI page for the public API."""

from typing import Any, Dict

from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse

from levante_catalog.constants import (
    API_PREFIX,
    CATALOG_HOMEPAGE,
    CATALOG_PROVIDER_NAME,
    OPENAPI_PATH,
    SERVER_VERSION,
)

_DESCRIPTION = """
API services for the Levante ecosystem.

## MCP Catalog
Discover and retrieve MCP (Model Context Protocol) server configurations
organized by service providers. Each MCP includes a configuration template
for its transport type (stdio, sse, streamable-http).

### Source Types
- **official**: MCPs created and maintained by the service provider
- **community**: MCPs created by third-party contributors
"""


def _json(schema_ref: str, description: str = "Successful response") -> Dict[str, Any]:
    return {
        "description": description,
        "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema_ref}"}}},
    }


def _error(description: str) -> Dict[str, Any]:
    return _json("Error", description)


_PATHS: Dict[str, Any] = {
    "/mcps.json": {
        "get": {
            "tags": ["Catalog"],
            "summary": "Get full MCP catalog",
            "operationId": "getMcpsCatalog",
            "parameters": [
                {
                    "name": "source",
                    "in": "query",
                    "required": False,
                    "description": "Filter by source type",
                    "schema": {"type": "string", "enum": ["official", "community"]},
                }
            ],
            "responses": {
                "200": _json("MCPStoreResponse"),
                "400": _error("Invalid source filter"),
            },
        }
    },
    "/mcps": {
        "get": {
            "tags": ["Catalog"],
            "summary": "Redirect to /mcps.json",
            "operationId": "redirectMcps",
            "responses": {"302": {"description": "Redirect to the full catalog"}},
        }
    },
    "/mcps/services": {
        "get": {
            "tags": ["Services"],
            "summary": "List all services",
            "operationId": "getServices",
            "responses": {"200": _json("ServicesResponse")},
        }
    },
    "/mcps/stats": {
        "get": {
            "tags": ["Statistics"],
            "summary": "Catalog statistics",
            "operationId": "getStats",
            "responses": {"200": _json("StatsResponse")},
        }
    },
    "/mcps/service/{service}": {
        "get": {
            "tags": ["Services"],
            "summary": "Get MCPs of one service",
            "operationId": "getMcpsByService",
            "parameters": [
                {"name": "service", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "responses": {
                "200": _json("MCPStoreResponse"),
                "404": _error("Service not found"),
            },
        }
    },
    "/mcps/{id}": {
        "get": {
            "tags": ["Catalog"],
            "summary": "Get an MCP by id",
            "operationId": "getMcpById",
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "responses": {
                "200": _json("MCPServerDescriptor"),
                "404": _error("MCP server not found"),
            },
        }
    },
    "/providers": {
        "get": {
            "tags": ["Providers"],
            "summary": "List enabled providers",
            "operationId": "getProviders",
            "responses": {"200": _json("ProvidersResponse")},
        }
    },
    "/providers/mcps.json": {
        "get": {
            "tags": ["Providers"],
            "summary": "Catalog merged from every provider",
            "operationId": "getProvidersCatalog",
            "responses": {"200": _json("MCPStoreResponse")},
        }
    },
    "/providers/mcps/{id}": {
        "get": {
            "tags": ["Providers"],
            "summary": "Get an MCP by id across providers",
            "operationId": "getProviderMcpById",
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "responses": {
                "200": _json("MCPServerDescriptor"),
                "404": _error("MCP server not found"),
            },
        }
    },
    "/providers/{providerId}/mcps.json": {
        "get": {
            "tags": ["Providers"],
            "summary": "Catalog of one provider",
            "operationId": "getProviderCatalog",
            "parameters": [
                {"name": "providerId", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "responses": {
                "200": _json("MCPStoreResponse"),
                "404": _error("Provider failed or unknown"),
            },
        }
    },
    "/announcements": {
        "get": {
            "tags": ["Announcements"],
            "summary": "Latest announcement per category",
            "operationId": "getAnnouncements",
            "parameters": [
                {
                    "name": "category",
                    "in": "query",
                    "required": True,
                    "description": "Comma-separated: announcement, privacy, landing, app",
                    "schema": {"type": "string"},
                },
                {
                    "name": "language",
                    "in": "query",
                    "required": True,
                    "schema": {"type": "string", "enum": ["es", "en"]},
                },
            ],
            "responses": {
                "200": {
                    "description": "One announcement or a list, by number of categories",
                    "content": {
                        "application/json": {
                            "schema": {
                                "oneOf": [
                                    {"$ref": "#/components/schemas/AnnouncementResponse"},
                                    {"$ref": "#/components/schemas/AnnouncementsResponse"},
                                ]
                            }
                        }
                    },
                },
                "400": _error("Missing or invalid parameters"),
                "500": _error("Datastore error"),
            },
        }
    },
}

_STRING_MAP = {"type": "object", "additionalProperties": {"type": "string"}}

_SCHEMAS: Dict[str, Any] = {
    "Error": {
        "type": "object",
        "required": ["error"],
        "properties": {
            "error": {"type": "string"},
            "message": {"type": "string"},
            "timestamp": {"type": "string", "format": "date-time"},
        },
    },
    "InputDefinition": {
        "type": "object",
        "required": ["label", "required", "type"],
        "properties": {
            "label": {"type": "string"},
            "required": {"type": "boolean"},
            "type": {"type": "string", "enum": ["string", "password", "number", "boolean"]},
            "default": {"type": "string"},
            "description": {"type": "string"},
        },
    },
    "StdioTemplate": {
        "type": "object",
        "required": ["command"],
        "properties": {
            "command": {"type": "string"},
            "args": {"type": "array", "items": {"type": "string"}},
            "env": _STRING_MAP,
        },
    },
    "HttpTemplate": {
        "type": "object",
        "required": ["type", "url"],
        "properties": {
            "type": {"type": "string", "enum": ["sse", "streamable-http"]},
            "url": {"type": "string"},
            "headers": _STRING_MAP,
        },
    },
    "MCPServerDescriptor": {
        "type": "object",
        "required": ["id", "name", "source", "transport", "configuration"],
        "properties": {
            "id": {"type": "string"},
            "name": {"type": "string"},
            "displayName": {"type": "string"},
            "description": {"type": "string"},
            "category": {"type": "string"},
            "icon": {"type": "string"},
            "logoUrl": {"type": "string"},
            "source": {"type": "string", "enum": ["official", "community"]},
            "maintainer": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "url": {"type": "string"},
                    "github": {"type": "string"},
                },
            },
            "status": {"type": "string", "enum": ["active", "deprecated", "experimental"]},
            "version": {"type": "string"},
            "transport": {"type": "string", "enum": ["stdio", "sse", "streamable-http"]},
            "inputs": {
                "type": "object",
                "additionalProperties": {"$ref": "#/components/schemas/InputDefinition"},
            },
            "configuration": {
                "type": "object",
                "properties": {
                    "template": {
                        "oneOf": [
                            {"$ref": "#/components/schemas/StdioTemplate"},
                            {"$ref": "#/components/schemas/HttpTemplate"},
                        ]
                    }
                },
            },
            "metadata": {
                "type": "object",
                "properties": {
                    "homepage": {"type": "string"},
                    "author": {"type": "string"},
                    "repository": {"type": "string"},
                    "addedAt": {"type": "string"},
                    "lastUpdated": {"type": "string"},
                    "useCount": {"type": "integer"},
                },
            },
            "provider": {"type": "string"},
        },
    },
    "MCPStoreResponse": {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "provider": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "homepage": {"type": "string"},
                },
            },
            "servers": {
                "type": "array",
                "items": {"$ref": "#/components/schemas/MCPServerDescriptor"},
            },
        },
    },
    "ServiceMeta": {
        "type": "object",
        "properties": {
            "service": {"type": "string"},
            "displayName": {"type": "string"},
            "description": {"type": "string"},
            "website": {"type": "string", "nullable": True},
            "icon": {"type": "string"},
            "category": {"type": "string"},
        },
    },
    "ServicesResponse": {
        "type": "object",
        "properties": {
            "services": {"type": "array", "items": {"$ref": "#/components/schemas/ServiceMeta"}}
        },
    },
    "StatsResponse": {
        "type": "object",
        "properties": {
            "total": {"type": "integer"},
            "official": {"type": "integer"},
            "community": {"type": "integer"},
            "services": {"type": "integer"},
            "serviceList": {"type": "array", "items": {"type": "string"}},
        },
    },
    "ProvidersResponse": {
        "type": "object",
        "properties": {
            "providers": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "name": {"type": "string"},
                        "description": {"type": "string"},
                        "type": {"type": "string", "enum": ["local", "api"]},
                        "endpoint": {"type": "string"},
                        "enabled": {"type": "boolean"},
                        "homepage": {"type": "string"},
                    },
                },
            }
        },
    },
    "Announcement": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "title": {"type": "string"},
            "full_text": {"type": "string"},
            "category": {"type": "string"},
            "created_at": {"type": "string"},
        },
    },
    "AnnouncementResponse": {
        "type": "object",
        "properties": {
            "announcement": {"$ref": "#/components/schemas/Announcement", "nullable": True}
        },
    },
    "AnnouncementsResponse": {
        "type": "object",
        "properties": {
            "announcements": {
                "type": "array",
                "items": {"$ref": "#/components/schemas/Announcement"},
            },
            "total": {"type": "integer"},
        },
    },
}

OPENAPI_SPEC: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {
        "title": CATALOG_PROVIDER_NAME,
        "description": _DESCRIPTION,
        "version": SERVER_VERSION,
        "contact": {"name": CATALOG_PROVIDER_NAME, "url": CATALOG_HOMEPAGE},
        "license": {"name": "MIT", "url": "https://opensource.org/licenses/MIT"},
    },
    "servers": [{"url": API_PREFIX, "description": "API Base URL"}],
    "tags": [
        {"name": "Catalog", "description": "MCP catalog operations"},
        {"name": "Services", "description": "Service provider operations"},
        {"name": "Statistics", "description": "Catalog statistics"},
        {"name": "Providers", "description": "External provider catalogs"},
        {"name": "Announcements", "description": "Announcements operations"},
    ],
    "paths": _PATHS,
    "components": {"schemas": _SCHEMAS},
}

_SWAGGER_UI_HTML = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{CATALOG_PROVIDER_NAME}</title>
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css" />
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js" crossorigin></script>
  <script>
    window.onload = () => {{
      window.ui = SwaggerUIBundle({{
        url: '{OPENAPI_PATH}',
        dom_id: '#swagger-ui',
        requestInterceptor: (req) => {{
          req.headers['Cache-Control'] = 'no-cache';
          req.headers['Pragma'] = 'no-cache';
          return req;
        }}
      }});
    }};
  </script>
</body>
</html>
"""


async def handle_openapi(request: Request) -> JSONResponse:
    return JSONResponse(OPENAPI_SPEC)


async def handle_swagger_ui(request: Request) -> HTMLResponse:
    return HTMLResponse(_SWAGGER_UI_HTML)
