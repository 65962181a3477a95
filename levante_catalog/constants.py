"""Shared constants for Levante Catalog."""

SERVER_NAME = "Levante Catalog"
SERVER_VERSION = "1.0.0"
AUTHOR = "levante-hub"

# Network defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787

# Route prefixes
API_PREFIX = "/api"
OPENAPI_PATH = "/openapi.json"

# Catalog envelope
CATALOG_VERSION = "1.0.0"
CATALOG_PROVIDER_ID = "levante-api-services"
CATALOG_PROVIDER_NAME = "Levante API Services"
CATALOG_HOMEPAGE = "https://github.com/levante-hub/Levante-Store"

# Data tree layout
DEFAULT_DATA_DIR = "data/mcps"
META_FILENAME = "_meta.json"
SCHEMA_FILENAME = "_schema.json"

# Advisory cache headers
CATALOG_CACHE_CONTROL = "public, max-age=3600"
ANNOUNCEMENTS_CACHE_CONTROL = "public, max-age=300"

# Outbound HTTP
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "Levante-Store/1.0"

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"
