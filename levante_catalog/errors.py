"""
Defines project-specific exception classes.
"""
from typing import Optional


class CatalogBaseError(Exception):
    """Base class for all custom exceptions in Levante Catalog."""
    pass


class ConfigurationError(CatalogBaseError):
    """Raised when loading or validating the configuration file fails."""
    pass


class CatalogBuildError(CatalogBaseError):
    """
    Raised when the local descriptor tree cannot be loaded into the
    service registry (missing root, unreadable or malformed files).
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        full_msg = message if path is None else f"{message} (file: {path})"
        super().__init__(full_msg)


class ProviderError(CatalogBaseError):
    """
    Raised when fetching or normalizing an external provider catalog fails,
    or when the requested provider is unknown or disabled.
    """

    def __init__(self,
                 message: str,
                 provider_id: Optional[str] = None,
                 orig_exc: Optional[Exception] = None):
        self.provider_id = provider_id
        self.orig_exc = orig_exc

        full_msg = "Provider error"
        if provider_id:
            full_msg += f" (provider: {provider_id})"
        full_msg += f": {message}"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__})"
        super().__init__(full_msg)


class AnnouncementError(CatalogBaseError):
    """Raised when the announcements datastore rejects or fails a query."""
    pass
