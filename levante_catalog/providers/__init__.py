"""External descriptor providers: normalizers and the sync service."""

from levante_catalog.providers.normalizers import (
    NORMALIZERS,
    get_normalizer,
    normalize_aitempl,
    normalize_levante,
)
from levante_catalog.providers.service import ProviderSyncService, SyncOutcome, SyncState

__all__ = [
    "NORMALIZERS",
    "ProviderSyncService",
    "SyncOutcome",
    "SyncState",
    "get_normalizer",
    "normalize_aitempl",
    "normalize_levante",
]
