"""Query engine over the service registry."""

from __future__ import annotations

from typing import Dict, List, Optional

from levante_catalog.catalog.models import CanonicalDescriptor, ServiceMeta
from levante_catalog.catalog.registry import ServiceRegistry


class CatalogAggregator:
    """Read-only lookups over a :class:`ServiceRegistry`.

    Every query walks the full descriptor list except the per-service
    lookups, which are dictionary hits.  None of them mutate the registry.

    Parameters
    ----------
    registry:
        The registry built at process start.
    """

    def __init__(self, registry: ServiceRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    def aggregate_all(self) -> List[CanonicalDescriptor]:
        """All descriptors, services in registry order."""
        result: List[CanonicalDescriptor] = []
        for entry in self._registry.entries():
            result.extend(entry.descriptors)
        return result

    def get_by_service(self, service_name: str) -> List[CanonicalDescriptor]:
        """Descriptors of one service; empty for unknown services."""
        entry = self._registry.get(service_name)
        return list(entry.descriptors) if entry is not None else []

    def get_by_source(self, source: str) -> List[CanonicalDescriptor]:
        return [d for d in self.aggregate_all() if d.source == source]

    def get_by_id(self, descriptor_id: str) -> Optional[CanonicalDescriptor]:
        """First descriptor with *descriptor_id*, or ``None``."""
        for descriptor in self.aggregate_all():
            if descriptor.id == descriptor_id:
                return descriptor
        return None

    def get_services(self) -> List[ServiceMeta]:
        return [entry.meta for entry in self._registry.entries()]

    def get_service_names(self) -> List[str]:
        return self._registry.names()

    def get_service_meta(self, service_name: str) -> Optional[ServiceMeta]:
        entry = self._registry.get(service_name)
        return entry.meta if entry is not None else None

    def get_count_by_source(self) -> Dict[str, int]:
        counts = {"official": 0, "community": 0}
        for descriptor in self.aggregate_all():
            if descriptor.source in counts:
                counts[descriptor.source] += 1
        return counts

    def find_duplicate_ids(self) -> List[str]:
        return self._registry.duplicate_ids()
