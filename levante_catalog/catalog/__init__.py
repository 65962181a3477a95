"""Catalog core: descriptor models, registry, aggregator and name normalization."""

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.models import CanonicalDescriptor, InputDefinition, ServiceMeta
from levante_catalog.catalog.names import normalize_name
from levante_catalog.catalog.registry import ServiceEntry, ServiceRegistry

__all__ = [
    "CanonicalDescriptor",
    "CatalogAggregator",
    "InputDefinition",
    "ServiceEntry",
    "ServiceMeta",
    "ServiceRegistry",
    "normalize_name",
]
