"""In-memory service registry built from the local descriptor tree.

Layout::

    <root>/
        <service>/
            _meta.json        service metadata (required to register)
            <descriptor>.json one file per descriptor
            _anything.json    reserved, never loaded as a descriptor

The registry is built once and is read-only afterwards.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from levante_catalog.catalog.models import CanonicalDescriptor, ServiceMeta
from levante_catalog.constants import META_FILENAME
from levante_catalog.errors import CatalogBuildError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceEntry:
    """A registered service: its metadata and ordered descriptors."""

    meta: ServiceMeta
    descriptors: Tuple[CanonicalDescriptor, ...] = field(default_factory=tuple)


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise CatalogBuildError(f"Malformed JSON: {exc}", path=str(path)) from exc
    except UnicodeDecodeError as exc:
        raise CatalogBuildError(f"File is not valid UTF-8: {exc}", path=str(path)) from exc
    except OSError as exc:
        raise CatalogBuildError(f"Unable to read file: {exc}", path=str(path)) from exc


def _validation_summary(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def load_service_meta(path: Path) -> ServiceMeta:
    """Parse and validate a ``_meta.json`` file."""
    try:
        return ServiceMeta.model_validate(_read_json(path))
    except ValidationError as exc:
        raise CatalogBuildError(
            f"Invalid service metadata: {_validation_summary(exc)}", path=str(path)
        ) from exc


def load_descriptor(path: Path) -> CanonicalDescriptor:
    """Parse and validate a single descriptor file."""
    try:
        return CanonicalDescriptor.model_validate(_read_json(path))
    except ValidationError as exc:
        raise CatalogBuildError(
            f"Invalid descriptor: {_validation_summary(exc)}", path=str(path)
        ) from exc


def iter_service_dirs(root: Path) -> List[Path]:
    """Immediate subdirectories of *root*, sorted by name."""
    return sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name)


def iter_descriptor_files(service_dir: Path) -> List[Path]:
    """Descriptor files of one service directory, sorted by name."""
    return sorted(
        (
            p
            for p in service_dir.iterdir()
            if p.is_file() and p.suffix == ".json" and not p.name.startswith("_")
        ),
        key=lambda p: p.name,
    )


class ServiceRegistry:
    """Immutable ``service name → ServiceEntry`` index.

    Use :meth:`build` to load a descriptor tree; the constructor accepts
    pre-built entries (insertion order is preserved).
    """

    def __init__(self, entries: Optional[Dict[str, ServiceEntry]] = None) -> None:
        self._entries: Dict[str, ServiceEntry] = dict(entries or {})

    @classmethod
    def build(cls, root_dir: str | Path) -> ServiceRegistry:
        """Load every service under *root_dir*.

        Pass 1 registers each directory holding a metadata file.  Pass 2
        attaches descriptor files to the entry of their parent directory;
        directories without metadata are skipped.

        Raises:
            CatalogBuildError: If the root is missing or any metadata or
                descriptor file is unreadable, malformed or invalid.
        """
        root = Path(root_dir)
        if not root.is_dir():
            raise CatalogBuildError("Descriptor root is not a directory", path=str(root))

        service_dirs = iter_service_dirs(root)

        metas: Dict[str, ServiceMeta] = {}
        for service_dir in service_dirs:
            meta_path = service_dir / META_FILENAME
            if meta_path.is_file():
                metas[service_dir.name] = load_service_meta(meta_path)

        attached: Dict[str, List[CanonicalDescriptor]] = {name: [] for name in metas}
        for service_dir in service_dirs:
            files = iter_descriptor_files(service_dir)
            if service_dir.name not in attached:
                if files:
                    logger.debug(
                        "Skipping %d descriptor(s) in '%s': no %s.",
                        len(files),
                        service_dir.name,
                        META_FILENAME,
                    )
                continue
            for path in files:
                attached[service_dir.name].append(load_descriptor(path))

        registry = cls(
            {
                name: ServiceEntry(meta=meta, descriptors=tuple(attached[name]))
                for name, meta in metas.items()
            }
        )

        duplicates = registry.duplicate_ids()
        if duplicates:
            logger.warning(
                "Duplicate descriptor id(s) in catalog, first occurrence wins: %s",
                ", ".join(duplicates),
            )
        logger.info(
            "Service registry built from '%s': %d service(s), %d descriptor(s).",
            root,
            len(registry),
            sum(len(e.descriptors) for e in registry.entries()),
        )
        return registry

    # ── read-only access ────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, name: str) -> Optional[ServiceEntry]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[ServiceEntry]:
        return list(self._entries.values())

    def duplicate_ids(self) -> List[str]:
        """Descriptor ids that occur more than once, in first-seen order."""
        counts = Counter(d.id for e in self._entries.values() for d in e.descriptors)
        return [desc_id for desc_id, n in counts.items() if n > 1]
