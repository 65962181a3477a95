"""Offline validation of the descriptor tree.

Unlike :meth:`ServiceRegistry.build`, validation does not stop at the first
bad file: every descriptor is checked and a per-file report is returned.
Each file is checked against the :class:`CanonicalDescriptor` model and,
when the tree ships a ``_schema.json``, against that JSON Schema as well.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema import exceptions as jsonschema_exceptions
from pydantic import ValidationError

from levante_catalog.catalog.models import CanonicalDescriptor
from levante_catalog.constants import SCHEMA_FILENAME
from levante_catalog.errors import CatalogBuildError

logger = logging.getLogger(__name__)


@dataclass
class FileValidationResult:
    file: str
    valid: bool = True
    errors: List[str] = field(default_factory=list)


def find_descriptor_files(root: Path) -> List[Path]:
    """Every non-``_`` JSON file below *root*, recursively, sorted."""
    return sorted(
        p for p in root.rglob("*.json") if p.is_file() and not p.name.startswith("_")
    )


def load_schema_validator(root: Path) -> Optional[Any]:
    """JSON Schema validator for ``<root>/_schema.json``, if present."""
    schema_path = root / SCHEMA_FILENAME
    if not schema_path.is_file():
        return None
    try:
        with open(schema_path, "r", encoding="utf-8") as fh:
            schema = json.load(fh)
    except (OSError, ValueError) as exc:
        raise CatalogBuildError(f"Error loading schema: {exc}", path=str(schema_path)) from exc
    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema_exceptions.SchemaError as exc:
        raise CatalogBuildError(f"Invalid schema: {exc.message}", path=str(schema_path)) from exc
    return Draft202012Validator(schema)


def _schema_errors(validator: Any, document: Any) -> List[str]:
    errors = sorted(
        validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path]
    )
    return [f"/{'/'.join(str(p) for p in e.absolute_path)} {e.message}" for e in errors]


def _model_errors(document: Any) -> List[str]:
    try:
        CanonicalDescriptor.model_validate(document)
    except ValidationError as exc:
        return [
            f"/{'/'.join(str(p) for p in err['loc'])} {err['msg']}" for err in exc.errors()
        ]
    return []


def validate_file(
    path: Path, root: Path, schema_validator: Optional[Any] = None
) -> FileValidationResult:
    result = FileValidationResult(file=str(path.relative_to(root)))
    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, ValueError) as exc:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError.
        result.valid = False
        result.errors.append(f"Parse error: {exc}")
        return result

    errors = _model_errors(document)
    if schema_validator is not None:
        errors.extend(_schema_errors(schema_validator, document))
    if errors:
        result.valid = False
        result.errors = errors
    return result


def validate_tree(root_dir: str | Path) -> List[FileValidationResult]:
    """Validate every descriptor file under *root_dir*.

    Raises:
        CatalogBuildError: If the root is missing or the schema itself is
            unreadable.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise CatalogBuildError("Descriptor root is not a directory", path=str(root))

    schema_validator = load_schema_validator(root)
    if schema_validator is None:
        logger.info("No %s in '%s'; validating against the model only.", SCHEMA_FILENAME, root)

    results = [validate_file(p, root, schema_validator) for p in find_descriptor_files(root)]
    invalid = sum(1 for r in results if not r.valid)
    logger.info("Validated %d descriptor file(s): %d invalid.", len(results), invalid)
    return results


def summarize(results: List[FileValidationResult]) -> Dict[str, int]:
    valid = sum(1 for r in results if r.valid)
    return {"total": len(results), "valid": valid, "invalid": len(results) - valid}
