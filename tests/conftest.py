"""Shared fixtures: on-disk descriptor trees and descriptor factories."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import pytest


def make_descriptor(
    desc_id: str,
    *,
    name: Optional[str] = None,
    source: str = "official",
    transport: str = "stdio",
    **extra: Any,
) -> Dict[str, Any]:
    """Minimal valid descriptor document."""
    if transport == "stdio":
        template: Dict[str, Any] = {"command": "npx", "args": ["-y", desc_id], "env": {}}
    else:
        template = {"type": transport, "url": f"https://example.com/{desc_id}"}
    doc: Dict[str, Any] = {
        "id": desc_id,
        "name": name or desc_id.title(),
        "description": f"{desc_id} server",
        "category": "general",
        "source": source,
        "transport": transport,
        "configuration": {"template": template},
    }
    doc.update(extra)
    return doc


def make_meta(service: str, **extra: Any) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "service": service,
        "displayName": service.title(),
        "description": f"{service} service",
        "website": f"https://{service}.example.com",
    }
    meta.update(extra)
    return meta


def write_json(path: str, data: Any) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh)


def write_service(
    root: str, service: str, *descriptors: Dict[str, Any], meta: bool = True
) -> None:
    """Write ``<root>/<service>/`` with optional ``_meta.json`` and descriptors."""
    os.makedirs(os.path.join(root, service), exist_ok=True)
    if meta:
        write_json(os.path.join(root, service, "_meta.json"), make_meta(service))
    for doc in descriptors:
        write_json(os.path.join(root, service, f"{doc['id']}.json"), doc)


@pytest.fixture()
def alpha_beta_tree(tmp_path):
    """"alpha" with two descriptors, "beta" with one."""
    root = str(tmp_path)
    write_service(
        root,
        "alpha",
        make_descriptor("alpha-one", source="official"),
        make_descriptor("alpha-two", source="community", transport="sse"),
    )
    write_service(root, "beta", make_descriptor("beta-one", source="community"))
    return root
