"""Parse multi-document YAML manifests into watched resources."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from tfdrift.models import ResourceKind
from tfdrift.models.resource import Resource

logger = logging.getLogger(__name__)

_SUPPORTED_KINDS = {kind.display_name: kind for kind in ResourceKind}


def parse_manifest(manifest: str, default_namespace: str = "default") -> list[Resource]:
    """Parse a multi-document YAML string into Deployments and Services.

    Documents of other kinds are skipped; ``List`` documents are expanded.
    """
    resources: list[Resource] = []
    if not manifest:
        return resources

    for doc in yaml.safe_load_all(manifest):
        if not doc or not isinstance(doc, dict):
            continue
        items = (doc.get("items") or []) if doc.get("kind") == "List" else [doc]
        for item in items:
            if not isinstance(item, dict):
                continue
            kind = _SUPPORTED_KINDS.get(item.get("kind", ""))
            if kind is None:
                logger.debug("Skipping unsupported kind %r", item.get("kind"))
                continue
            res = Resource.from_dict(item, kind=kind)
            if not res.namespace:
                res.namespace = default_namespace
            resources.append(res)
    return resources


def load_manifest_file(path: Path, default_namespace: str = "default") -> list[Resource]:
    return parse_manifest(path.read_text(encoding="utf-8"), default_namespace=default_namespace)
