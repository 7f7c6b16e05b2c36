"""Watched resource models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tfdrift.models import ResourceKind


@dataclass(frozen=True)
class ResourceKey:
    kind: ResourceKind
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class Resource:
    kind: ResourceKind
    namespace: str = ""
    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    spec: dict[str, Any] = field(default_factory=dict)
    resource_version: str = ""

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(kind=self.kind, namespace=self.namespace, name=self.name)

    @classmethod
    def from_dict(cls, d: dict, kind: ResourceKind | None = None) -> Resource:
        """Build from an API object in camelCase dict form.

        ``kind`` overrides the object's own ``kind`` field, which list
        responses leave empty.
        """
        if kind is None:
            kind = ResourceKind.from_str(d.get("kind", ""))
        metadata = d.get("metadata", {}) or {}
        return cls(
            kind=kind,
            namespace=metadata.get("namespace", "") or "",
            name=metadata.get("name", "") or "",
            labels=dict(metadata.get("labels") or {}),
            annotations=dict(metadata.get("annotations") or {}),
            spec=d.get("spec", {}) or {},
            resource_version=metadata.get("resourceVersion", "") or "",
        )
