"""Fingerprint models.

A fingerprint is the subset of a resource spec that represents intended
configuration. ``to_dict()`` builds the canonical structure that gets
serialized and hashed: field order is fixed, optional fields that are
``None`` are left out entirely, and explicit zero values are kept.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

IntOrString = Union[int, str]


def _put(d: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        d[key] = value


@dataclass
class EnvVarFingerprint:
    name: str
    value: str | None = None

    def sort_key(self) -> tuple:
        return (self.name, self.value is not None, self.value or "")

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name}
        _put(d, "value", self.value)
        return d


@dataclass
class ContainerPortFingerprint:
    container_port: int | None = None
    name: str | None = None
    protocol: str | None = None

    def sort_key(self) -> tuple:
        return (
            self.container_port is not None, self.container_port or 0,
            self.name is not None, self.name or "",
            self.protocol is not None, self.protocol or "",
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "name", self.name)
        _put(d, "containerPort", self.container_port)
        _put(d, "protocol", self.protocol)
        return d


@dataclass
class ResourceRequirementsFingerprint:
    limits: dict[str, str] | None = None
    requests: dict[str, str] | None = None

    @property
    def is_empty(self) -> bool:
        return self.limits is None and self.requests is None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "limits", self.limits)
        _put(d, "requests", self.requests)
        return d


@dataclass
class ContainerFingerprint:
    name: str
    image: str | None = None
    env: list[EnvVarFingerprint] = field(default_factory=list)
    ports: list[ContainerPortFingerprint] = field(default_factory=list)
    resources: ResourceRequirementsFingerprint = field(default_factory=ResourceRequirementsFingerprint)

    def sort_key(self) -> tuple:
        # names are unique within a pod; the encoded remainder breaks any tie
        return (self.name, json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name}
        _put(d, "image", self.image)
        if self.env:
            d["env"] = [e.to_dict() for e in self.env]
        if self.ports:
            d["ports"] = [p.to_dict() for p in self.ports]
        if not self.resources.is_empty:
            d["resources"] = self.resources.to_dict()
        return d


@dataclass
class PodTemplateFingerprint:
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    containers: list[ContainerFingerprint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "labels", self.labels)
        _put(d, "annotations", self.annotations)
        d["containers"] = [c.to_dict() for c in self.containers]
        return d


@dataclass
class StrategyFingerprint:
    type: str | None = None
    max_unavailable: IntOrString | None = None
    max_surge: IntOrString | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "type", self.type)
        if self.max_unavailable is not None or self.max_surge is not None:
            rolling: dict[str, Any] = {}
            _put(rolling, "maxUnavailable", self.max_unavailable)
            _put(rolling, "maxSurge", self.max_surge)
            d["rollingUpdate"] = rolling
        return d


@dataclass
class DeploymentFingerprint:
    replicas: int | None = None
    strategy: StrategyFingerprint | None = None
    template: PodTemplateFingerprint = field(default_factory=PodTemplateFingerprint)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "replicas", self.replicas)
        if self.strategy is not None:
            d["strategy"] = self.strategy.to_dict()
        d["template"] = self.template.to_dict()
        return d


@dataclass
class ServicePortFingerprint:
    port: int | None = None
    name: str | None = None
    protocol: str | None = None
    target_port: str | None = None
    node_port: int | None = None

    def sort_key(self) -> tuple:
        return (
            self.port is not None, self.port or 0,
            self.name is not None, self.name or "",
            self.protocol is not None, self.protocol or "",
            self.target_port is not None, self.target_port or "",
            self.node_port is not None, self.node_port or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "name", self.name)
        _put(d, "protocol", self.protocol)
        _put(d, "port", self.port)
        _put(d, "targetPort", self.target_port)
        _put(d, "nodePort", self.node_port)
        return d


@dataclass
class ServiceFingerprint:
    type: str | None = None
    selector: dict[str, str] | None = None
    ports: list[ServicePortFingerprint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        _put(d, "type", self.type)
        _put(d, "selector", self.selector)
        d["ports"] = [p.to_dict() for p in self.ports]
        return d


Fingerprint = Union[DeploymentFingerprint, ServiceFingerprint]
