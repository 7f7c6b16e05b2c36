"""Project live resource specs into fingerprints and hash them.

Each supported kind has one strategy in ``FINGERPRINTERS`` that turns a
spec dict (Kubernetes API camelCase form) into a fingerprint model. The
projection keeps only intended configuration, sorts every list by a total
order and materializes every string map in key order with trimmed values,
so semantically equal specs always produce the same bytes.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Callable

from tfdrift.core.errors import SerializationError, UnsupportedKindError
from tfdrift.models import ResourceKind
from tfdrift.models.fingerprint import (
    ContainerFingerprint,
    ContainerPortFingerprint,
    DeploymentFingerprint,
    EnvVarFingerprint,
    Fingerprint,
    PodTemplateFingerprint,
    ResourceRequirementsFingerprint,
    ServiceFingerprint,
    ServicePortFingerprint,
    StrategyFingerprint,
)
from tfdrift.models.resource import Resource

logger = logging.getLogger(__name__)


# ---- field coercion ----

def _mapping(value: Any, path: str) -> dict | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise SerializationError(f"{path}: expected a mapping, got {type(value).__name__}")
    return value


def _sequence(value: Any, path: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SerializationError(f"{path}: expected a list, got {type(value).__name__}")
    return value


def _string(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise SerializationError(f"{path}: expected a string, got {type(value).__name__}")
    return value


def _integer(value: Any, path: str) -> int | None:
    if value is None:
        return None
    # bool is an int subclass but never a valid port or replica count
    if isinstance(value, bool) or not isinstance(value, int):
        raise SerializationError(f"{path}: expected an integer, got {type(value).__name__}")
    return value


def _int_or_string(value: Any, path: str) -> int | str | None:
    if value is None or isinstance(value, str):
        return value
    return _integer(value, path)


def _quantity(value: Any, path: str) -> str:
    """Render a resource quantity as a trimmed string."""
    if isinstance(value, bool):
        raise SerializationError(f"{path}: expected a quantity, got bool")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format(value, "g")
    if isinstance(value, str):
        return value.strip()
    raise SerializationError(f"{path}: expected a quantity, got {type(value).__name__}")


def canonical_map(
    m: Any,
    path: str,
    value_fn: Callable[[Any, str], str] | None = None,
) -> dict[str, str] | None:
    """Materialize a string map in key order with whitespace-trimmed values.

    Keys are left as-is and empty values are kept. ``None`` stays ``None``
    so an absent map is distinguishable from an empty one.
    """
    m = _mapping(m, path)
    if m is None:
        return None
    for key in m:
        if not isinstance(key, str):
            raise SerializationError(f"{path}: map key {key!r} is not a string")
    out: dict[str, str] = {}
    for key in sorted(m):
        value = m[key]
        if value_fn is not None:
            out[key] = value_fn(value, f"{path}.{key}")
            continue
        if not isinstance(value, str):
            raise SerializationError(f"{path}.{key}: expected a string, got {type(value).__name__}")
        out[key] = value.strip()
    return out


# ---- Deployment ----

def _fingerprint_env(raw: list, path: str) -> list[EnvVarFingerprint]:
    env: list[EnvVarFingerprint] = []
    for i, e in enumerate(raw):
        e = _mapping(e, f"{path}[{i}]") or {}
        # entries with an indirect source are dropped, not nulled
        if e.get("valueFrom") is not None:
            continue
        name = _string(e.get("name"), f"{path}[{i}].name") or ""
        env.append(EnvVarFingerprint(name=name, value=_string(e.get("value"), f"{path}[{i}].value")))
    env.sort(key=EnvVarFingerprint.sort_key)
    return env


def _fingerprint_container_ports(raw: list, path: str) -> list[ContainerPortFingerprint]:
    ports: list[ContainerPortFingerprint] = []
    for i, p in enumerate(raw):
        p = _mapping(p, f"{path}[{i}]") or {}
        ports.append(ContainerPortFingerprint(
            container_port=_integer(p.get("containerPort"), f"{path}[{i}].containerPort"),
            name=_string(p.get("name"), f"{path}[{i}].name"),
            protocol=_string(p.get("protocol"), f"{path}[{i}].protocol"),
        ))
    ports.sort(key=ContainerPortFingerprint.sort_key)
    return ports


def _fingerprint_container(c: Any, path: str) -> ContainerFingerprint:
    c = _mapping(c, path) or {}
    resources = _mapping(c.get("resources"), f"{path}.resources") or {}
    return ContainerFingerprint(
        name=_string(c.get("name"), f"{path}.name") or "",
        image=_string(c.get("image"), f"{path}.image"),
        env=_fingerprint_env(_sequence(c.get("env"), f"{path}.env"), f"{path}.env"),
        ports=_fingerprint_container_ports(_sequence(c.get("ports"), f"{path}.ports"), f"{path}.ports"),
        resources=ResourceRequirementsFingerprint(
            limits=canonical_map(resources.get("limits"), f"{path}.resources.limits", _quantity),
            requests=canonical_map(resources.get("requests"), f"{path}.resources.requests", _quantity),
        ),
    )


def _fingerprint_strategy(raw: Any) -> StrategyFingerprint | None:
    strategy = _mapping(raw, "spec.strategy")
    if strategy is None:
        return None
    rolling = _mapping(strategy.get("rollingUpdate"), "spec.strategy.rollingUpdate") or {}
    return StrategyFingerprint(
        type=_string(strategy.get("type"), "spec.strategy.type"),
        max_unavailable=_int_or_string(rolling.get("maxUnavailable"), "spec.strategy.rollingUpdate.maxUnavailable"),
        max_surge=_int_or_string(rolling.get("maxSurge"), "spec.strategy.rollingUpdate.maxSurge"),
    )


def fingerprint_deployment(spec: dict[str, Any]) -> DeploymentFingerprint:
    """Project a Deployment spec into its fingerprint."""
    spec = _mapping(spec, "spec") or {}
    template = _mapping(spec.get("template"), "spec.template") or {}
    metadata = _mapping(template.get("metadata"), "spec.template.metadata") or {}
    pod_spec = _mapping(template.get("spec"), "spec.template.spec") or {}

    containers_path = "spec.template.spec.containers"
    containers = [
        _fingerprint_container(c, f"{containers_path}[{i}]")
        for i, c in enumerate(_sequence(pod_spec.get("containers"), containers_path))
    ]
    containers.sort(key=ContainerFingerprint.sort_key)

    return DeploymentFingerprint(
        replicas=_integer(spec.get("replicas"), "spec.replicas"),
        strategy=_fingerprint_strategy(spec.get("strategy")),
        template=PodTemplateFingerprint(
            labels=canonical_map(metadata.get("labels"), "spec.template.metadata.labels"),
            annotations=canonical_map(metadata.get("annotations"), "spec.template.metadata.annotations"),
            containers=containers,
        ),
    )


# ---- Service ----

def _target_port(value: Any, path: str) -> str | None:
    value = _int_or_string(value, path)
    if value is None:
        return None
    return str(value)


def fingerprint_service(spec: dict[str, Any]) -> ServiceFingerprint:
    """Project a Service spec into its fingerprint."""
    spec = _mapping(spec, "spec") or {}
    ports: list[ServicePortFingerprint] = []
    for i, p in enumerate(_sequence(spec.get("ports"), "spec.ports")):
        path = f"spec.ports[{i}]"
        p = _mapping(p, path) or {}
        ports.append(ServicePortFingerprint(
            port=_integer(p.get("port"), f"{path}.port"),
            name=_string(p.get("name"), f"{path}.name"),
            protocol=_string(p.get("protocol"), f"{path}.protocol"),
            target_port=_target_port(p.get("targetPort"), f"{path}.targetPort"),
            node_port=_integer(p.get("nodePort"), f"{path}.nodePort"),
        ))
    ports.sort(key=ServicePortFingerprint.sort_key)

    return ServiceFingerprint(
        type=_string(spec.get("type"), "spec.type"),
        selector=canonical_map(spec.get("selector"), "spec.selector"),
        ports=ports,
    )


FINGERPRINTERS: dict[ResourceKind, Callable[[dict[str, Any]], Fingerprint]] = {
    ResourceKind.DEPLOYMENT: fingerprint_deployment,
    ResourceKind.SERVICE: fingerprint_service,
}


# ---- hashing ----

def canonical_bytes(fp: Fingerprint) -> bytes:
    """Encode a fingerprint as compact UTF-8 JSON in its constructed field order."""
    try:
        encoded = json.dumps(
            fp.to_dict(),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Could not encode fingerprint: {e}") from e
    return encoded.encode("utf-8")


def hash_fingerprint(fp: Fingerprint) -> str:
    """Return the lowercase hex SHA-256 of the canonical encoding."""
    return hashlib.sha256(canonical_bytes(fp)).hexdigest()


def fingerprint_spec(kind: ResourceKind, spec: dict[str, Any]) -> Fingerprint:
    strategy = FINGERPRINTERS.get(kind)
    if strategy is None:
        raise UnsupportedKindError(f"No fingerprint strategy for kind {kind!r}")
    return strategy(spec)


def hash_spec(kind: ResourceKind, spec: dict[str, Any]) -> str:
    return hash_fingerprint(fingerprint_spec(kind, spec))


def compute_hash(resource: Resource) -> str:
    """Fingerprint and hash a resource's live spec."""
    live_hash = hash_spec(resource.kind, resource.spec)
    logger.debug("Computed %s hash for %s: %s", resource.kind.value, resource.key, live_hash)
    return live_hash
