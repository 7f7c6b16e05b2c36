"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from tfdrift.models.drift import DriftRecord, ReconcileResult
from tfdrift.models.resource import Resource

console = Console()


def _emit(data: Any, fmt: str) -> bool:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
        return True
    if fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))
        return True
    return False


def _resource_ref(res: Resource) -> dict[str, Any]:
    return {
        "kind": res.kind.value,
        "namespace": res.namespace,
        "name": res.name,
    }


def hash_to_dict(res: Resource, h: str) -> dict[str, Any]:
    data = _resource_ref(res)
    data["hash"] = h
    return data


def record_to_dict(res: Resource) -> dict[str, Any]:
    record = DriftRecord.from_resource(res)
    data = _resource_ref(res)
    data.update({
        "drifted": record.drifted,
        "expected_hash": record.expected_hash,
        "live_hash": record.live_hash,
        "drifted_at": record.drifted_at,
        "last_checked_at": record.last_checked_at,
    })
    return data


def result_to_dict(result: ReconcileResult) -> dict[str, Any]:
    return {
        "kind": result.key.kind.value,
        "namespace": result.key.namespace,
        "name": result.key.name,
        "state": result.state.value,
        "expected_hash": result.expected_hash,
        "live_hash": result.live_hash,
        "patch": result.patch,
        "patched": result.patched,
        "notified": result.notification is not None,
    }


def output_hashes(rows: list[tuple[Resource, str]], fmt: str) -> None:
    if not _emit([hash_to_dict(res, h) for res, h in rows], fmt):
        from tfdrift.output.tables import hash_table
        console.print(hash_table(rows))


def output_status(resources: list[Resource], fmt: str, wide: bool = False) -> None:
    if not _emit([record_to_dict(res) for res in resources], fmt):
        from tfdrift.output.tables import status_table
        console.print(status_table(resources, wide=wide))


def output_result(result: ReconcileResult, fmt: str) -> None:
    if not _emit(result_to_dict(result), fmt):
        from tfdrift.output.tables import reconcile_panel
        console.print(reconcile_panel(result))
