"""tfdrift status - Show drift annotations recorded on opted-in resources."""

from __future__ import annotations

from typing import Optional

import typer

from tfdrift.cli.options import ContextOption, NamespaceOption, OutputOption, parse_kind
from tfdrift.config.settings import settings
from tfdrift.core.errors import DriftError
from tfdrift.core.k8s_client import K8sClient
from tfdrift.models import ResourceKind
from tfdrift.models.drift import DriftRecord
from tfdrift.models.resource import Resource
from tfdrift.output.formatters import output_status


def status(
    kind: Optional[str] = typer.Argument(None, help="Resource kind (default: all supported kinds)"),
    output: str = OutputOption,
    namespace: Optional[str] = NamespaceOption,
    context: Optional[str] = ContextOption,
    drifted_only: bool = typer.Option(False, "--drifted", help="Only show drifted resources"),
    wide: bool = typer.Option(False, "--wide", help="Show full hashes"),
) -> None:
    """List opted-in resources with their recorded drift verdicts."""
    k8s = K8sClient(context=context)
    kinds = [parse_kind(kind)] if kind else list(ResourceKind)

    resources: list[Resource] = []
    try:
        for k in kinds:
            resources.extend(k8s.list_resources(k, namespace=namespace, label_selector=settings.opt_in_selector))
    except DriftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if drifted_only:
        resources = [r for r in resources if DriftRecord.from_resource(r).drifted == "true"]

    resources.sort(key=lambda r: (r.kind.value, r.namespace, r.name))
    output_status(resources, output, wide=wide)
