"""tfdrift hash - Compute fingerprint hashes from manifests or live resources."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tfdrift.cli.options import ContextOption, OutputOption, TargetNamespaceOption, parse_kind
from tfdrift.core.errors import DriftError
from tfdrift.core.fingerprint import compute_hash
from tfdrift.core.k8s_client import K8sClient
from tfdrift.models.resource import Resource, ResourceKey
from tfdrift.output.formatters import output_hashes
from tfdrift.utils.manifest_parser import load_manifest_file


def hash_(
    kind: Optional[str] = typer.Argument(None, help="Resource kind: deployment or service"),
    name: Optional[str] = typer.Argument(None, help="Resource name"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, readable=True,
        help="YAML manifest to fingerprint instead of live resources",
    ),
    output: str = OutputOption,
    namespace: str = TargetNamespaceOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Print the fingerprint hash of each Deployment and Service."""
    resources: list[Resource] = []
    if file is not None:
        resources = load_manifest_file(file, default_namespace=namespace)
        if not resources:
            typer.echo(f"No Deployments or Services found in {file}.", err=True)
            raise typer.Exit(code=1)
    elif kind and name:
        k8s = K8sClient(context=context)
        key = ResourceKey(kind=parse_kind(kind), namespace=namespace, name=name)
        try:
            res = k8s.get(key)
        except DriftError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        if res is None:
            typer.echo(f"{key.kind.display_name} '{key}' not found.", err=True)
            raise typer.Exit(code=1)
        resources = [res]
    else:
        typer.echo("Pass --file or a KIND and NAME.", err=True)
        raise typer.Exit(code=2)

    rows: list[tuple[Resource, str]] = []
    for res in resources:
        try:
            rows.append((res, compute_hash(res)))
        except DriftError as e:
            typer.echo(f"Cannot fingerprint {res.kind.value} {res.key}: {e}", err=True)
            raise typer.Exit(code=1)

    output_hashes(rows, output)
