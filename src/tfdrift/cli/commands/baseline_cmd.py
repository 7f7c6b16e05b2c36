"""tfdrift baseline <kind> <name> - Record the expected hash after an IaC apply."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from tfdrift.cli.options import ContextOption, TargetNamespaceOption, parse_kind
from tfdrift.config.settings import settings
from tfdrift.core.errors import DriftError
from tfdrift.core.fingerprint import compute_hash
from tfdrift.core.k8s_client import K8sClient
from tfdrift.models.resource import ResourceKey

console = Console()


def baseline(
    kind: str = typer.Argument(help="Resource kind: deployment or service"),
    name: str = typer.Argument(help="Resource name"),
    expected: Optional[str] = typer.Option(
        None, "--hash", help="Baseline hash to record (default: the current live hash)",
    ),
    namespace: str = TargetNamespaceOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Write the baseline hash annotation, defaulting to the live fingerprint."""
    k8s = K8sClient(context=context)
    key = ResourceKey(kind=parse_kind(kind), namespace=namespace, name=name)

    try:
        res = k8s.get(key)
        if res is None:
            typer.echo(f"{key.kind.display_name} '{key}' not found.", err=True)
            raise typer.Exit(code=1)
        value = expected or compute_hash(res)
        if k8s.patch_annotations(key, {settings.ann_expected_hash: value}) is None:
            typer.echo(f"{key.kind.display_name} '{key}' was deleted.", err=True)
            raise typer.Exit(code=1)
    except DriftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    console.print(f"[green]Baseline recorded[/green] {key.kind.value} {key}: {value}")
