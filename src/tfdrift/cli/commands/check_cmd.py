"""tfdrift check <kind> <name> - Reconcile one resource immediately."""

from __future__ import annotations

from typing import Optional

import typer

from tfdrift.cli.options import ContextOption, OutputOption, TargetNamespaceOption, parse_kind
from tfdrift.core.errors import DriftError
from tfdrift.core.k8s_client import K8sClient
from tfdrift.core.notifier import EventNotifier, LogNotifier
from tfdrift.core.reconciler import DriftReconciler
from tfdrift.models import DriftState
from tfdrift.models.resource import ResourceKey
from tfdrift.output.formatters import output_result


def check(
    kind: str = typer.Argument(help="Resource kind: deployment or service"),
    name: str = typer.Argument(help="Resource name"),
    output: str = OutputOption,
    namespace: str = TargetNamespaceOption,
    context: Optional[str] = ContextOption,
    events: bool = typer.Option(True, "--events/--no-events", help="Record a Kubernetes Event on drift"),
    fail_on_drift: bool = typer.Option(False, "--fail-on-drift", help="Exit with code 3 when drift is found"),
) -> None:
    """Compare the live hash with the baseline and record the verdict."""
    k8s = K8sClient(context=context)
    notifier = EventNotifier(k8s) if events else LogNotifier()
    reconciler = DriftReconciler(k8s, notifier)
    key = ResourceKey(kind=parse_kind(kind), namespace=namespace, name=name)

    try:
        result = reconciler.reconcile(key)
    except DriftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if result.state == DriftState.NOT_FOUND:
        typer.echo(f"{key.kind.display_name} '{key}' not found.", err=True)
        raise typer.Exit(code=1)

    output_result(result, output)

    if fail_on_drift and result.has_drift:
        raise typer.Exit(code=3)
