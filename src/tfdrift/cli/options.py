"""Shared CLI options."""

from __future__ import annotations

import typer

from tfdrift.models import ResourceKind

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Kubernetes namespace (default: all)")
TargetNamespaceOption = typer.Option("default", "--namespace", "-n", help="Kubernetes namespace")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")


def parse_kind(value: str) -> ResourceKind:
    try:
        return ResourceKind.from_str(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
