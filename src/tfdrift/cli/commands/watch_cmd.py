"""tfdrift watch - Run the drift controller until interrupted."""

from __future__ import annotations

import signal
from typing import Optional

import typer

from tfdrift.cli.options import ContextOption, NamespaceOption, parse_kind
from tfdrift.config.settings import settings
from tfdrift.core.controller import DriftController
from tfdrift.core.k8s_client import K8sClient
from tfdrift.core.notifier import EventNotifier, LogNotifier
from tfdrift.core.reconciler import DriftReconciler
from tfdrift.models import ResourceKind


def watch(
    kinds: Optional[list[str]] = typer.Option(None, "--kind", "-k", help="Kinds to watch (repeatable, default: all)"),
    namespace: Optional[str] = NamespaceOption,
    context: Optional[str] = ContextOption,
    workers: int = typer.Option(settings.workers, "--workers", help="Concurrent reconciliations"),
    resync: int = typer.Option(settings.resync_seconds, "--resync", help="Seconds between full resyncs"),
    events: bool = typer.Option(True, "--events/--no-events", help="Record Kubernetes Events on drift"),
) -> None:
    """Reconcile opted-in resources whenever they change."""
    k8s = K8sClient(context=context)
    notifier = EventNotifier(k8s) if events else LogNotifier()
    controller = DriftController(
        k8s,
        DriftReconciler(k8s, notifier),
        kinds=[parse_kind(k) for k in kinds] if kinds else list(ResourceKind),
        namespace=namespace,
        workers=workers,
        resync_seconds=resync,
    )
    signal.signal(signal.SIGTERM, lambda *_: controller.stop())
    try:
        controller.run()
    except KeyboardInterrupt:
        controller.stop()
