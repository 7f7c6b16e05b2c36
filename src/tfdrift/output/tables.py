"""Rich table builders for each command."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from tfdrift.models.drift import DriftRecord, ReconcileResult
from tfdrift.models.resource import Resource
from tfdrift.output.themes import styled_drifted, styled_state


def _short(h: str, width: int = 12) -> str:
    return h[:width] if h else "-"


def hash_table(rows: list[tuple[Resource, str]]) -> Table:
    table = Table(title="Fingerprint Hashes", expand=True)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Name", style="bold white", no_wrap=True)
    table.add_column("Hash", style="magenta", no_wrap=True)

    for res, h in rows:
        table.add_row(res.kind.display_name, res.namespace, res.name, h)
    return table


def status_table(resources: list[Resource], wide: bool = False) -> Table:
    table = Table(title="Drift Status", expand=True)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Name", style="bold white", no_wrap=True)
    table.add_column("Drifted", no_wrap=True)
    table.add_column("Expected", style="dim", no_wrap=True)
    table.add_column("Live", style="dim", no_wrap=True)
    table.add_column("Drifted At", no_wrap=True)
    table.add_column("Last Checked", style="dim", no_wrap=True)

    width = 64 if wide else 12
    for res in resources:
        record = DriftRecord.from_resource(res)
        table.add_row(
            res.kind.display_name,
            res.namespace,
            res.name,
            styled_drifted(record.drifted),
            _short(record.expected_hash, width),
            _short(record.live_hash, width),
            record.drifted_at or "-",
            record.last_checked_at or "-",
        )
    return table


def reconcile_panel(result: ReconcileResult) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    key = result.key
    table.add_row("Kind", key.kind.display_name)
    table.add_row("Resource", str(key))
    table.add_row("State", styled_state(result.state))
    if result.expected_hash:
        table.add_row("Expected Hash", result.expected_hash)
    if result.live_hash:
        table.add_row("Live Hash", result.live_hash)
    for ann, value in sorted(result.patch.items()):
        table.add_row("Set", f"{ann}={value}")
    table.add_row("Patched", "yes" if result.patched else "no")
    if result.notification is not None:
        table.add_row("Event", f"[yellow]{result.notification.reason}[/yellow]")

    border = "red" if result.has_drift else "blue"
    return Panel(table, title=f"[bold]Drift Check: {key.name}[/bold]", border_style=border)
