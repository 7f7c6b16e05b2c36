"""Root Typer application, registers sub-commands."""

from __future__ import annotations

import typer

from tfdrift.utils.log_setup import setup_logging

app = typer.Typer(
    name="tfdrift",
    help="tfdrift - Detect drift between IaC baselines and live Kubernetes resources.",
    no_args_is_help=True,
)


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    setup_logging("DEBUG" if verbose else None)


def _register_commands() -> None:
    from tfdrift.cli.commands.hash_cmd import hash_
    from tfdrift.cli.commands.check_cmd import check
    from tfdrift.cli.commands.status_cmd import status
    from tfdrift.cli.commands.baseline_cmd import baseline
    from tfdrift.cli.commands.watch_cmd import watch

    app.command("hash", help="Compute fingerprint hashes")(hash_)
    app.command("check", help="Reconcile one resource now")(check)
    app.command("status", help="Show recorded drift status")(status)
    app.command("baseline", help="Record the expected baseline hash")(baseline)
    app.command("watch", help="Watch resources and record drift continuously")(watch)


_register_commands()


def main() -> None:
    app()
