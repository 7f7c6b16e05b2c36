"""Drift state color maps."""

from tfdrift.models import DriftState

STATE_COLORS: dict[DriftState, str] = {
    DriftState.CLEAN: "green",
    DriftState.DRIFTED: "red bold",
    DriftState.NO_BASELINE: "yellow",
    DriftState.NOT_OPTED_IN: "dim",
    DriftState.NOT_FOUND: "dim",
}

DRIFTED_COLORS: dict[str, str] = {
    "true": "red bold",
    "false": "green",
}


def styled_state(state: DriftState) -> str:
    color = STATE_COLORS.get(state, "white")
    return f"[{color}]{state.value}[/{color}]"


def styled_drifted(value: str) -> str:
    if not value:
        return "[dim]-[/dim]"
    color = DRIFTED_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"
