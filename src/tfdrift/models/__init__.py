"""Data models for tfdrift."""

from __future__ import annotations

import enum


class ResourceKind(enum.Enum):
    DEPLOYMENT = "deployment"
    SERVICE = "service"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_str(cls, s: str) -> ResourceKind:
        """Parse a kind name, accepting plural and capitalized forms."""
        normalized = s.strip().lower()
        if normalized.endswith("s") and normalized[:-1] in {m.value for m in cls}:
            normalized = normalized[:-1]
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unsupported resource kind: {s!r}")


class DriftState(enum.Enum):
    NOT_FOUND = "not-found"
    NOT_OPTED_IN = "not-opted-in"
    NO_BASELINE = "no-baseline"
    CLEAN = "clean"
    DRIFTED = "drifted"
