"""Drift verdict models."""

from __future__ import annotations

from dataclasses import dataclass, field

from tfdrift.config.settings import settings
from tfdrift.models import DriftState
from tfdrift.models.resource import Resource, ResourceKey


@dataclass
class DriftRecord:
    """Drift annotations as currently recorded on a resource."""

    expected_hash: str = ""
    live_hash: str = ""
    drifted: str = ""
    drifted_at: str = ""
    last_checked_at: str = ""

    @property
    def has_baseline(self) -> bool:
        return bool(self.expected_hash)

    @property
    def in_drift_episode(self) -> bool:
        return self.drifted == "true" and bool(self.drifted_at)

    @classmethod
    def from_annotations(cls, annotations: dict[str, str]) -> DriftRecord:
        return cls(
            expected_hash=annotations.get(settings.ann_expected_hash, ""),
            live_hash=annotations.get(settings.ann_live_hash, ""),
            drifted=annotations.get(settings.ann_drifted, ""),
            drifted_at=annotations.get(settings.ann_drifted_at, ""),
            last_checked_at=annotations.get(settings.ann_last_checked_at, ""),
        )

    @classmethod
    def from_resource(cls, resource: Resource) -> DriftRecord:
        return cls.from_annotations(resource.annotations)


@dataclass
class Notification:
    key: ResourceKey
    reason: str
    message: str
    expected_hash: str
    live_hash: str
    severity: str = "Warning"


@dataclass
class ReconcileResult:
    key: ResourceKey
    state: DriftState
    live_hash: str = ""
    expected_hash: str = ""
    patch: dict[str, str] = field(default_factory=dict)
    notification: Notification | None = None
    patched: bool = False
    attempts: int = 0

    @property
    def has_drift(self) -> bool:
        return self.state == DriftState.DRIFTED
