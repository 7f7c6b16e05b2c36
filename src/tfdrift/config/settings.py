"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

ANNOTATION_PREFIX = "tfdrift.jin.dev"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"TFDRIFT_{name}", "") or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(f"TFDRIFT_{name}", "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(f"TFDRIFT_{name}", "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    label_enabled: str = field(default_factory=lambda: _env("LABEL_ENABLED", f"{ANNOTATION_PREFIX}/enabled"))
    enabled_value: str = "true"

    ann_expected_hash: str = f"{ANNOTATION_PREFIX}/spec-hash"
    ann_live_hash: str = f"{ANNOTATION_PREFIX}/live-hash"
    ann_drifted: str = f"{ANNOTATION_PREFIX}/drifted"
    ann_drifted_at: str = f"{ANNOTATION_PREFIX}/drifted-at"
    ann_last_checked_at: str = f"{ANNOTATION_PREFIX}/last-checked-at"

    event_reason: str = "TerraformDriftDetected"
    event_component: str = field(default_factory=lambda: _env("EVENT_COMPONENT", "tfdrift-operator"))

    max_patch_attempts: int = field(default_factory=lambda: _env_int("MAX_PATCH_ATTEMPTS", 3))
    workers: int = field(default_factory=lambda: _env_int("WORKERS", 4))
    resync_seconds: int = field(default_factory=lambda: _env_int("RESYNC_SECONDS", 300))
    max_retries: int = field(default_factory=lambda: _env_int("MAX_RETRIES", 5))
    backoff_base_seconds: float = field(default_factory=lambda: _env_float("BACKOFF_BASE_SECONDS", 1.0))
    request_timeout: int = field(default_factory=lambda: _env_int("REQUEST_TIMEOUT", 30))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    @property
    def opt_in_selector(self) -> str:
        """Label selector matching resources that opted in to drift checks."""
        return f"{self.label_enabled}={self.enabled_value}"

    @property
    def owned_annotations(self) -> tuple[str, ...]:
        return (
            self.ann_live_hash,
            self.ann_drifted,
            self.ann_drifted_at,
            self.ann_last_checked_at,
        )


# Global singleton
settings = Settings()
