"""Decide and record the drift verdict for one resource.

Reconciliation is level-triggered: every call fetches the resource, decides
from what is currently recorded on it, and merge-patches only the drift
annotations it owns. A failed step writes nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from tfdrift.config.settings import settings
from tfdrift.core.errors import WriteConflictError
from tfdrift.core.fingerprint import compute_hash
from tfdrift.core.notifier import Notifier
from tfdrift.core.store import ResourceStore
from tfdrift.models import DriftState
from tfdrift.models.drift import DriftRecord, Notification, ReconcileResult
from tfdrift.models.resource import Resource, ResourceKey
from tfdrift.utils.clock import format_timestamp, utc_now

logger = logging.getLogger(__name__)


def is_opted_in(resource: Resource) -> bool:
    return resource.labels.get(settings.label_enabled) == settings.enabled_value


def evaluate(resource: Resource, now: str) -> ReconcileResult:
    """Compute the verdict, the annotation patch and any notification.

    Pure: reads only ``resource`` and ``now``. Raises SerializationError if
    the live spec cannot be fingerprinted.
    """
    key = resource.key
    if not is_opted_in(resource):
        return ReconcileResult(key=key, state=DriftState.NOT_OPTED_IN)

    record = DriftRecord.from_resource(resource)
    if not record.has_baseline:
        return ReconcileResult(
            key=key,
            state=DriftState.NO_BASELINE,
            patch={settings.ann_last_checked_at: now},
        )

    live_hash = compute_hash(resource)
    patch = {
        settings.ann_live_hash: live_hash,
        settings.ann_last_checked_at: now,
    }

    if live_hash == record.expected_hash:
        patch[settings.ann_drifted] = "false"
        return ReconcileResult(
            key=key,
            state=DriftState.CLEAN,
            live_hash=live_hash,
            expected_hash=record.expected_hash,
            patch=patch,
        )

    patch[settings.ann_drifted] = "true"
    new_episode = not record.in_drift_episode
    if new_episode:
        patch[settings.ann_drifted_at] = now

    notification = None
    if new_episode or record.live_hash != live_hash:
        notification = Notification(
            key=key,
            reason=settings.event_reason,
            message=(
                f"{key.kind.display_name} drift detected: "
                f"expectedHash={record.expected_hash} liveHash={live_hash}"
            ),
            expected_hash=record.expected_hash,
            live_hash=live_hash,
        )

    return ReconcileResult(
        key=key,
        state=DriftState.DRIFTED,
        live_hash=live_hash,
        expected_hash=record.expected_hash,
        patch=patch,
        notification=notification,
    )


def _needs_write(resource: Resource, patch: dict[str, str]) -> bool:
    return any(resource.annotations.get(k) != v for k, v in patch.items())


class DriftReconciler:
    """Reconciles one resource per call against an injected store."""

    def __init__(
        self,
        store: ResourceStore,
        notifier: Notifier,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.max_attempts = max_attempts or settings.max_patch_attempts

    def reconcile(self, key: ResourceKey) -> ReconcileResult:
        """Fetch, decide and patch, refetching on write conflicts."""
        last_conflict: WriteConflictError | None = None
        for attempt in range(1, self.max_attempts + 1):
            resource = self.store.get(key)
            if resource is None:
                logger.debug("%s %s not found, nothing to reconcile", key.kind.value, key)
                return ReconcileResult(key=key, state=DriftState.NOT_FOUND, attempts=attempt)

            result = evaluate(resource, format_timestamp(self.clock()))
            result.attempts = attempt
            if result.state == DriftState.NOT_OPTED_IN:
                return result

            if result.patch and _needs_write(resource, result.patch):
                try:
                    patched = self.store.patch_annotations(key, result.patch)
                except WriteConflictError as e:
                    logger.info("Conflict patching %s %s (attempt %d): %s", key.kind.value, key, attempt, e)
                    last_conflict = e
                    continue
                if patched is None:
                    logger.debug("%s %s deleted before patch", key.kind.value, key)
                    return ReconcileResult(key=key, state=DriftState.NOT_FOUND, attempts=attempt)
                result.patched = True

            self._log_result(result)
            if result.notification is not None:
                self.notifier.warn(result.notification)
            return result

        raise WriteConflictError(
            f"Gave up patching {key.kind.value} {key} after {self.max_attempts} attempts"
        ) from last_conflict

    @staticmethod
    def _log_result(result: ReconcileResult) -> None:
        key = result.key
        if result.state == DriftState.DRIFTED:
            logger.info(
                "drift detected %s %s expected=%s live=%s",
                key.kind.value, key, result.expected_hash, result.live_hash,
            )
        elif result.state == DriftState.NO_BASELINE:
            logger.debug("%s %s has no baseline hash", key.kind.value, key)
        else:
            logger.debug("%s %s is %s", key.kind.value, key, result.state.value)
