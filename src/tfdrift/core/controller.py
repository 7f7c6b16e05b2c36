"""Watch opted-in resources and dispatch reconciliations to a worker pool."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from tfdrift.config.settings import settings
from tfdrift.core.errors import DriftError
from tfdrift.core.k8s_client import K8sClient
from tfdrift.core.reconciler import DriftReconciler
from tfdrift.models import ResourceKind
from tfdrift.models.resource import ResourceKey

logger = logging.getLogger(__name__)

_RECONCILE_EVENTS = {"ADDED", "MODIFIED"}


class DriftController:
    """Runs one watcher thread per kind and a bounded pool of reconcile workers.

    A key is never reconciled concurrently with itself: an event for a key
    that is in flight marks it dirty and it runs once more afterwards.
    Retryable failures are re-queued with exponential backoff.
    """

    def __init__(
        self,
        k8s: K8sClient,
        reconciler: DriftReconciler,
        kinds: Iterable[ResourceKind] = tuple(ResourceKind),
        namespace: str | None = None,
        workers: int | None = None,
        resync_seconds: int | None = None,
        max_retries: int | None = None,
        backoff_base_seconds: float | None = None,
    ):
        self.k8s = k8s
        self.reconciler = reconciler
        self.kinds = tuple(kinds)
        self.namespace = namespace
        self.resync_seconds = resync_seconds or settings.resync_seconds
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.backoff_base_seconds = (
            settings.backoff_base_seconds if backoff_base_seconds is None else backoff_base_seconds
        )
        self._executor = ThreadPoolExecutor(
            max_workers=workers or settings.workers,
            thread_name_prefix="tfdrift-worker",
        )
        self._lock = threading.Lock()
        self._in_flight: set[ResourceKey] = set()
        self._dirty: set[ResourceKey] = set()
        self._failures: dict[ResourceKey, int] = {}
        self._stop = threading.Event()

    # ---- dispatch ----

    def enqueue(self, key: ResourceKey) -> None:
        with self._lock:
            if self._stop.is_set():
                return
            if key in self._in_flight:
                self._dirty.add(key)
                return
            self._in_flight.add(key)
            self._executor.submit(self._process, key)

    def _process(self, key: ResourceKey) -> None:
        self._reconcile_once(key)
        with self._lock:
            rerun = key in self._dirty and not self._stop.is_set()
            self._dirty.discard(key)
            if rerun:
                self._executor.submit(self._process, key)
            else:
                self._in_flight.discard(key)

    def _reconcile_once(self, key: ResourceKey) -> None:
        try:
            self.reconciler.reconcile(key)
        except DriftError as e:
            if e.retryable:
                self._schedule_retry(key, e)
            else:
                logger.error("Reconcile of %s %s failed: %s", key.kind.value, key, e)
            return
        except Exception:
            logger.exception("Unexpected error reconciling %s %s", key.kind.value, key)
            return
        with self._lock:
            self._failures.pop(key, None)

    def _schedule_retry(self, key: ResourceKey, error: DriftError) -> None:
        with self._lock:
            failures = self._failures.get(key, 0) + 1
            if failures > self.max_retries:
                self._failures.pop(key, None)
            else:
                self._failures[key] = failures
        if failures > self.max_retries:
            logger.error(
                "Dropping %s %s after %d retries: %s",
                key.kind.value, key, self.max_retries, error,
            )
            return
        delay = self.backoff_base_seconds * (2 ** (failures - 1))
        logger.warning(
            "Retrying %s %s in %.1fs (%d/%d): %s",
            key.kind.value, key, delay, failures, self.max_retries, error,
        )
        timer = threading.Timer(delay, self.enqueue, args=(key,))
        timer.daemon = True
        timer.start()

    # ---- watching ----

    def resync(self, kind: ResourceKind) -> None:
        """Enqueue every opted-in resource of one kind."""
        resources = self.k8s.list_resources(
            kind, namespace=self.namespace, label_selector=settings.opt_in_selector,
        )
        logger.debug("Resync found %d %s resources", len(resources), kind.value)
        for res in resources:
            self.enqueue(res.key)

    def _watch_kind(self, kind: ResourceKind) -> None:
        failures = 0
        while not self._stop.is_set():
            try:
                self.resync(kind)
                for event_type, res in self.k8s.watch_resources(
                    kind,
                    namespace=self.namespace,
                    label_selector=settings.opt_in_selector,
                    timeout_seconds=self.resync_seconds,
                ):
                    if self._stop.is_set():
                        break
                    if event_type in _RECONCILE_EVENTS:
                        self.enqueue(res.key)
                failures = 0
            except DriftError as e:
                failures += 1
                delay = min(self.backoff_base_seconds * (2 ** (failures - 1)), float(self.resync_seconds))
                logger.warning("Watch of %s failed, restarting in %.1fs: %s", kind.value, delay, e)
                self._stop.wait(delay)

    def run(self) -> None:
        """Block until stop() is called."""
        threads = [
            threading.Thread(target=self._watch_kind, args=(kind,), name=f"tfdrift-watch-{kind.value}", daemon=True)
            for kind in self.kinds
        ]
        for t in threads:
            t.start()
        logger.info(
            "Watching %s in %s",
            ", ".join(k.value for k in self.kinds),
            self.namespace or "all namespaces",
        )
        try:
            self._stop.wait()
        finally:
            self.stop()

    def stop(self) -> None:
        # every submit checks _stop under this lock
        with self._lock:
            self._stop.set()
        self._executor.shutdown(wait=True)
