"""
Controller Tests
----------------
Dispatch, per-key serialization and retry scheduling of the watch loop,
driven synchronously through a recording executor.
"""

from unittest.mock import MagicMock

import pytest

import tfdrift.core.controller as controller_mod
from conftest import make_resource
from tfdrift.config.settings import settings
from tfdrift.core.controller import DriftController
from tfdrift.core.errors import SerializationError, StoreUnavailableError
from tfdrift.models import ResourceKind
from tfdrift.models.resource import ResourceKey

KEY = ResourceKey(kind=ResourceKind.DEPLOYMENT, namespace="prod", name="web")


class RecordingExecutor:
    def __init__(self):
        self.submitted = []
        self.closed = False

    def submit(self, fn, *args):
        if self.closed:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.submitted.append((fn, args))

    def run_next(self):
        fn, args = self.submitted.pop(0)
        fn(*args)

    def shutdown(self, wait=True):
        self.closed = True


class RecordingTimer:
    started = []

    def __init__(self, delay, fn, args=()):
        self.delay = delay
        self.fn = fn
        self.args = args
        self.daemon = False

    def start(self):
        RecordingTimer.started.append(self)


@pytest.fixture
def timers(monkeypatch):
    RecordingTimer.started = []
    monkeypatch.setattr(controller_mod.threading, "Timer", RecordingTimer)
    return RecordingTimer.started


def _controller(reconciler, k8s=None, **kwargs):
    kwargs.setdefault("max_retries", 2)
    kwargs.setdefault("backoff_base_seconds", 0.5)
    controller = DriftController(k8s or MagicMock(), reconciler, workers=1, **kwargs)
    controller._executor.shutdown(wait=False)
    controller._executor = RecordingExecutor()
    return controller


def test_enqueue_dispatches_reconcile():
    reconciler = MagicMock()
    controller = _controller(reconciler)

    controller.enqueue(KEY)
    controller._executor.run_next()

    reconciler.reconcile.assert_called_once_with(KEY)
    assert KEY not in controller._in_flight


def test_in_flight_key_runs_once_more_after_current_run():
    reconciler = MagicMock()
    controller = _controller(reconciler)

    controller.enqueue(KEY)
    controller.enqueue(KEY)
    controller.enqueue(KEY)
    assert len(controller._executor.submitted) == 1

    controller._executor.run_next()
    assert len(controller._executor.submitted) == 1
    controller._executor.run_next()

    assert reconciler.reconcile.call_count == 2
    assert controller._executor.submitted == []
    assert KEY not in controller._in_flight


def test_retryable_error_schedules_backoff(timers):
    reconciler = MagicMock()
    reconciler.reconcile.side_effect = StoreUnavailableError("connection refused")
    controller = _controller(reconciler)

    controller.enqueue(KEY)
    controller._executor.run_next()
    controller._reconcile_once(KEY)

    assert [t.delay for t in timers] == [0.5, 1.0]
    assert timers[0].args == (KEY,)
    assert all(t.daemon for t in timers)


def test_retries_stop_after_max(timers):
    reconciler = MagicMock()
    reconciler.reconcile.side_effect = StoreUnavailableError("connection refused")
    controller = _controller(reconciler)

    for _ in range(3):
        controller._reconcile_once(KEY)

    assert len(timers) == 2
    assert KEY not in controller._failures


def test_success_clears_failure_count(timers):
    reconciler = MagicMock()
    reconciler.reconcile.side_effect = [StoreUnavailableError("down"), None]
    controller = _controller(reconciler)

    controller._reconcile_once(KEY)
    assert controller._failures[KEY] == 1
    controller._reconcile_once(KEY)
    assert KEY not in controller._failures


def test_fatal_error_is_not_retried(timers):
    reconciler = MagicMock()
    reconciler.reconcile.side_effect = SerializationError("bad spec")
    controller = _controller(reconciler)

    controller._reconcile_once(KEY)

    assert timers == []


def test_resync_enqueues_opted_in_resources():
    k8s = MagicMock()
    k8s.list_resources.return_value = [make_resource(name="a"), make_resource(name="b")]
    controller = _controller(MagicMock(), k8s=k8s, namespace="prod")

    controller.resync(ResourceKind.DEPLOYMENT)

    k8s.list_resources.assert_called_once_with(
        ResourceKind.DEPLOYMENT, namespace="prod", label_selector=settings.opt_in_selector,
    )
    assert len(controller._executor.submitted) == 2


def test_stopped_controller_ignores_new_keys():
    controller = _controller(MagicMock())
    controller.stop()
    controller.enqueue(KEY)
    assert controller._executor.submitted == []


def test_stop_drops_pending_rerun_without_submitting():
    reconciler = MagicMock()
    controller = _controller(reconciler)

    controller.enqueue(KEY)
    controller.enqueue(KEY)
    fn, args = controller._executor.submitted.pop(0)
    controller.stop()
    fn(*args)

    reconciler.reconcile.assert_called_once_with(KEY)
    assert controller._executor.submitted == []
    assert KEY not in controller._in_flight
    assert KEY not in controller._dirty


def test_retry_timer_firing_after_stop_is_ignored(timers):
    reconciler = MagicMock()
    reconciler.reconcile.side_effect = StoreUnavailableError("connection refused")
    controller = _controller(reconciler)

    controller._reconcile_once(KEY)
    controller.stop()
    timers[0].fn(*timers[0].args)

    assert controller._executor.submitted == []
