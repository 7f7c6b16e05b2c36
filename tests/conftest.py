"""
Test Fixtures and Configuration
------------------------------
In-memory resource store, recording notifier, a controllable clock and
sample Deployment/Service specs shared by the test modules.
"""

import copy
from datetime import datetime, timedelta, timezone

import pytest

from tfdrift.config.settings import settings
from tfdrift.core.errors import StoreUnavailableError, WriteConflictError
from tfdrift.models import ResourceKind
from tfdrift.models.resource import Resource


# ========== SAMPLE SPECS ========== #

def deployment_spec():
    return {
        "replicas": 2,
        "strategy": {
            "type": "RollingUpdate",
            "rollingUpdate": {"maxSurge": "25%", "maxUnavailable": "25%"},
        },
        "selector": {"matchLabels": {"app": "web"}},
        "template": {
            "metadata": {
                "labels": {"app": "web"},
                "annotations": {"team": "platform"},
            },
            "spec": {
                "containers": [
                    {
                        "name": "web",
                        "image": "nginx:1.25",
                        "env": [
                            {"name": "MODE", "value": "prod"},
                            {"name": "LOG_LEVEL", "value": "info"},
                            {
                                "name": "DB_PASSWORD",
                                "valueFrom": {"secretKeyRef": {"name": "db", "key": "password"}},
                            },
                        ],
                        "ports": [
                            {"name": "http", "containerPort": 8080, "protocol": "TCP"},
                            {"name": "metrics", "containerPort": 9090, "protocol": "TCP"},
                        ],
                        "resources": {
                            "requests": {"cpu": "100m", "memory": "128Mi"},
                            "limits": {"memory": "256Mi"},
                        },
                    },
                    {"name": "proxy", "image": "envoyproxy/envoy:v1.28"},
                ],
            },
        },
    }


def service_spec():
    return {
        "type": "ClusterIP",
        "selector": {"app": "web"},
        "ports": [
            {"name": "http", "protocol": "TCP", "port": 80, "targetPort": 8080},
            {"name": "https", "protocol": "TCP", "port": 443, "targetPort": "https"},
        ],
    }


def make_resource(kind=ResourceKind.DEPLOYMENT, name="web", namespace="prod",
                  spec=None, opted_in=True, annotations=None, labels=None):
    labels = dict(labels or {})
    if opted_in:
        labels[settings.label_enabled] = "true"
    if spec is None:
        spec = deployment_spec() if kind == ResourceKind.DEPLOYMENT else service_spec()
    return Resource(
        kind=kind,
        namespace=namespace,
        name=name,
        labels=labels,
        annotations=dict(annotations or {}),
        spec=spec,
    )


# ========== FAKES ========== #

class FakeStore:
    """Resource store keeping objects in memory.

    ``conflicts`` injects that many WriteConflictErrors on patch. ``churn``
    bumps the revision after every read, as status updates from other
    writers do.
    """

    def __init__(self, *resources):
        self.objects = {}
        self.patches = []
        self.gets = 0
        self.conflicts = 0
        self.unavailable = False
        self.churn = False
        self._version = 0
        for res in resources:
            self.add(res)

    def _next_version(self):
        self._version += 1
        return str(self._version)

    def add(self, res):
        res = copy.deepcopy(res)
        res.resource_version = self._next_version()
        self.objects[res.key] = res
        return res

    def touch(self, key):
        """Simulate an unrelated writer bumping the revision."""
        self.objects[key].resource_version = self._next_version()

    def get(self, key):
        self.gets += 1
        if self.unavailable:
            raise StoreUnavailableError("connection refused")
        res = self.objects.get(key)
        if res is None:
            return None
        snapshot = copy.deepcopy(res)
        if self.churn:
            self.touch(key)
        return snapshot

    def patch_annotations(self, key, annotations):
        if self.unavailable:
            raise StoreUnavailableError("connection refused")
        res = self.objects.get(key)
        if res is None:
            return None
        if self.conflicts:
            self.conflicts -= 1
            self.touch(key)
            raise WriteConflictError(f"{key} changed")
        self.patches.append((key, dict(annotations)))
        res.annotations.update(annotations)
        res.resource_version = self._next_version()
        return copy.deepcopy(res)

    def annotations(self, key):
        return dict(self.objects[key].annotations)


class RecordingNotifier:
    def __init__(self):
        self.notifications = []

    def warn(self, notification):
        self.notifications.append(notification)


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 17, 10, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()
