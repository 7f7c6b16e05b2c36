"""
Notifier Tests
--------------
Kubernetes Event construction for drift warnings.
"""

import logging
from unittest.mock import MagicMock

from kubernetes.client import ApiException

from tfdrift.core.notifier import EventNotifier, LogNotifier
from tfdrift.models import ResourceKind
from tfdrift.models.drift import Notification
from tfdrift.models.resource import ResourceKey


def _notification(kind=ResourceKind.DEPLOYMENT):
    return Notification(
        key=ResourceKey(kind=kind, namespace="prod", name="web"),
        reason="TerraformDriftDetected",
        message="Deployment drift detected: expectedHash=abc123 liveHash=def456",
        expected_hash="abc123",
        live_hash="def456",
    )


def _k8s():
    k8s = MagicMock()
    k8s.core_v1.create_namespaced_event = MagicMock()
    return k8s


def test_event_targets_drifted_resource():
    k8s = _k8s()
    EventNotifier(k8s, component="tfdrift-test").warn(_notification())

    kwargs = k8s.core_v1.create_namespaced_event.call_args.kwargs
    event = kwargs["body"]
    assert kwargs["namespace"] == "prod"
    assert event.type == "Warning"
    assert event.reason == "TerraformDriftDetected"
    assert "abc123" in event.message and "def456" in event.message
    assert event.involved_object.kind == "Deployment"
    assert event.involved_object.api_version == "apps/v1"
    assert event.involved_object.name == "web"
    assert event.source.component == "tfdrift-test"


def test_service_event_uses_core_api_version():
    k8s = _k8s()
    EventNotifier(k8s).warn(_notification(kind=ResourceKind.SERVICE))
    event = k8s.core_v1.create_namespaced_event.call_args.kwargs["body"]
    assert event.involved_object.api_version == "v1"
    assert event.involved_object.kind == "Service"


def test_event_failure_is_logged_not_raised(caplog):
    k8s = _k8s()
    k8s.core_v1.create_namespaced_event.side_effect = ApiException(status=403, reason="Forbidden")

    with caplog.at_level(logging.WARNING, logger="tfdrift.core.notifier"):
        EventNotifier(k8s).warn(_notification())

    assert "Could not record" in caplog.text


def test_log_notifier_writes_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="tfdrift.core.notifier"):
        LogNotifier().warn(_notification())
    assert "TerraformDriftDetected prod/web" in caplog.text
