"""Notification sinks for drift warnings."""

from __future__ import annotations

import logging
from typing import Protocol

from kubernetes import client
from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from tfdrift.config.settings import settings
from tfdrift.core.k8s_client import K8sClient
from tfdrift.models.drift import Notification
from tfdrift.utils.clock import utc_now

logger = logging.getLogger(__name__)

_API_VERSIONS = {
    "deployment": "apps/v1",
    "service": "v1",
}


class Notifier(Protocol):
    def warn(self, notification: Notification) -> None:
        ...


class LogNotifier:
    """Writes drift warnings to the log only."""

    def warn(self, notification: Notification) -> None:
        logger.warning(
            "%s %s: %s",
            notification.reason,
            notification.key,
            notification.message,
        )


class EventNotifier:
    """Records drift warnings as core/v1 Events on the drifted resource."""

    def __init__(self, k8s: K8sClient, component: str | None = None):
        self.k8s = k8s
        self.component = component or settings.event_component

    def _build_event(self, notification: Notification) -> client.CoreV1Event:
        key = notification.key
        now = utc_now()
        return client.CoreV1Event(
            metadata=client.V1ObjectMeta(
                generate_name=f"{key.name}.",
                namespace=key.namespace,
            ),
            involved_object=client.V1ObjectReference(
                api_version=_API_VERSIONS.get(key.kind.value, "v1"),
                kind=key.kind.display_name,
                name=key.name,
                namespace=key.namespace,
            ),
            reason=notification.reason,
            message=notification.message,
            type=notification.severity,
            source=client.V1EventSource(component=self.component),
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )

    def warn(self, notification: Notification) -> None:
        event = self._build_event(notification)
        try:
            self.k8s.core_v1.create_namespaced_event(
                namespace=notification.key.namespace,
                body=event,
                _request_timeout=settings.request_timeout,
            )
        except (ApiException, HTTPError) as e:
            # event loss never fails the reconcile
            logger.warning(
                "Could not record %s event for %s: %s",
                notification.reason, notification.key, e,
            )
        LogNotifier().warn(notification)
