"""Kubernetes API wrapper implementing the resource store."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from kubernetes import client, config, watch
from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from tfdrift.config.settings import settings
from tfdrift.core.errors import StoreUnavailableError, WriteConflictError
from tfdrift.models import ResourceKind
from tfdrift.models.resource import Resource, ResourceKey

logger = logging.getLogger(__name__)


def _unavailable(action: str, key: Any, e: Exception) -> StoreUnavailableError:
    status = getattr(e, "status", None)
    reason = getattr(e, "reason", None) or str(e)
    return StoreUnavailableError(f"{action} {key} failed: {reason}", status=status)


class K8sClient:
    """Thin wrapper around the Kubernetes Python client."""

    def __init__(self, context: str | None = None):
        self.context = context
        self._core_v1: client.CoreV1Api | None = None
        self._apps_v1: client.AppsV1Api | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        if self._apps_v1 is None:
            self._apps_v1 = client.AppsV1Api(api_client=self._load_config())
        return self._apps_v1

    def _to_resource(self, obj: Any, kind: ResourceKind) -> Resource:
        data = self._load_config().sanitize_for_serialization(obj)
        return Resource.from_dict(data, kind=kind)

    # ---- per-kind API methods ----

    def _read_method(self, kind: ResourceKind) -> Callable[..., Any]:
        if kind == ResourceKind.DEPLOYMENT:
            return self.apps_v1.read_namespaced_deployment
        return self.core_v1.read_namespaced_service

    def _patch_method(self, kind: ResourceKind) -> Callable[..., Any]:
        if kind == ResourceKind.DEPLOYMENT:
            return self.apps_v1.patch_namespaced_deployment
        return self.core_v1.patch_namespaced_service

    def _list_method(self, kind: ResourceKind, namespace: str | None) -> Callable[..., Any]:
        if kind == ResourceKind.DEPLOYMENT:
            if namespace:
                return self.apps_v1.list_namespaced_deployment
            return self.apps_v1.list_deployment_for_all_namespaces
        if namespace:
            return self.core_v1.list_namespaced_service
        return self.core_v1.list_service_for_all_namespaces

    # ---- resource store ----

    def get(self, key: ResourceKey) -> Resource | None:
        """Read one resource; None if it does not exist."""
        try:
            obj = self._read_method(key.kind)(
                name=key.name,
                namespace=key.namespace,
                _request_timeout=settings.request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise _unavailable("get", key, e) from e
        except HTTPError as e:
            raise _unavailable("get", key, e) from e
        return self._to_resource(obj, key.kind)

    def patch_annotations(
        self,
        key: ResourceKey,
        annotations: dict[str, str],
    ) -> Resource | None:
        """Merge-patch only the given annotation keys onto the resource.

        The body carries no resourceVersion, so writes by other clients to
        status, spec or unrelated metadata never conflict with it.
        """
        body = {"metadata": {"annotations": dict(annotations)}}
        try:
            obj = self._patch_method(key.kind)(
                name=key.name,
                namespace=key.namespace,
                body=body,
                _request_timeout=settings.request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            if e.status == 409:
                raise WriteConflictError(
                    f"{key.kind.display_name} {key} was modified concurrently"
                ) from e
            raise _unavailable("patch", key, e) from e
        except HTTPError as e:
            raise _unavailable("patch", key, e) from e
        return self._to_resource(obj, key.kind)

    def list_resources(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[Resource]:
        """List resources of one kind, optionally filtered by namespace and labels."""
        kwargs: dict[str, Any] = {"_request_timeout": settings.request_timeout}
        if namespace:
            kwargs["namespace"] = namespace
        if label_selector:
            kwargs["label_selector"] = label_selector
        try:
            result = self._list_method(kind, namespace)(**kwargs)
        except (ApiException, HTTPError) as e:
            raise _unavailable("list", kind.value, e) from e
        return [self._to_resource(obj, kind) for obj in result.items]

    def watch_resources(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        label_selector: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[tuple[str, Resource]]:
        """Yield ``(event_type, resource)`` pairs until the server closes the watch."""
        kwargs: dict[str, Any] = {}
        if namespace:
            kwargs["namespace"] = namespace
        if label_selector:
            kwargs["label_selector"] = label_selector
        if timeout_seconds:
            kwargs["timeout_seconds"] = timeout_seconds
        w = watch.Watch()
        try:
            for event in w.stream(self._list_method(kind, namespace), **kwargs):
                event_type = event.get("type", "")
                if event_type == "ERROR":
                    logger.warning("Watch error for %s: %s", kind.value, event.get("raw_object"))
                    continue
                yield event_type, self._to_resource(event["object"], kind)
        except (ApiException, HTTPError) as e:
            raise _unavailable("watch", kind.value, e) from e
        finally:
            w.stop()
