"""Shared fixtures: an in-memory stand-in for the cluster client."""

from __future__ import annotations

import copy
import itertools
from collections.abc import Callable
from typing import Any

import pytest

from nodepoolingressoperator.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
)
from nodepoolingressoperator.ingress import (
    POOLS_KEY,
    REPLICAS_KEY,
    CustomResource,
    IngressKind,
)
from nodepoolingressoperator.manifests import Manifest, ObjectKind


def merge_patch(target: dict[str, Any], patch: dict[str, Any]) -> None:
    """Apply a JSON merge patch in place; `None` values delete keys."""
    for key, value in patch.items():
        if value is None:
            target.pop(key, None)
        elif isinstance(value, dict) and isinstance(target.get(key), dict):
            merge_patch(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class FakeClusterClient:
    """Keeps objects in dictionaries and mimics the API server errors.

    Every request is recorded in ``calls`` as ``(verb, target, namespace)``,
    where the target is ``str(manifest)`` for built-in objects and
    ``<plural>/<name>`` for custom objects. `fail` queues errors for a
    request.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str | None, str], dict[str, Any]] = {}
        self.custom: dict[tuple[str, str | None, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, str, str | None]] = []
        self._failures: list[list[Any]] = []
        self._versions = itertools.count(1)

    # Failure injection

    def fail(
        self,
        verb: str,
        target: str,
        error: Exception,
        *,
        times: int = 1,
        namespace: str | None = None,
    ) -> None:
        """Make the next ``times`` matching requests raise ``error``.

        A negative ``times`` fails every matching request.
        """
        self._failures.append([verb, target, namespace, error, times])

    def _request(self, verb: str, target: str, namespace: str | None) -> None:
        self.calls.append((verb, target, namespace))
        for failure in self._failures:
            f_verb, f_target, f_namespace, error, times = failure
            if f_verb != verb or f_target != target or times == 0:
                continue
            if f_namespace is not None and f_namespace != namespace:
                continue
            failure[4] = times - 1
            raise error

    def calls_of(self, verb: str) -> list[str]:
        return [target for v, target, _ in self.calls if v == verb]

    # Built-in objects

    @staticmethod
    def _key(manifest: Manifest) -> tuple[str, str | None, str]:
        return (manifest.kind.value, manifest.namespace, manifest.name)

    def create(self, manifest: Manifest) -> dict[str, Any]:
        self._request("create", str(manifest), manifest.namespace)
        key = self._key(manifest)
        if key in self.objects:
            raise AlreadyExistsError(
                f"fail to create {manifest}: (409) AlreadyExists",
                status=409,
                reason="AlreadyExists",
            )
        self.objects[key] = copy.deepcopy(manifest.body)
        return copy.deepcopy(manifest.body)

    def update(self, manifest: Manifest) -> dict[str, Any]:
        self._request("update", str(manifest), manifest.namespace)
        key = self._key(manifest)
        if key not in self.objects:
            raise NotFoundError(
                f"fail to update {manifest}: (404) NotFound",
                status=404,
                reason="NotFound",
            )
        merge_patch(self.objects[key], manifest.body)
        return copy.deepcopy(self.objects[key])

    def delete(self, manifest: Manifest) -> None:
        self._request("delete", str(manifest), manifest.namespace)
        key = self._key(manifest)
        if key not in self.objects:
            raise NotFoundError(
                f"fail to delete {manifest}: (404) NotFound",
                status=404,
                reason="NotFound",
            )
        del self.objects[key]
        if manifest.kind is ObjectKind.NAMESPACE:
            for other in [k for k in self.objects if k[1] == manifest.name]:
                del self.objects[other]

    def get(self, manifest: Manifest) -> dict[str, Any]:
        self._request("get", str(manifest), manifest.namespace)
        try:
            return copy.deepcopy(self.objects[self._key(manifest)])
        except KeyError:
            raise NotFoundError(
                f"fail to get {manifest}: (404) NotFound", status=404
            ) from None

    def list(
        self,
        kind: ObjectKind,
        *,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        self._request("list", kind.value.lower(), namespace)
        return [
            copy.deepcopy(body)
            for (k, ns, _), body in self.objects.items()
            if k == kind.value and (namespace is None or ns == namespace)
        ]

    def has(
        self, kind: ObjectKind, name: str, namespace: str | None = None
    ) -> bool:
        return (kind.value, namespace, name) in self.objects

    def in_namespace(self, namespace: str) -> list[tuple[str, str]]:
        return sorted(
            (k, name) for k, ns, name in self.objects if ns == namespace
        )

    # Custom objects

    @staticmethod
    def _custom_key(
        resource: CustomResource, name: str, namespace: str | None
    ) -> tuple[str, str | None, str]:
        return (
            resource.plural,
            namespace if resource.namespaced else None,
            name,
        )

    def _not_found(self, resource: CustomResource, name: str) -> NotFoundError:
        return NotFoundError(
            f"fail to get {resource.plural}/{name}: (404) NotFound",
            status=404,
            reason="NotFound",
        )

    def _bump(self, body: dict[str, Any]) -> None:
        body["metadata"]["resourceVersion"] = str(next(self._versions))

    def add_custom(
        self, resource: CustomResource, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Store a custom object without recording a request."""
        body = copy.deepcopy(body)
        metadata = body.setdefault("metadata", {})
        metadata.setdefault("uid", f"uid-{metadata['name']}")
        self._bump(body)
        key = self._custom_key(
            resource, metadata["name"], metadata.get("namespace")
        )
        self.custom[key] = body
        return copy.deepcopy(body)

    def stored(
        self, resource: CustomResource, name: str, namespace: str | None = None
    ) -> dict[str, Any] | None:
        body = self.custom.get(self._custom_key(resource, name, namespace))
        return copy.deepcopy(body) if body is not None else None

    def request_deletion(
        self, resource: CustomResource, name: str, namespace: str | None = None
    ) -> None:
        """Delete a custom object as the API server does: objects with
        finalizers only get a deletion timestamp.
        """
        key = self._custom_key(resource, name, namespace)
        body = self.custom[key]
        if body["metadata"].get("finalizers"):
            body["metadata"]["deletionTimestamp"] = "2021-09-01T00:00:00Z"
            self._bump(body)
        else:
            del self.custom[key]

    def get_custom(
        self, resource: CustomResource, name: str, namespace: str | None = None
    ) -> dict[str, Any]:
        self._request("get", f"{resource.plural}/{name}", namespace)
        body = self.custom.get(self._custom_key(resource, name, namespace))
        if body is None:
            raise self._not_found(resource, name)
        return copy.deepcopy(body)

    def create_custom(
        self,
        resource: CustomResource,
        body: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        name = body["metadata"]["name"]
        self._request("create", f"{resource.plural}/{name}", namespace)
        if self._custom_key(resource, name, namespace) in self.custom:
            raise AlreadyExistsError(
                f"fail to create {resource.plural}/{name}: (409) "
                "AlreadyExists",
                status=409,
                reason="AlreadyExists",
            )
        return self.add_custom(resource, body)

    def patch_custom(
        self,
        resource: CustomResource,
        name: str,
        patch: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        self._request("update", f"{resource.plural}/{name}", namespace)
        key = self._custom_key(resource, name, namespace)
        body = self.custom.get(key)
        if body is None:
            raise self._not_found(resource, name)
        patch = copy.deepcopy(patch)
        expected = (patch.get("metadata") or {}).pop("resourceVersion", None)
        if expected is not None and expected != (
            body["metadata"]["resourceVersion"]
        ):
            raise ConflictError(
                f"fail to update {resource.plural}/{name}: (409) Conflict",
                status=409,
                reason="Conflict",
            )
        merge_patch(body, patch)
        self._bump(body)
        metadata = body["metadata"]
        if metadata.get("deletionTimestamp") and not metadata.get(
            "finalizers"
        ):
            del self.custom[key]
        return copy.deepcopy(body)

    def patch_custom_status(
        self,
        resource: CustomResource,
        name: str,
        status: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        self._request("status", f"{resource.plural}/{name}", namespace)
        body = self.custom.get(self._custom_key(resource, name, namespace))
        if body is None:
            raise self._not_found(resource, name)
        merge_patch(body, {"status": status})
        self._bump(body)
        return copy.deepcopy(body)

    def list_custom(
        self, resource: CustomResource, namespace: str | None = None
    ) -> list[dict[str, Any]]:
        self._request("list", resource.plural, namespace)
        return [
            copy.deepcopy(body)
            for (plural, ns, _), body in self.custom.items()
            if plural == resource.plural
            and (namespace is None or ns == namespace)
        ]


@pytest.fixture
def cluster() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def make_ingress() -> Callable[..., dict[str, Any]]:
    """Build the body of an ingress singleton."""

    def factory(
        kind: IngressKind,
        pools: list[str] | None = None,
        replicas: int = 1,
        *,
        status: dict[str, Any] | None = None,
        finalizers: list[str] | None = None,
        name: str | None = None,
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": name or kind.singleton_name}
        if kind.namespaced:
            metadata["namespace"] = kind.singleton_namespace
        if finalizers is not None:
            metadata["finalizers"] = list(finalizers)
        body: dict[str, Any] = {
            "apiVersion": f"{kind.group}/{kind.version}",
            "kind": kind.kind,
            "metadata": metadata,
            "spec": {REPLICAS_KEY: replicas},
        }
        if pools is not None:
            body["spec"][POOLS_KEY] = list(pools)
        if status is not None:
            body["status"] = dict(status)
        return body

    return factory
