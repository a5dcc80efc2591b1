"""Helpers for interacting with Kubernetes APIs."""

from __future__ import annotations

__all__ = ("ClusterClient", "create_k8sclient")

from collections.abc import Callable
from typing import Any

import kubernetes
from kubernetes.client.exceptions import ApiException

from nodepoolingressoperator.errors import classify_api_exception
from nodepoolingressoperator.ingress import CustomResource
from nodepoolingressoperator.manifests import Manifest, ObjectKind


def create_k8sclient() -> kubernetes.client:
    """Get a Kubernetes client configured with available cluster
    authentication.

    If in-cluster authentication is available, that is used. Otherwise
    this function falls-back to using a kubectl config file, which is
    appropriate for development.
    """
    try:
        kubernetes.config.load_incluster_config()
    except Exception:
        kubernetes.config.load_kube_config()
    kubernetes.client.configuration.assert_hostname = False
    return kubernetes.client


# API class and method suffix of each object kind. Method names follow the
# generated client: ``<verb>_namespaced_<suffix>`` for namespaced kinds and
# ``<verb>_<suffix>`` for cluster-scoped ones.
_KIND_APIS: dict[ObjectKind, tuple[str, str]] = {
    ObjectKind.NAMESPACE: ("CoreV1Api", "namespace"),
    ObjectKind.SERVICE_ACCOUNT: ("CoreV1Api", "service_account"),
    ObjectKind.CONFIG_MAP: ("CoreV1Api", "config_map"),
    ObjectKind.SERVICE: ("CoreV1Api", "service"),
    ObjectKind.ROLE: ("RbacAuthorizationV1Api", "role"),
    ObjectKind.ROLE_BINDING: ("RbacAuthorizationV1Api", "role_binding"),
    ObjectKind.CLUSTER_ROLE: ("RbacAuthorizationV1Api", "cluster_role"),
    ObjectKind.CLUSTER_ROLE_BINDING: (
        "RbacAuthorizationV1Api",
        "cluster_role_binding",
    ),
    ObjectKind.DEPLOYMENT: ("AppsV1Api", "deployment"),
    ObjectKind.JOB: ("BatchV1Api", "job"),
    ObjectKind.VALIDATING_WEBHOOK_CONFIGURATION: (
        "AdmissionregistrationV1Api",
        "validating_webhook_configuration",
    ),
}


class ClusterClient:
    """Create, update, delete, and read objects in the cluster.

    Every failed request raises a subclass of
    `~nodepoolingressoperator.errors.ClusterError` (see
    `~nodepoolingressoperator.errors.classify_api_exception`).

    Parameters
    ----------
    k8s_client
        A Kubernetes client (see `create_k8sclient`).
    """

    def __init__(self, k8s_client: Any) -> None:
        self._k8s_client = k8s_client
        self._apis: dict[str, Any] = {}

    @classmethod
    def from_environment(cls) -> ClusterClient:
        """Create a client with the in-cluster or kubeconfig credentials."""
        return cls(create_k8sclient())

    def _api(self, name: str) -> Any:
        if name not in self._apis:
            self._apis[name] = getattr(self._k8s_client, name)()
        return self._apis[name]

    def _method(self, kind: ObjectKind, verb: str) -> Callable[..., Any]:
        api_name, suffix = _KIND_APIS[kind]
        scope = "namespaced_" if kind.namespaced else ""
        return getattr(self._api(api_name), f"{verb}_{scope}{suffix}")

    def _call(
        self, action: str, method: Callable[..., Any], **kwargs: Any
    ) -> Any:
        try:
            return method(**kwargs)
        except ApiException as exc:
            raise classify_api_exception(exc, action) from exc

    @staticmethod
    def _scope(manifest: Manifest) -> dict[str, Any]:
        if manifest.kind.namespaced:
            return {"namespace": manifest.namespace}
        return {}

    def _raw(self, result: Any) -> dict[str, Any]:
        # Typed models are converted back to plain camelCase dicts.
        return self._api("ApiClient").sanitize_for_serialization(result)

    def create(self, manifest: Manifest) -> dict[str, Any]:
        """Create the object described by ``manifest``."""
        result = self._call(
            f"create {manifest}",
            self._method(manifest.kind, "create"),
            body=manifest.body,
            **self._scope(manifest),
        )
        return self._raw(result)

    def update(self, manifest: Manifest) -> dict[str, Any]:
        """Update the object by patching it with the manifest body.

        Only the fields present in the body change. A
        ``metadata.resourceVersion`` in the body makes the update
        conditional on that version.
        """
        result = self._call(
            f"update {manifest}",
            self._method(manifest.kind, "patch"),
            name=manifest.name,
            body=manifest.body,
            **self._scope(manifest),
        )
        return self._raw(result)

    def delete(self, manifest: Manifest) -> None:
        """Delete the object, along with its dependents."""
        self._call(
            f"delete {manifest}",
            self._method(manifest.kind, "delete"),
            name=manifest.name,
            propagation_policy="Background",
            **self._scope(manifest),
        )

    def get(self, manifest: Manifest) -> dict[str, Any]:
        """Get the current state of the object named by ``manifest``."""
        result = self._call(
            f"get {manifest}",
            self._method(manifest.kind, "read"),
            name=manifest.name,
            **self._scope(manifest),
        )
        return self._raw(result)

    def list(
        self,
        kind: ObjectKind,
        *,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        """List objects of a kind, in one namespace or cluster-wide."""
        api_name, suffix = _KIND_APIS[kind]
        api = self._api(api_name)
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        if kind.namespaced and namespace is not None:
            method = getattr(api, f"list_namespaced_{suffix}")
            kwargs["namespace"] = namespace
        elif kind.namespaced:
            method = getattr(api, f"list_{suffix}_for_all_namespaces")
        else:
            method = getattr(api, f"list_{suffix}")
        result = self._call(f"list {kind.value.lower()}", method, **kwargs)
        return self._raw(result).get("items", [])

    def _custom_call(
        self,
        method_name: str,
        resource: CustomResource,
        action: str,
        namespace: str | None,
        **kwargs: Any,
    ) -> Any:
        # method_name has a "{scope}" placeholder for "namespaced"/"cluster".
        api = self._api("CustomObjectsApi")
        if resource.namespaced:
            scope = "namespaced"
            kwargs["namespace"] = namespace
        else:
            scope = "cluster"
        return self._call(
            action,
            getattr(api, method_name.format(scope=scope)),
            group=resource.group,
            version=resource.version,
            plural=resource.plural,
            **kwargs,
        )

    def get_custom(
        self, resource: CustomResource, name: str, namespace: str | None = None
    ) -> dict[str, Any]:
        """Get a custom object."""
        return self._custom_call(
            "get_{scope}_custom_object",
            resource,
            f"get {resource.plural}/{name}",
            namespace,
            name=name,
        )

    def create_custom(
        self,
        resource: CustomResource,
        body: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        """Create a custom object."""
        name = body["metadata"]["name"]
        return self._custom_call(
            "create_{scope}_custom_object",
            resource,
            f"create {resource.plural}/{name}",
            namespace,
            body=body,
        )

    def patch_custom(
        self,
        resource: CustomResource,
        name: str,
        patch: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        """Merge-patch a custom object, such as its finalizers."""
        return self._custom_call(
            "patch_{scope}_custom_object",
            resource,
            f"update {resource.plural}/{name}",
            namespace,
            name=name,
            body=patch,
        )

    def patch_custom_status(
        self,
        resource: CustomResource,
        name: str,
        status: dict[str, Any],
        namespace: str | None = None,
    ) -> dict[str, Any]:
        """Merge-patch the status subresource of a custom object."""
        return self._custom_call(
            "patch_{scope}_custom_object_status",
            resource,
            f"update {resource.plural}/{name} status",
            namespace,
            name=name,
            body={"status": status},
        )

    def list_custom(
        self, resource: CustomResource, namespace: str | None = None
    ) -> list[dict[str, Any]]:
        """List the custom objects of a type."""
        if resource.namespaced and namespace is None:
            api = self._api("CustomObjectsApi")
            result = self._call(
                f"list {resource.plural}",
                api.list_cluster_custom_object,
                group=resource.group,
                version=resource.version,
                plural=resource.plural,
            )
        else:
            result = self._custom_call(
                "list_{scope}_custom_object",
                resource,
                f"list {resource.plural}",
                namespace,
            )
        return result.get("items", [])
