"""Typed views of the YurtIngress and NodePoolIngress custom resources."""

from __future__ import annotations

__all__ = (
    "NGINX_INGRESS_CONTROLLER_VERSION",
    "NODEPOOL",
    "NODEPOOL_INGRESS",
    "YURT_INGRESS",
    "CustomResource",
    "IngressKind",
    "IngressSpec",
    "IngressStatus",
)

from dataclasses import dataclass, field, replace
from typing import Any

NGINX_INGRESS_CONTROLLER_VERSION = "0.48.1"
"""Version of the NGINX ingress controller deployed into each pool."""

DEFAULT_REPLICAS_PER_POOL = 1

REPLICAS_KEY = "ingress_controller_replicas_per_pool"
POOLS_KEY = "pools"
VERSION_KEY = "nginx_ingress_controller_version"


@dataclass(frozen=True)
class CustomResource:
    """Coordinates of a custom resource type in the Kubernetes API."""

    group: str
    version: str
    plural: str
    kind: str
    namespaced: bool


@dataclass(frozen=True)
class IngressKind(CustomResource):
    """A singleton ingress custom resource kind managed by the operator.

    The two kinds share the reconciliation algorithm and differ only in the
    values held here.
    """

    singleton_name: str = ""
    singleton_namespace: str | None = None
    finalizer: str = "ingress.operator.openyurt.io"
    namespace_prefix: str = "nodepool"
    ready_key: str = "readyNum"
    unready_key: str = "unreadyNum"

    def pool_namespace(self, pool: str) -> str:
        """Name of the namespace holding the ingress stack of ``pool``."""
        return f"{self.namespace_prefix}-{pool}"

    def configure(self, **changes: Any) -> IngressKind:
        """Return a copy with some fields changed (see `OperatorConfig`)."""
        return replace(self, **changes)


YURT_INGRESS = IngressKind(
    group="apps.openyurt.io",
    version="v1alpha1",
    plural="yurtingresses",
    kind="YurtIngress",
    namespaced=False,
    singleton_name="yurtingress-singleton",
    namespace_prefix="yurtingress",
    ready_key="readyNum",
    unready_key="unreadyNum",
)

NODEPOOL_INGRESS = IngressKind(
    group="apps.openyurt.io",
    version="v1alpha1",
    plural="nodepoolingresses",
    kind="NodePoolIngress",
    namespaced=True,
    singleton_name="nodepool-ingress",
    singleton_namespace="kube-system",
    namespace_prefix="nodepool",
    ready_key="readyPoolNum",
    unready_key="unreadyPoolNum",
)

NODEPOOL = CustomResource(
    group="apps.openyurt.io",
    version="v1alpha1",
    plural="nodepools",
    kind="NodePool",
    namespaced=False,
)


@dataclass
class IngressSpec:
    """The desired state declared by the cluster operator."""

    replicas: int = 0
    pools: list[str] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> IngressSpec:
        spec = body.get("spec") or {}
        return cls(
            replicas=int(spec.get(REPLICAS_KEY) or 0),
            pools=list(spec.get(POOLS_KEY) or []),
        )


@dataclass
class IngressStatus:
    """The last configuration successfully applied by the operator."""

    replicas: int = 0
    pools: list[str] = field(default_factory=list)
    version: str = ""
    ready: int = 0
    unready: int = 0

    @classmethod
    def from_body(
        cls, body: dict[str, Any], kind: IngressKind
    ) -> IngressStatus:
        status = body.get("status") or {}
        return cls(
            replicas=int(status.get(REPLICAS_KEY) or 0),
            pools=list(status.get(POOLS_KEY) or []),
            version=status.get(VERSION_KEY) or "",
            ready=int(status.get(kind.ready_key) or 0),
            unready=int(status.get(kind.unready_key) or 0),
        )

    def to_dict(self, kind: IngressKind) -> dict[str, Any]:
        """Serialize with the wire keys of ``kind``.

        Empty pool lists are sent as ``None`` so that a merge patch removes
        the key, matching the ``omitempty`` encoding of the field.
        """
        return {
            REPLICAS_KEY: self.replicas or None,
            POOLS_KEY: list(self.pools) or None,
            VERSION_KEY: self.version or None,
            kind.ready_key: self.ready,
            kind.unready_key: self.unready,
        }
