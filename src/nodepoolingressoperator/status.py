"""Persistence of the applied configuration into the ingress status."""

from __future__ import annotations

__all__ = ("StatusReconciler",)

from typing import Any

import structlog

from nodepoolingressoperator.errors import ClusterError
from nodepoolingressoperator.ingress import (
    NGINX_INGRESS_CONTROLLER_VERSION,
    IngressKind,
    IngressSpec,
    IngressStatus,
)
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.retry import RetryPolicy


class StatusReconciler:
    """Record the configuration applied to the cluster in the status
    subresource of an ingress resource.

    Status updates are retried by ``retry``; the ingress stacks created
    before a failed update are not rolled back, so the status can lag behind
    the cluster until the next successful pass.
    """

    def __init__(
        self,
        client: ClusterClient,
        kind: IngressKind,
        retry: RetryPolicy | None = None,
        logger: Any | None = None,
    ) -> None:
        self._client = client
        self._kind = kind
        self._retry = retry or RetryPolicy(retry_on=(ClusterError,))
        self._logger = logger or structlog.getLogger(__name__)

    def persist(
        self, body: dict[str, Any], pools: list[str] | None = None
    ) -> dict[str, Any]:
        """Copy the spec's pools and replicas into the status.

        Parameters
        ----------
        body : `dict`
            The ingress resource.
        pools : `list` of `str`, optional
            Pools to record instead of the pools of the spec.

        Returns
        -------
        body : `dict`
            The resource as returned by the status update.

        Raises
        ------
        ClusterError
            The error of the last attempt if every attempt failed.
        """
        spec = IngressSpec.from_body(body)
        current = IngressStatus.from_body(body, self._kind)
        status = IngressStatus(
            replicas=spec.replicas,
            pools=list(spec.pools if pools is None else pools),
            version=NGINX_INGRESS_CONTROLLER_VERSION,
            ready=current.ready,
            unready=current.unready,
        )
        return self._write(body, status)

    def clear(self, body: dict[str, Any]) -> dict[str, Any]:
        """Record that no pool has an ingress stack any more."""
        current = IngressStatus.from_body(body, self._kind)
        status = IngressStatus(
            version=NGINX_INGRESS_CONTROLLER_VERSION,
            ready=current.ready,
            unready=current.unready,
        )
        return self._write(body, status)

    def _write(
        self, body: dict[str, Any], status: IngressStatus
    ) -> dict[str, Any]:
        name = body["metadata"]["name"]
        namespace = body["metadata"].get("namespace")
        updated = self._retry.run(
            lambda: self._client.patch_custom_status(
                self._kind, name, status.to_dict(self._kind), namespace
            ),
            description=f"update {self._kind.kind} {name} status",
            logger=self._logger,
        )
        self._logger.info(f"{name} status is updated")
        return updated
