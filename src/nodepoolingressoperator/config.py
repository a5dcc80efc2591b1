"""Operator configuration, read from the environment at start-up."""

from __future__ import annotations

__all__ = ("OperatorConfig",)

import os
from collections.abc import Mapping
from dataclasses import dataclass

from nodepoolingressoperator.ingress import (
    NODEPOOL_INGRESS,
    YURT_INGRESS,
    IngressKind,
)


def _get_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    value = environ.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OperatorConfig:
    """Settings shared by the handlers and reconcilers.

    The composition root builds one instance (see
    `nodepoolingressoperator.handlers`) and passes it to each
    `~nodepoolingressoperator.reconciler.IngressReconciler`.
    """

    nodepool_ingress_namespace: str = "kube-system"
    """Namespace of the NodePoolIngress singleton."""

    nodepool_namespace_prefix: str = "nodepool"
    """Prefix of the per-pool namespaces of the NodePoolIngress stacks."""

    yurtingress_namespace_prefix: str = "yurtingress"
    """Prefix of the per-pool namespaces of the YurtIngress stacks."""

    status_retries: int = 5
    """Attempts made to persist the status of an ingress resource."""

    status_retry_delay: float = 0.0
    """Seconds to wait between status update attempts."""

    bootstrap_retries: int = 5
    """Attempts made to create the NodePoolIngress singleton."""

    bootstrap_delay: float = 2.0
    """Seconds to wait between singleton creation attempts."""

    cleanup_attempts: int = 1
    """Deletion passes whose teardown may fail before the finalizer is
    removed anyway.

    The default removes it after the first pass, which can leak per-pool
    namespaces but never blocks deletion of the ingress resource.
    """

    resync_interval: float = 60.0
    """Seconds between periodic reconcile passes of each singleton."""

    create_singleton: bool = True
    """Create the NodePoolIngress singleton at start-up."""

    enable_webhook: bool = False
    """Serve the validating admission webhooks from this process."""

    webhook_host: str | None = None
    """Host name the API server uses to reach the admission webhook."""

    webhook_port: int = 9443
    """Port of the admission webhook server."""

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str] | None = None
    ) -> OperatorConfig:
        """Build the configuration from ``NPI_*`` environment variables."""
        if environ is None:
            environ = os.environ
        defaults = cls()
        return cls(
            nodepool_ingress_namespace=environ.get(
                "NPI_NAMESPACE", defaults.nodepool_ingress_namespace
            ),
            nodepool_namespace_prefix=environ.get(
                "NPI_NODEPOOL_NAMESPACE_PREFIX",
                defaults.nodepool_namespace_prefix,
            ),
            yurtingress_namespace_prefix=environ.get(
                "NPI_YURTINGRESS_NAMESPACE_PREFIX",
                defaults.yurtingress_namespace_prefix,
            ),
            status_retries=int(
                environ.get("NPI_STATUS_RETRIES", defaults.status_retries)
            ),
            status_retry_delay=float(
                environ.get(
                    "NPI_STATUS_RETRY_DELAY", defaults.status_retry_delay
                )
            ),
            bootstrap_retries=int(
                environ.get(
                    "NPI_BOOTSTRAP_RETRIES", defaults.bootstrap_retries
                )
            ),
            bootstrap_delay=float(
                environ.get("NPI_BOOTSTRAP_DELAY", defaults.bootstrap_delay)
            ),
            cleanup_attempts=int(
                environ.get("NPI_CLEANUP_ATTEMPTS", defaults.cleanup_attempts)
            ),
            resync_interval=float(
                environ.get("NPI_RESYNC_INTERVAL", defaults.resync_interval)
            ),
            create_singleton=_get_bool(
                environ, "NPI_CREATE_SINGLETON", defaults.create_singleton
            ),
            enable_webhook=_get_bool(
                environ, "NPI_ENABLE_WEBHOOK", defaults.enable_webhook
            ),
            webhook_host=environ.get("NPI_WEBHOOK_HOST") or None,
            webhook_port=int(
                environ.get("NPI_WEBHOOK_PORT", defaults.webhook_port)
            ),
        )

    @property
    def yurt_ingress(self) -> IngressKind:
        """The YurtIngress kind with the configured namespace prefix."""
        return YURT_INGRESS.configure(
            namespace_prefix=self.yurtingress_namespace_prefix
        )

    @property
    def nodepool_ingress(self) -> IngressKind:
        """The NodePoolIngress kind with the configured namespace values."""
        return NODEPOOL_INGRESS.configure(
            singleton_namespace=self.nodepool_ingress_namespace,
            namespace_prefix=self.nodepool_namespace_prefix,
        )
