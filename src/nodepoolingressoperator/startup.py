"""Code intended to run on start-up, before running any handlers."""

from __future__ import annotations

__all__ = ("create_singleton_ingress", "start_bootstrap", "start_operator")

import threading
from typing import Any

import kopf
import structlog

from nodepoolingressoperator import state
from nodepoolingressoperator.config import OperatorConfig
from nodepoolingressoperator.errors import AlreadyExistsError, ClusterError
from nodepoolingressoperator.ingress import (
    DEFAULT_REPLICAS_PER_POOL,
    REPLICAS_KEY,
    IngressKind,
)
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.retry import RetryPolicy
from nodepoolingressoperator.version import get_version

WATCH_SERVER_TIMEOUT = 600
"""Seconds before the API server closes a watch request."""


def create_singleton_ingress(
    client: ClusterClient,
    kind: IngressKind,
    retry: RetryPolicy,
    logger: Any | None = None,
) -> bool:
    """Create the singleton instance of an ingress kind if it is missing.

    Parameters
    ----------
    client : `~nodepoolingressoperator.k8s.ClusterClient`
        Client for the cluster.
    kind : `~nodepoolingressoperator.ingress.IngressKind`
        Kind of the singleton; provides its name and namespace.
    retry : `~nodepoolingressoperator.retry.RetryPolicy`
        Bounds the number of attempts and the delay between them.
    logger
        Logger; defaults to a structlog logger.

    Returns
    -------
    created : `bool`
        `True` if the singleton exists afterwards, whether it was created
        now or already existed. `False` once every attempt failed; the
        failure is only logged.
    """
    if logger is None:
        logger = structlog.getLogger(__name__)

    name = kind.singleton_name
    metadata = {"name": name}
    if kind.namespaced:
        metadata["namespace"] = kind.singleton_namespace
    body = {
        "apiVersion": f"{kind.group}/{kind.version}",
        "kind": kind.kind,
        "metadata": metadata,
        "spec": {REPLICAS_KEY: DEFAULT_REPLICAS_PER_POOL},
    }

    singleton = f"the singleton {kind.kind.lower()}({name})"

    def attempt() -> None:
        try:
            client.create_custom(kind, body, kind.singleton_namespace)
        except AlreadyExistsError:
            logger.info(f"{singleton} already exist")
        else:
            logger.info(f"{singleton} is created")

    try:
        retry.run(
            attempt,
            description=f"create {singleton}",
            logger=logger,
        )
    except ClusterError:
        logger.warning(
            f"fail to create the singleton {kind.kind.lower()} after trying "
            f"for {retry.max_attempts} times"
        )
        return False
    return True


def start_bootstrap(
    client: ClusterClient,
    config: OperatorConfig,
    logger: Any | None = None,
) -> threading.Thread:
    """Create the NodePoolIngress singleton from a background thread.

    The thread runs alongside the handlers and exits once the singleton
    exists or the attempts are used up.
    """
    retry = RetryPolicy(
        max_attempts=config.bootstrap_retries,
        delay=config.bootstrap_delay,
        retry_on=(ClusterError,),
    )
    thread = threading.Thread(
        target=create_singleton_ingress,
        args=(client, config.nodepool_ingress, retry, logger),
        name="nodepool-ingress-bootstrap",
        daemon=True,
    )
    thread.start()
    return thread


def start_operator(
    settings: kopf.OperatorSettings,
    config: OperatorConfig,
    logger: Any | None = None,
) -> None:
    """Apply the kopf settings and start the background bootstrap."""
    if logger is None:
        logger = structlog.getLogger(__name__)

    logger.info(f"Starting nodepool-ingress-operator {get_version()}")
    settings.watching.server_timeout = WATCH_SERVER_TIMEOUT
    if config.enable_webhook:
        settings.admission.server = kopf.WebhookServer(
            addr="0.0.0.0",
            port=config.webhook_port,
            host=config.webhook_host,
        )
        settings.admission.managed = "ingress.operator.openyurt.io"

    if config.create_singleton:
        start_bootstrap(state.get_client(), config)


@kopf.on.startup()
def configure_operator(
    settings: kopf.OperatorSettings, logger: Any, **kwargs: Any
) -> None:
    """Configure kopf when the operator starts."""
    start_operator(settings, state.config, logger=logger)
