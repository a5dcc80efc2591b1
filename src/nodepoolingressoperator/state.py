"""Constructed (cached) state as module-level attributes."""

from __future__ import annotations

__all__ = ("config", "get_client", "get_reconciler", "reconcile_lock")

import threading

from nodepoolingressoperator.config import OperatorConfig
from nodepoolingressoperator.ingress import IngressKind
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.reconciler import IngressReconciler

config = OperatorConfig.from_environ()
"""Settings of the operator, read from the ``NPI_*`` environment variables."""

_client: ClusterClient | None = None
_reconcilers: dict[str, IngressReconciler] = {}
_locks: dict[str, threading.Lock] = {}
_guard = threading.Lock()


def get_client() -> ClusterClient:
    """Get the cluster client, creating it on first use.

    The client is created lazily so that importing the handlers does not
    need cluster credentials.
    """
    global _client
    with _guard:
        if _client is None:
            _client = ClusterClient.from_environment()
        return _client


def get_reconciler(kind: IngressKind) -> IngressReconciler:
    """Get the reconciler of an ingress kind.

    Reconcilers are cached so that state kept between passes, such as the
    count of failed cleanups, survives.
    """
    client = get_client()
    with _guard:
        if kind.kind not in _reconcilers:
            _reconcilers[kind.kind] = IngressReconciler(client, kind, config)
        return _reconcilers[kind.kind]


def reconcile_lock(kind: IngressKind) -> threading.Lock:
    """Lock held while a pass of ``kind`` runs.

    Event and timer handlers of the same singleton run in different worker
    threads; the lock keeps a single pass in flight.
    """
    with _guard:
        return _locks.setdefault(kind.kind, threading.Lock())
