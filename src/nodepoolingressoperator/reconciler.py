"""Reconcile a singleton ingress resource with the ingress stacks of its
node pools.
"""

from __future__ import annotations

__all__ = ("IngressReconciler", "ReconcileResult")

import enum
from typing import Any

import structlog

from nodepoolingressoperator.config import OperatorConfig
from nodepoolingressoperator.deletion import DeletionStateMachine, IngressPhase
from nodepoolingressoperator.errors import (
    ClusterError,
    NotFoundError,
    PoolNamespaceError,
)
from nodepoolingressoperator.ingress import (
    IngressKind,
    IngressSpec,
    IngressStatus,
)
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.lifecycle import PoolLifecycle
from nodepoolingressoperator.pools import diff_pools
from nodepoolingressoperator.retry import RetryPolicy
from nodepoolingressoperator.status import StatusReconciler


class ReconcileResult(enum.Enum):
    """Outcome of a reconcile pass."""

    IGNORED = "ignored"
    NOT_FOUND = "not-found"
    FINALIZER_ADDED = "finalizer-added"
    FINALIZED = "finalized"
    CONVERGED = "converged"
    UNCHANGED = "unchanged"


class IngressReconciler:
    """Drive the cluster towards the pools declared by an ingress singleton.

    Parameters
    ----------
    client : `~nodepoolingressoperator.k8s.ClusterClient`
        Client for the cluster.
    kind : `~nodepoolingressoperator.ingress.IngressKind`
        The ingress kind reconciled by this instance.
    config : `~nodepoolingressoperator.config.OperatorConfig`
        Retry and finalizer settings.
    logger
        Logger; defaults to a structlog logger.
    """

    def __init__(
        self,
        client: ClusterClient,
        kind: IngressKind,
        config: OperatorConfig | None = None,
        logger: Any | None = None,
    ) -> None:
        if config is None:
            config = OperatorConfig()
        self._client = client
        self._kind = kind
        self._logger = logger or structlog.getLogger(__name__)
        self.lifecycle = PoolLifecycle(client, kind, logger=self._logger)
        self.status = StatusReconciler(
            client,
            kind,
            retry=RetryPolicy(
                max_attempts=config.status_retries,
                delay=config.status_retry_delay,
                retry_on=(ClusterError,),
            ),
            logger=self._logger,
        )
        self.deletion = DeletionStateMachine(
            client,
            kind,
            self.lifecycle,
            self.status,
            cleanup_attempts=config.cleanup_attempts,
            logger=self._logger,
        )
        self._incomplete: set[str] = set()

    @property
    def kind(self) -> IngressKind:
        return self._kind

    def reconcile(
        self, name: str, namespace: str | None = None
    ) -> ReconcileResult:
        """Run one reconcile pass for the ingress resource ``name``.

        Parameters
        ----------
        name : `str`
            Name of the ingress resource.
        namespace : `str`, optional
            Its namespace, for namespaced kinds.

        Returns
        -------
        result : `ReconcileResult`
            What the pass did.

        Raises
        ------
        nodepoolingressoperator.errors.OperatorError
            The first failure of the pass. Failures of single objects inside
            a pool's stack do not stop the remaining pools. The status is
            still written before the error is raised, and pools left with an
            incomplete stack are completed by the following passes.
        """
        if name != self._kind.singleton_name:
            self._logger.info(
                f"{self._kind.kind} {name} is not the singleton "
                f"{self._kind.singleton_name}, skip it"
            )
            return ReconcileResult.IGNORED

        self._logger.info(f"Reconcile {self._kind.kind} {name}")
        try:
            body = self._client.get_custom(self._kind, name, namespace)
        except NotFoundError:
            self._logger.debug(f"{self._kind.kind} {name} is not found")
            return ReconcileResult.NOT_FOUND

        phase = self.deletion.phase(body)
        if phase is IngressPhase.ACTIVE:
            if self.deletion.ensure_finalizer(body):
                return ReconcileResult.FINALIZER_ADDED
        else:
            self.deletion.finalize(body)
            return ReconcileResult.FINALIZED

        return self._converge(body)

    def _converge(self, body: dict[str, Any]) -> ReconcileResult:
        spec = IngressSpec.from_body(body)
        status = IngressStatus.from_body(body, self._kind)
        diff = diff_pools(spec.pools, status.pools)
        errors: list[Exception] = []
        # Pools whose stack must still be recorded because their deletion
        # failed.
        lingering: list[str] = []

        if diff.added:
            self._logger.info(f"added pools: {diff.added}")
            if not status.pools:
                errors.extend(self.lifecycle.create_shared())
            for pool in diff.added:
                self._create_pool(pool, spec.replicas, errors)

        repaired = [p for p in diff.unchanged if p in self._incomplete]
        for pool in repaired:
            self._logger.info(f"complete the ingress stack of {pool}")
            self._create_pool(pool, spec.replicas, errors)

        if diff.removed:
            self._logger.info(f"removed pools: {diff.removed}")
            for pool in diff.removed:
                self._incomplete.discard(pool)
                failures = self.lifecycle.delete_pool(pool)
                if failures:
                    lingering.append(pool)
                    errors.extend(failures)
            if not spec.pools:
                errors.extend(self.lifecycle.delete_shared())

        scaled = False
        if diff.unchanged and spec.replicas != status.replicas:
            self._logger.info(
                f"replicas changed from {status.replicas} to {spec.replicas}"
            )
            for pool in diff.unchanged:
                failures = self.lifecycle.scale_pool(pool, spec.replicas)
                if failures:
                    self._incomplete.add(pool)
                    errors.extend(failures)
            scaled = True

        if diff.changed or scaled or repaired:
            # Partially created pools are recorded too so that removing
            # them from the spec tears their stacks down.
            self.status.persist(body, pools=[*spec.pools, *lingering])
        if errors:
            raise errors[0]
        if not (diff.changed or scaled or repaired):
            return ReconcileResult.UNCHANGED
        return ReconcileResult.CONVERGED

    def _create_pool(
        self, pool: str, replicas: int, errors: list[Exception]
    ) -> None:
        try:
            failures = self.lifecycle.create_pool(pool, replicas)
        except PoolNamespaceError as e:
            failures = [e]
        if failures:
            self._incomplete.add(pool)
            errors.extend(failures)
        else:
            self._incomplete.discard(pool)
