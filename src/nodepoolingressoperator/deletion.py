"""Finalizer handling and teardown of deleted ingress resources."""

from __future__ import annotations

__all__ = ("DeletionStateMachine", "IngressPhase", "phase_of")

import enum
from typing import Any

import structlog

from nodepoolingressoperator.errors import (
    CleanupError,
    ClusterError,
    ConflictError,
    NotFoundError,
)
from nodepoolingressoperator.ingress import (
    IngressKind,
    IngressSpec,
    IngressStatus,
)
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.lifecycle import PoolLifecycle
from nodepoolingressoperator.retry import RetryPolicy
from nodepoolingressoperator.status import StatusReconciler


class IngressPhase(enum.Enum):
    """Deletion phases of an ingress resource."""

    ACTIVE = "Active"
    """Not being deleted."""

    TERMINATING = "Terminating"
    """Deletion requested; the finalizer holds the object until teardown."""

    FINALIZED = "Finalized"
    """Deletion requested and the finalizer is gone."""


def phase_of(body: dict[str, Any], finalizer: str) -> IngressPhase:
    """Get the deletion phase of an ingress resource."""
    metadata = body.get("metadata") or {}
    if not metadata.get("deletionTimestamp"):
        return IngressPhase.ACTIVE
    if finalizer in (metadata.get("finalizers") or []):
        return IngressPhase.TERMINATING
    return IngressPhase.FINALIZED


class DeletionStateMachine:
    """Guard ingress resources with a finalizer and tear down their pools
    once they are deleted.

    Parameters
    ----------
    client : `~nodepoolingressoperator.k8s.ClusterClient`
        Client for the cluster.
    kind : `~nodepoolingressoperator.ingress.IngressKind`
        Kind of the ingress resource; provides the finalizer name.
    lifecycle : `~nodepoolingressoperator.lifecycle.PoolLifecycle`
        Tears down the pool stacks.
    status : `~nodepoolingressoperator.status.StatusReconciler`
        Clears the status after the teardown.
    retry : `~nodepoolingressoperator.retry.RetryPolicy`, optional
        Retries finalizer updates that lose a concurrency race.
    cleanup_attempts : `int`
        Number of passes whose teardown may fail before the finalizer is
        removed anyway. Until then a failed teardown keeps the finalizer and
        raises `CleanupError`, so that the deletion is attempted again. The
        default of 1 removes the finalizer after the first pass, which can
        leak pool namespaces but never blocks the deletion.
    logger
        Logger; defaults to a structlog logger.
    """

    def __init__(
        self,
        client: ClusterClient,
        kind: IngressKind,
        lifecycle: PoolLifecycle,
        status: StatusReconciler,
        retry: RetryPolicy | None = None,
        cleanup_attempts: int = 1,
        logger: Any | None = None,
    ) -> None:
        self._client = client
        self._kind = kind
        self._lifecycle = lifecycle
        self._status = status
        self._retry = retry or RetryPolicy()
        self._cleanup_attempts = max(cleanup_attempts, 1)
        self._failed_cleanups: dict[str, int] = {}
        self._logger = logger or structlog.getLogger(__name__)

    def phase(self, body: dict[str, Any]) -> IngressPhase:
        return phase_of(body, self._kind.finalizer)

    def ensure_finalizer(self, body: dict[str, Any]) -> bool:
        """Add the finalizer to an active resource that lacks it.

        Returns
        -------
        added : `bool`
            `True` if the resource was updated.
        """
        if self.phase(body) is not IngressPhase.ACTIVE:
            return False
        finalizers = body["metadata"].get("finalizers") or []
        if self._kind.finalizer in finalizers:
            return False
        self._logger.debug(f"Now add finalizers {self._kind.finalizer}")
        self._update_finalizers(body, add=True)
        return True

    def finalize(self, body: dict[str, Any]) -> list[Exception]:
        """Tear down every pool of a terminating resource and release it.

        Finalized and active resources are left alone.

        Returns
        -------
        errors : `list` of `Exception`
            Teardown failures that were logged and ignored.

        Raises
        ------
        CleanupError
            Raised if the teardown failed and the resource has not used up
            its cleanup attempts; the finalizer is kept.
        """
        if self.phase(body) is not IngressPhase.TERMINATING:
            return []

        uid = body["metadata"].get("uid") or body["metadata"]["name"]
        errors, body = self._cleanup(body)
        if errors:
            for error in errors:
                self._logger.error(
                    f"cleanup of {self._kind.kind} "
                    f"{body['metadata']['name']} failed: {error}"
                )
            failures = self._failed_cleanups.get(uid, 0) + 1
            self._failed_cleanups[uid] = failures
            if failures < self._cleanup_attempts:
                raise CleanupError(errors)
            self._logger.warning(
                f"removing finalizer {self._kind.finalizer} despite "
                f"{len(errors)} cleanup failure(s)"
            )

        self._update_finalizers(body, add=False)
        self._failed_cleanups.pop(uid, None)
        return errors

    def _cleanup(
        self, body: dict[str, Any]
    ) -> tuple[list[Exception], dict[str, Any]]:
        # Pools applied by an earlier pass but already dropped from the spec
        # are torn down too.
        pools = IngressSpec.from_body(body).pools
        applied = IngressStatus.from_body(body, self._kind).pools
        pools = pools + [p for p in applied if p not in pools]
        if not pools:
            return [], body
        errors: list[Exception] = []
        for pool in pools:
            errors.extend(self._lifecycle.delete_pool(pool))
        errors.extend(self._lifecycle.delete_shared())
        try:
            # The status update changes the resource version.
            body = self._status.clear(body)
        except ClusterError as e:
            errors.append(e)
        return errors, body

    def _update_finalizers(self, body: dict[str, Any], *, add: bool) -> None:
        name = body["metadata"]["name"]
        namespace = body["metadata"].get("namespace")
        finalizer = self._kind.finalizer
        current = {"body": body}

        def attempt() -> dict[str, Any]:
            latest = current["body"]
            finalizers = list(latest["metadata"].get("finalizers") or [])
            if add and finalizer not in finalizers:
                finalizers.append(finalizer)
            elif not add:
                finalizers = [f for f in finalizers if f != finalizer]
            patch = {
                "metadata": {
                    "finalizers": finalizers,
                    "resourceVersion": latest["metadata"].get(
                        "resourceVersion"
                    ),
                }
            }
            try:
                return self._client.patch_custom(
                    self._kind, name, patch, namespace
                )
            except ConflictError:
                # Start the next attempt from the current version.
                current["body"] = self._client.get_custom(
                    self._kind, name, namespace
                )
                raise

        action = "add" if add else "remove"
        try:
            self._retry.run(
                attempt,
                description=f"{action} finalizer of {self._kind.kind} {name}",
                logger=self._logger,
            )
        except NotFoundError:
            if add:
                raise
            self._logger.info(f"{self._kind.kind} {name} is already gone")
            return
        self._logger.info(
            f"finalizer {finalizer} of {name} is "
            f"{'added' if add else 'removed'}"
        )
