"""Kopf handlers that converge the node pool ingress stacks with the
YurtIngress and NodePoolIngress singletons.
"""

__all__ = (
    "reconcile_nodepool_ingress",
    "reconcile_yurt_ingress",
    "resync_nodepool_ingress",
    "resync_yurt_ingress",
    "run_reconcile",
)

from typing import Any

import kopf

from nodepoolingressoperator import state
from nodepoolingressoperator.errors import OperatorError
from nodepoolingressoperator.ingress import IngressKind
from nodepoolingressoperator.reconciler import ReconcileResult

YURT_INGRESS = state.config.yurt_ingress
NODEPOOL_INGRESS = state.config.nodepool_ingress


def run_reconcile(
    kind: IngressKind, name: str, namespace: str | None, logger: Any
) -> ReconcileResult:
    """Run one reconcile pass of ``kind`` while holding its lock.

    Raises
    ------
    kopf.TemporaryError
        Raised if the pass failed. The next event or resync timer tick
        repeats the pass.
    """
    reconciler = state.get_reconciler(kind)
    with state.reconcile_lock(kind):
        try:
            result = reconciler.reconcile(name, namespace)
        except OperatorError as e:
            logger.error(f"fail to reconcile {kind.kind} {name}: {e}")
            raise kopf.TemporaryError(
                f"{kind.kind} {name} is not reconciled: {e}",
                delay=state.config.resync_interval,
            ) from e
    logger.debug(f"{kind.kind} {name}: {result.value}")
    return result


def _is_singleton(kind: IngressKind) -> Any:
    def when(name: str, **kwargs: Any) -> bool:
        return name == kind.singleton_name

    return when


@kopf.on.event(  # type: ignore[arg-type]
    YURT_INGRESS.group, YURT_INGRESS.version, YURT_INGRESS.plural
)
def reconcile_yurt_ingress(
    *, name: str, event: dict[str, Any], logger: Any, **kwargs: Any
) -> None:
    """Reconcile the YurtIngress singleton whenever it changes.

    Parameters
    ----------
    name : `str`
        Name of the YurtIngress resource.
    event : `dict`
        The watch event; ``DELETED`` events need no pass because the
        finalizer is released before the resource disappears.
    logger
        The kopf logger.
    """
    if event.get("type") == "DELETED":
        return
    run_reconcile(YURT_INGRESS, name, None, logger)


@kopf.on.event(  # type: ignore[arg-type]
    NODEPOOL_INGRESS.group, NODEPOOL_INGRESS.version, NODEPOOL_INGRESS.plural
)
def reconcile_nodepool_ingress(
    *,
    name: str,
    namespace: str,
    event: dict[str, Any],
    logger: Any,
    **kwargs: Any,
) -> None:
    """Reconcile the NodePoolIngress singleton whenever it changes."""
    if event.get("type") == "DELETED":
        return
    run_reconcile(NODEPOOL_INGRESS, name, namespace, logger)


@kopf.timer(  # type: ignore[arg-type]
    YURT_INGRESS.group,
    YURT_INGRESS.version,
    YURT_INGRESS.plural,
    interval=state.config.resync_interval,
    when=_is_singleton(YURT_INGRESS),
)
def resync_yurt_ingress(*, name: str, logger: Any, **kwargs: Any) -> None:
    """Periodically repeat the pass so that failed changes are retried."""
    run_reconcile(YURT_INGRESS, name, None, logger)


@kopf.timer(  # type: ignore[arg-type]
    NODEPOOL_INGRESS.group,
    NODEPOOL_INGRESS.version,
    NODEPOOL_INGRESS.plural,
    interval=state.config.resync_interval,
    when=_is_singleton(NODEPOOL_INGRESS),
)
def resync_nodepool_ingress(
    *, name: str, namespace: str, logger: Any, **kwargs: Any
) -> None:
    run_reconcile(NODEPOOL_INGRESS, name, namespace, logger)
