"""Admission checks for the ingress singletons."""

from __future__ import annotations

__all__ = ("Operation", "ValidationResult", "validate_ingress")

import enum
from dataclasses import dataclass
from typing import Any

import structlog

from nodepoolingressoperator.errors import ClusterError
from nodepoolingressoperator.ingress import NODEPOOL, IngressKind, IngressSpec
from nodepoolingressoperator.k8s import ClusterClient


class Operation(enum.Enum):
    """Admission request operations that are validated."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of an admission check."""

    allowed: bool
    reason: str = ""


_ALLOWED = ValidationResult(allowed=True)


def _object_name(*bodies: dict[str, Any] | None) -> str:
    for body in bodies:
        if body:
            name = (body.get("metadata") or {}).get("name")
            if name:
                return name
    return ""


def validate_pools(
    spec: IngressSpec, *, client: ClusterClient, logger: Any | None = None
) -> ValidationResult:
    """Check that every pool of ``spec`` names an existing NodePool."""
    if logger is None:
        logger = structlog.getLogger(__name__)
    if not spec.pools:
        return _ALLOWED

    try:
        nodepools = client.list_custom(NODEPOOL)
    except ClusterError as e:
        logger.error(f"List nodepool list error: {e}")
        return ValidationResult(False, "List nodepool list error!")

    existing = {np["metadata"]["name"] for np in nodepools}
    for pool in spec.pools:
        if pool not in existing:
            reason = f"{pool} does not exist in the cluster!"
            logger.error(reason)
            return ValidationResult(False, reason)
    return _ALLOWED


def validate_ingress(
    operation: Operation | str,
    new: dict[str, Any] | None,
    old: dict[str, Any] | None,
    *,
    kind: IngressKind,
    client: ClusterClient,
    logger: Any | None = None,
) -> ValidationResult:
    """Decide whether an admission request for an ingress singleton is
    allowed.

    Parameters
    ----------
    operation : `Operation` or `str`
        The admission operation. Other operations, such as ``CONNECT``, are
        allowed without checks.
    new : `dict`, optional
        The object after the request; absent for deletions.
    old : `dict`, optional
        The object before the request; absent for creations.
    kind : `~nodepoolingressoperator.ingress.IngressKind`
        Kind of the object.
    client : `~nodepoolingressoperator.k8s.ClusterClient`
        Client used to list the NodePools of the cluster.
    logger
        Logger; defaults to a structlog logger.

    Returns
    -------
    result : `ValidationResult`
        Rejected if the object is not named as the singleton or if its spec
        names a pool that has no NodePool. Creations and updates check the
        new spec, deletions the old one.
    """
    if logger is None:
        logger = structlog.getLogger(__name__)

    name = _object_name(new, old)
    if name != kind.singleton_name:
        reason = (
            f"please name {kind.kind} with {kind.singleton_name} "
            f"instead of {name}"
        )
        logger.error(reason)
        return ValidationResult(False, reason)

    try:
        operation = Operation(str(getattr(operation, "value", operation)))
    except ValueError:
        return _ALLOWED

    logger.debug(
        f"capture the {kind.kind.lower()} {operation.value.lower()} request"
    )
    body = old if operation is Operation.DELETE else new
    return validate_pools(
        IngressSpec.from_body(body or {}), client=client, logger=logger
    )
