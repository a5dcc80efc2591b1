"""Kopf admission handlers that validate the ingress singletons."""

__all__ = ("admit", "validate_nodepool_ingress", "validate_yurt_ingress")

from typing import Any

import kopf

from nodepoolingressoperator import state
from nodepoolingressoperator.ingress import IngressKind
from nodepoolingressoperator.validation import validate_ingress

YURT_INGRESS = state.config.yurt_ingress
NODEPOOL_INGRESS = state.config.nodepool_ingress

UNPROCESSABLE_ENTITY = 422


def admit(
    kind: IngressKind,
    operation: str,
    body: dict[str, Any],
    old: dict[str, Any] | None,
    logger: Any,
) -> None:
    """Reject the admission request if it fails validation.

    Raises
    ------
    kopf.AdmissionError
        Raised with the reason of the rejection.
    """
    new = None if operation == "DELETE" else body
    result = validate_ingress(
        operation,
        new,
        old or body,
        kind=kind,
        client=state.get_client(),
        logger=logger,
    )
    if not result.allowed:
        raise kopf.AdmissionError(result.reason, code=UNPROCESSABLE_ENTITY)


@kopf.on.validate(  # type: ignore[arg-type]
    YURT_INGRESS.group,
    YURT_INGRESS.version,
    YURT_INGRESS.plural,
    id="validate-yurtingress",
)
def validate_yurt_ingress(
    *,
    body: dict[str, Any],
    operation: str,
    logger: Any,
    old: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    admit(YURT_INGRESS, operation, body, old, logger)


@kopf.on.validate(  # type: ignore[arg-type]
    NODEPOOL_INGRESS.group,
    NODEPOOL_INGRESS.version,
    NODEPOOL_INGRESS.plural,
    id="validate-nodepoolingress",
)
def validate_nodepool_ingress(
    *,
    body: dict[str, Any],
    operation: str,
    logger: Any,
    old: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    admit(NODEPOOL_INGRESS, operation, body, old, logger)
