"""Kopf handlers for the nodepool-ingress-operator."""

__all__ = (
    "configure_operator",
    "reconcile_nodepool_ingress",
    "reconcile_yurt_ingress",
    "resync_nodepool_ingress",
    "resync_yurt_ingress",
    "validate_nodepool_ingress",
    "validate_yurt_ingress",
)

from nodepoolingressoperator.handlers.admission import (
    validate_nodepool_ingress,
    validate_yurt_ingress,
)
from nodepoolingressoperator.handlers.reconcile import (
    reconcile_nodepool_ingress,
    reconcile_yurt_ingress,
    resync_nodepool_ingress,
    resync_yurt_ingress,
)
from nodepoolingressoperator.startup import configure_operator
