"""Exception types raised by the operator and the translation of Kubernetes
API failures into them.
"""

from __future__ import annotations

__all__ = (
    "AlreadyExistsError",
    "CleanupError",
    "ClusterError",
    "ConflictError",
    "ManifestError",
    "NotFoundError",
    "OperatorError",
    "PoolNamespaceError",
    "TransientError",
    "classify_api_exception",
)

import json

from kubernetes.client.exceptions import ApiException


class OperatorError(Exception):
    """Base class for errors raised by the operator."""


class ManifestError(OperatorError):
    """A template could not be rendered or parsed into a known object kind."""


class ClusterError(OperatorError):
    """A request to the Kubernetes API failed.

    Parameters
    ----------
    message : `str`
        Description of the failed request.
    status : `int`, optional
        HTTP status code of the response, if there was one.
    reason : `str`, optional
        The ``reason`` field of the Kubernetes ``Status`` response.
    """

    def __init__(
        self, message: str, *, status: int | None = None, reason: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


class NotFoundError(ClusterError):
    """The object does not exist."""


class AlreadyExistsError(ClusterError):
    """The object already exists."""


class ConflictError(ClusterError):
    """An update lost an optimistic concurrency race."""


class TransientError(ClusterError):
    """The API server was unavailable or throttled the request."""


class PoolNamespaceError(OperatorError):
    """The namespace of a node pool could not be created."""


class CleanupError(OperatorError):
    """Tearing down the ingress resources left errors behind.

    Parameters
    ----------
    errors : `list`
        The individual failures collected during the teardown.
    """

    def __init__(self, errors: list[Exception]) -> None:
        summary = "; ".join(str(e) for e in errors)
        super().__init__(f"{len(errors)} cleanup step(s) failed: {summary}")
        self.errors = errors


def _status_reason(exc: ApiException) -> str:
    # The body is a serialized v1 Status when the API server produced it.
    if not exc.body:
        return ""
    try:
        body = json.loads(exc.body)
    except (TypeError, ValueError):
        return ""
    if isinstance(body, dict):
        return body.get("reason", "") or ""
    return ""


def classify_api_exception(exc: ApiException, action: str) -> ClusterError:
    """Translate a kubernetes client `ApiException` into a typed error.

    Parameters
    ----------
    exc : `kubernetes.client.exceptions.ApiException`
        The exception raised by the kubernetes client.
    action : `str`
        Short description of the request, such as
        ``"create deployment/ingress-nginx-controller"``.

    Returns
    -------
    error : `ClusterError`
        One of `NotFoundError`, `AlreadyExistsError`, `ConflictError`,
        `TransientError`, or a plain `ClusterError`.
    """
    status = exc.status
    reason = _status_reason(exc) or (exc.reason or "")
    message = f"fail to {action}: ({status}) {reason}".rstrip()

    if status == 404:
        error_class: type[ClusterError] = NotFoundError
    elif status == 409 and reason == "AlreadyExists":
        error_class = AlreadyExistsError
    elif status == 409:
        error_class = ConflictError
    elif status in (0, None, 429) or (status is not None and status >= 500):
        error_class = TransientError
    else:
        error_class = ClusterError
    return error_class(message, status=status, reason=reason)
