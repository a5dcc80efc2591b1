"""Version of the installed nodepool-ingress-operator distribution."""

__all__ = ("DISTRIBUTION", "get_version")

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "nodepool-ingress-operator"


def get_version() -> str:
    """Return the installed version, or ``"unknown"`` in a source checkout."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "unknown"
