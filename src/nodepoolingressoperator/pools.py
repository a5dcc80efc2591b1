"""Comparison of the desired and applied node pool lists."""

from __future__ import annotations

__all__ = ("PoolDiff", "diff_pools")

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass
class PoolDiff:
    """Node pools grouped by what a reconciliation has to do with them."""

    added: list[str] = field(default_factory=list)
    """Pools in the spec but not in the status, in spec order."""

    removed: list[str] = field(default_factory=list)
    """Pools in the status but not in the spec, in status order."""

    unchanged: list[str] = field(default_factory=list)
    """Pools in both lists, in spec order."""

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def diff_pools(
    desired: Sequence[str] | None, current: Sequence[str] | None
) -> PoolDiff:
    """Compare the pools of the spec with the pools of the status.

    Parameters
    ----------
    desired : `list` of `str`
        The ``spec.pools`` field. `None` is treated as an empty list.
    current : `list` of `str`
        The ``status.pools`` field, i.e. the pools set up by the last
        successful reconciliation. `None` is treated as an empty list.

    Returns
    -------
    diff : `PoolDiff`
        Every pool of either list appears in exactly one of the groups.
    """
    # Duplicates collapse onto their first occurrence.
    desired = list(dict.fromkeys(desired or []))
    current = list(dict.fromkeys(current or []))
    desired_set = set(desired)
    current_set = set(current)
    return PoolDiff(
        added=[pool for pool in desired if pool not in current_set],
        removed=[pool for pool in current if pool not in desired_set],
        unchanged=[pool for pool in desired if pool in current_set],
    )
