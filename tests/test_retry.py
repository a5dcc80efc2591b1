"""Tests for the nodepoolingressoperator.retry module."""

from __future__ import annotations

import pytest

from nodepoolingressoperator.errors import (
    ClusterError,
    ConflictError,
    NotFoundError,
    TransientError,
)
from nodepoolingressoperator.retry import RetryPolicy


class Flaky:
    """Fail with the given errors, then return ``"ok"``."""

    def __init__(self, *errors: Exception) -> None:
        self.errors = list(errors)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def test_retry_until_success() -> None:
    sleeps: list[float] = []
    fn = Flaky(ConflictError("conflict"), TransientError("unavailable"))
    policy = RetryPolicy(max_attempts=5, delay=2.0, sleep=sleeps.append)
    assert policy.run(fn, description="update status") == "ok"
    assert fn.calls == 3
    assert sleeps == [2.0, 2.0]


def test_retry_gives_up() -> None:
    sleeps: list[float] = []
    fn = Flaky(*[ConflictError(f"conflict {i}") for i in range(5)])
    policy = RetryPolicy(max_attempts=5, delay=1.0, sleep=sleeps.append)
    with pytest.raises(ConflictError, match="conflict 4"):
        policy.run(fn, description="update status")
    assert fn.calls == 5
    assert len(sleeps) == 4


def test_retry_does_not_sleep_without_delay() -> None:
    sleeps: list[float] = []
    fn = Flaky(ConflictError("conflict"))
    RetryPolicy(sleep=sleeps.append).run(fn, description="update")
    assert sleeps == []


def test_non_retryable_error_propagates() -> None:
    fn = Flaky(NotFoundError("gone"))
    with pytest.raises(NotFoundError):
        RetryPolicy().run(fn, description="update")
    assert fn.calls == 1


def test_retry_on_any_cluster_error() -> None:
    fn = Flaky(NotFoundError("gone"), ClusterError("forbidden"))
    policy = RetryPolicy(max_attempts=3, retry_on=(ClusterError,))
    assert policy.run(fn, description="create") == "ok"
    assert fn.calls == 3


def test_single_attempt() -> None:
    fn = Flaky(ConflictError("conflict"))
    with pytest.raises(ConflictError):
        RetryPolicy(max_attempts=1).run(fn, description="update")
    assert fn.calls == 1
