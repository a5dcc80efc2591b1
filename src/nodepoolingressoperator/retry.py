"""Bounded retries of Kubernetes API requests."""

from __future__ import annotations

__all__ = ("RetryPolicy",)

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from nodepoolingressoperator.errors import ConflictError, TransientError

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Call a function until it succeeds or runs out of attempts.

    Parameters
    ----------
    max_attempts : `int`
        Total number of calls, including the first one.
    delay : `float`
        Seconds to wait between attempts. Zero retries immediately.
    retry_on : `tuple` of exception types
        Errors that are retried. Any other exception propagates at once.
    sleep : callable
        Called with ``delay`` between attempts; tests replace it.
    """

    max_attempts: int = 5
    delay: float = 0.0
    retry_on: tuple[type[BaseException], ...] = (ConflictError, TransientError)
    sleep: Callable[[float], Any] = field(default=time.sleep, repr=False)

    def run(
        self,
        fn: Callable[[], T],
        *,
        description: str,
        logger: Any | None = None,
    ) -> T:
        """Call ``fn`` with retries and return its result.

        Raises
        ------
        Exception
            The error of the last attempt, once ``max_attempts`` calls have
            failed.
        """
        if logger is None:
            logger = structlog.getLogger(__name__)

        attempts = max(self.max_attempts, 1)
        attempt = 1
        while True:
            try:
                return fn()
            except self.retry_on as e:
                if attempt >= attempts:
                    logger.error(
                        f"fail to {description} after {attempt} attempts: {e}"
                    )
                    raise
                logger.warning(
                    f"fail to {description} (attempt {attempt}/{attempts}): "
                    f"{e}, try again"
                )
            if self.delay > 0:
                self.sleep(self.delay)
            attempt += 1
