"""
Retry — bounded re-execution of a failing operation.

Backoff is linear (attempt index × base delay), without jitter: the
only caller is a single low-volume tool install, not a fan-out
network client.

Errors that carry ``retryable = False`` are raised immediately so a
failure no retry can fix does not burn the whole budget.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int, float], float]


def linear_backoff(attempt: int, base_delay: float) -> float:
    """Delay before the next try after failed ``attempt`` (1-based)."""
    return attempt * base_delay


def is_retryable(error: BaseException) -> bool:
    return getattr(error, "retryable", True)


def retry(
    operation: Callable[[], T],
    retries: int,
    *,
    base_delay: float = 1.0,
    backoff: Backoff = linear_backoff,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` up to ``retries + 1`` times.

    The first success is returned immediately. When every attempt
    fails, the last exception is re-raised unchanged.

    Args:
        operation: Zero-argument callable to attempt.
        retries: Extra attempts after the first one.
        base_delay: Seconds fed to ``backoff``.
        backoff: ``(attempt, base_delay) -> seconds``.
        should_retry: Predicate deciding whether an error is worth
            another attempt.
        sleep: Injected for tests.
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    attempts = retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except Exception as e:
            if attempt >= attempts or not should_retry(e):
                raise
            delay = backoff(attempt, base_delay)
            logger.info(
                "Attempt %d failed, retrying in %.1fs... (%s)", attempt, delay, e,
            )
            sleep(delay)

    raise AssertionError("unreachable")  # pragma: no cover
