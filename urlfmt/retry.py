"""Retry loop with linearly decreasing backoff.

The delay before retrying after attempt ``n`` (1-based) of ``max_tries`` is::

    (max_tries + 1 - n) * min_delay

so the first retry waits longest and each later one waits ``min_delay``
less. There is no sleep after the final attempt.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from urlfmt.common.exceptions import (
    FormatURLException,
    RetriesExhaustedException,
    UnrecoverableFormatError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Retrying cannot fix these, so they propagate from the first attempt.
NOT_RETRIED: tuple[type[BaseException], ...] = (
    UnrecoverableFormatError,
    FormatURLException,
)


def backoff_delay(attempt: int, max_tries: int, min_delay: float) -> float:
    """Seconds to sleep after the given failed attempt."""
    return (max_tries + 1 - attempt) * min_delay


def retry(
    attempt: Callable[[int], T],
    max_tries: int,
    min_delay: float,
    *,
    url: str,
    operation: str,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``attempt`` until it succeeds or ``max_tries`` calls have failed.

    Args:
        attempt: Called with the 1-based attempt number. Any exception
            counts as a failure, except those in NOT_RETRIED.
        max_tries: Total number of attempts, at least 1.
        min_delay: Backoff unit in seconds. 0 retries immediately.
        url: URL reported in logs and in the final error.
        operation: What is being attempted, e.g. "requesting JSON".
        sleep: Sleep function, replaceable in tests.

    Returns:
        Whatever the first successful attempt returned.

    Raises:
        RetriesExhaustedException: If every attempt failed. The last
            attempt's error is chained as the cause.
        ValueError: If max_tries is less than 1.
    """
    if max_tries < 1:
        raise ValueError(f"max_tries must be at least 1, got {max_tries}")

    last_error: Exception | None = None
    for number in range(1, max_tries + 1):
        try:
            return attempt(number)
        except NOT_RETRIED:
            raise
        except Exception as e:
            last_error = e

        if number == max_tries:
            break
        delay = backoff_delay(number, max_tries, min_delay)
        logger.info(
            f"Attempt {number}/{max_tries} {operation} for {url} failed "
            f"({type(last_error).__name__}: {last_error}); "
            f"retrying in {delay:.1f}s"
        )
        if delay > 0:
            sleep(delay)

    assert last_error is not None
    logger.warning(
        f"Ran out of tries ({max_tries} total) {operation} for {url}"
    )
    raise RetriesExhaustedException(
        url=url,
        operation=operation,
        attempts=max_tries,
        last_error=last_error,
    ) from last_error
