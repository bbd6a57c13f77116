"""
Bounded retries with exponential backoff for HTTP collaborators.
"""

import time
from typing import Callable, TypeVar

import requests

from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Client errors worth another attempt; every other 4xx is final
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


def is_retryable(error: Exception) -> bool:
    """
    Decide whether a failed request may be attempted again.

    Connection problems, timeouts, 5xx responses and 408/429 are retryable.
    """
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(error, requests.HTTPError) and error.response is not None:
        status = error.response.status_code
        return status >= 500 or status in RETRYABLE_CLIENT_STATUSES
    return False


def backoff_delay(attempt: int, base: float) -> float:
    """Delay before retry number ``attempt + 1``: base * 2**attempt seconds."""
    return base * (2 ** attempt)


def call_with_retry(
    func: Callable[[], T],
    attempts: int,
    backoff: float,
    operation: str,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or ``attempts`` are used up.

    Args:
        func: Zero-argument callable performing one request
        attempts: Maximum number of calls (>= 1)
        backoff: Base delay in seconds
        operation: Name used in log messages
        sleep: Sleep function (replaceable in tests)

    Returns:
        Whatever ``func`` returns

    Raises:
        The last exception raised by ``func``, immediately for
        non-retryable errors.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")

    for attempt in range(attempts):
        try:
            return func()
        except requests.RequestException as e:
            if not is_retryable(e) or attempt == attempts - 1:
                raise
            delay = backoff_delay(attempt, backoff)
            logger.warning(
                f"{operation} attempt {attempt + 1} failed, retrying",
                extra={"attempt": attempt + 1, "delay_seconds": delay, "error": str(e)},
            )
            sleep(delay)

    # Unreachable: the loop either returns or raises
    raise AssertionError("retry loop exited without result")
