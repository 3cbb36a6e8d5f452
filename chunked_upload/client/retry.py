"""Bounded retry for chunk requests."""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from chunked_upload.exceptions import (
    ResponseReadError,
    ServerRejected,
    TransportError,
    UploadFailed,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3

# Errors that count as one failed attempt
RETRYABLE_ERRORS = (TransportError, ServerRejected, ResponseReadError)


@dataclass
class RetryResult(Generic[T]):
    """Outcome of a successful retried call.

    Attributes:
        value: Return value of the successful attempt
        attempts: Number of attempts made, including the successful one
    """

    value: T
    attempts: int

    @property
    def retried(self) -> bool:
        """True if the first attempt failed."""
        return self.attempts > 1


def call_with_retry(
    operation: Callable[[], T],
    max_attempts: int = MAX_ATTEMPTS,
    retry_on: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> RetryResult[T]:
    """Call ``operation`` until it succeeds or ``max_attempts`` is reached.

    Attempts follow each other immediately. Exceptions outside ``retry_on``
    propagate at once.

    Args:
        operation: Zero-argument callable performing one attempt
        max_attempts: Total number of attempts (default: 3)
        retry_on: Exception types that count as a failed attempt
        on_retry: Optional callback(attempt, error) after each failed attempt
            that will be retried

    Returns:
        RetryResult with the operation's return value

    Raises:
        ValueError: If max_attempts is less than 1
        UploadFailed: If every attempt failed
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    last_error: Optional[Exception] = None
    for attempt in range(1, max_attempts + 1):
        try:
            value = operation()
        except retry_on as e:
            last_error = e
            if attempt < max_attempts:
                logger.debug(f"Attempt {attempt}/{max_attempts} failed: {e}")
                if on_retry:
                    on_retry(attempt, e)
            continue
        return RetryResult(value=value, attempts=attempt)

    status_code = getattr(last_error, "status_code", None)
    response_content = getattr(last_error, "response_content", None)
    raise UploadFailed(
        f"Failed after {max_attempts} attempts: {last_error}",
        attempts=max_attempts,
        status_code=status_code,
        response_content=response_content,
    ) from last_error
