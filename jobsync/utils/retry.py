"""
Retry Policy

Fixed-delay retry for filesystem operations that can fail transiently,
e.g. while another process holds the file open.

Author: JobSync Project
License: MIT
"""

import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

PERMANENT_OS_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError)


def is_transient_os_error(error: BaseException) -> bool:
    """
    Check whether an error is worth retrying.

    Any OSError counts except a missing path or a file/directory
    mismatch, which no amount of waiting will fix.
    """
    return isinstance(error, OSError) and not isinstance(error, PERMANENT_OS_ERRORS)


class RetryPolicy:
    """
    Retry an operation a fixed number of times with a fixed delay.

    The last error propagates once attempts are exhausted, or at once if
    the predicate rejects it.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        delay: float = 1.0,
        retryable: Callable[[BaseException], bool] = is_transient_os_error,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize retry policy.

        Args:
            max_attempts: Total attempts, including the first
            delay: Seconds to wait between attempts
            retryable: Predicate deciding whether an error is retried
            sleep: Delay function (swappable in tests)
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.max_attempts = max_attempts
        self.delay = delay
        self.retryable = retryable
        self._sleep = sleep

    def call(
        self,
        operation: Callable[[], T],
        on_failure: Optional[Callable[[int, BaseException, bool], None]] = None
    ) -> T:
        """
        Run an operation under this policy.

        Args:
            operation: Zero-argument callable to run
            on_failure: Called with (attempt, error, will_retry) after
                each failed attempt

        Returns:
            The operation's return value
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except Exception as e:
                if not self.retryable(e):
                    raise
                will_retry = attempt < self.max_attempts
                if on_failure:
                    on_failure(attempt, e, will_retry)
                if not will_retry:
                    raise
                self._sleep(self.delay)
