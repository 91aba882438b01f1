"""
Cancellation Context

Thread-safe, one-way stop signal shared between the synchronizer, its
workers and whoever drives it.

Author: JobSync Project
License: MIT
"""

from threading import Event
from typing import Optional


class CancellationContext:
    """
    Monotonic cancellation flag.

    Moves from running to cancel-requested exactly once and never resets.
    """

    def __init__(self):
        self._event = Event()

    def cancel(self):
        """Request cancellation. Safe to call repeatedly from any thread."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until cancellation is requested or the timeout elapses.

        Returns:
            True if cancellation was requested
        """
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "cancel_requested" if self.is_cancelled() else "running"
        return f"CancellationContext({state})"
