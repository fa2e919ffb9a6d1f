"""
Cancellation
============

Deadline and cancellation token threaded through the file-reading stages
(relevance scoring and dependency expansion). The default token never
expires.
"""

from __future__ import annotations

import threading
import time


class CancellationToken:
    """Cooperative cancellation with an optional wall-clock deadline."""

    def __init__(self, deadline_seconds: float | None = None):
        """
        Args:
            deadline_seconds: Seconds from now after which the token counts as
                cancelled. None means no deadline.
        """
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    @classmethod
    def none(cls) -> CancellationToken:
        """A token that is only cancelled explicitly."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())
