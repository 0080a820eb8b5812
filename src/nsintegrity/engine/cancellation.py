"""
Run-level cancellation for NS Integrity.

A CancellationToken is shared by the coordinator and every worker of one
audit run. It trips on an explicit cancel() or when its deadline passes.
"""

from __future__ import annotations

import threading
import time


class AuditCancelledError(Exception):
    """Raised when an audit run is cancelled or exceeds its deadline."""

    pass


class CancellationToken:
    """
    Cancellation signal with an optional deadline.

    Thread-safe: cancel() may be called from any thread, including a
    signal handler on the main thread.
    """

    def __init__(self, deadline_seconds: float | None = None) -> None:
        """
        Initialize the token.

        Args:
            deadline_seconds: Seconds from now after which the run is
                considered cancelled (None for no deadline)
        """
        self._event = threading.Event()
        self._reason = ""
        self._deadline: float | None = None
        if deadline_seconds is not None:
            self._deadline = time.monotonic() + deadline_seconds

    def cancel(self, reason: str = "audit cancelled") -> None:
        """Trip the token."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        """Check whether the token has tripped, including by deadline."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("audit deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> str:
        return self._reason

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """
        Raise if the token has tripped.

        Raises:
            AuditCancelledError: If cancelled or past the deadline
        """
        if self.cancelled:
            raise AuditCancelledError(self._reason)
