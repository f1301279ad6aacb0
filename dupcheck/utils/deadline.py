"""Caller-supplied deadline and cancellation signal for a single check."""

import threading
import time
from typing import Optional


class Deadline:
    """A time budget that can also be cancelled explicitly.

    Safe to share between the event loop and ranking worker threads.

    Usage::

        deadline = Deadline.after(0.5)
        result = await detector.check_script(code, project_id, deadline=deadline)
        if result.partial:
            ...
    """

    def __init__(self, expires_at: Optional[float] = None):
        self._expires_at = expires_at
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        """Create a deadline ``seconds`` from now."""
        return cls(time.monotonic() + seconds)

    @classmethod
    def never(cls) -> "Deadline":
        """Create a deadline that only expires when cancelled."""
        return cls(None)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def expired(self) -> bool:
        """Return True once cancelled or past the expiry time."""
        if self._cancelled.is_set():
            return True
        if self._expires_at is None:
            return False
        return time.monotonic() >= self._expires_at

    def remaining(self) -> Optional[float]:
        """Seconds left, ``0.0`` when expired, ``None`` when unbounded."""
        if self._cancelled.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())
