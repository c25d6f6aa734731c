"""Request deadlines passed down to Persistence Port calls.

A Deadline is created by the caller for one inbound request and handed to every
DAO call made on behalf of that request. DAOs call `check()` before touching the
backend; the redirect cache consults `expired` before committing a fill, so an
abandoned request never leaves a cache entry behind.

Example:
    >>> deadline = Deadline.after(0.5)
    >>> deadline.expired
    False
    >>> deadline.cancel()
    >>> deadline.check()
    Traceback (most recent call last):
        ...
    shortlinks.dao.exceptions.DeadlineExceededError: Request cancelled.
"""

import time
import threading

from shortlinks.dao.exceptions import DeadlineExceededError


class Deadline:
    """Absolute point in (monotonic) time after which a request is abandoned."""

    def __init__(self, expires_at: float | None = None):
        self.expires_at = expires_at
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> 'Deadline':
        return cls(time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        if self.cancelled:
            return True
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if self.cancelled:
            return 0.0
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def check(self) -> None:
        """Raise DeadlineExceededError if the request was cancelled or ran out of time."""
        if self.cancelled:
            raise DeadlineExceededError('Request cancelled.')
        if self.expired:
            raise DeadlineExceededError('Request deadline exceeded.')


def check_deadline(deadline: Deadline | None) -> None:
    if deadline is not None:
        deadline.check()
