"""Coalescing of concurrent identical lookups

When several threads miss the cache for the same code at once, only the first
one (the leader) runs the lookup; the others (followers) block on the leader's
Future and receive the same result or the same exception.

Example:
    >>> flights = SingleFlight()
    >>> flights.do('abc123', lambda: dao.get('abc123'))
    (ShortLinkRecord(code='abc123', ...), False)
"""

import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from collections.abc import Callable
from typing import Any

from shortlinks.dao.exceptions import DeadlineExceededError


class SingleFlight:
    """Run at most one call per key at a time, sharing its outcome with concurrent callers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: dict[str, Future] = {}

    def do(self, key: str, fn: Callable[[], Any], timeout: float | None = None) -> tuple[Any, bool]:
        """Run fn() for key, or wait for the call already in flight for key.

        Args:
            key (str):
                Coalescing key (a short code).
            fn (Callable[[], Any]):
                The lookup to run when this caller is the leader.
            timeout (float | None):
                Seconds a follower waits for the leader. None waits forever.

        Returns:
            tuple[Any, bool]: (result, shared) where shared is True for followers.

        Raises:
            DeadlineExceededError:
                If a follower's timeout elapses before the leader finishes.
            Exception:
                Whatever fn() raised, for the leader and every follower.
        """
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        if not leader:
            try:
                return future.result(timeout=timeout), True
            except FutureTimeoutError as e:
                raise DeadlineExceededError(f"Timed out waiting for in-flight lookup of '{key}'.") from e

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result, False
        finally:
            with self._lock:
                self._calls.pop(key, None)

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._calls
