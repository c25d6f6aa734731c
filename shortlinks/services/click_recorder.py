"""Deferred, best-effort click accounting

Clicks are visible immediately in the redirect cache and written to the data
store later by a single worker thread, so a redirect never waits on the write.

Delivery is at most once: each event gets exactly one write attempt. Events are
dropped (with a log record) when the queue is full or the write fails.

Example:
    >>> recorder = ClickRecorder(dao, cache, queue_size=10_000)
    >>> recorder.start()
    >>> recorder.record_click('abc123', ClickEvent(code='abc123', ip='1.2.3.4'))
    True
    >>> recorder.close()  # drains pending writes
    >>> len(recorder.history('abc123'))
    1
"""

import queue
import logging
import threading

from shortlinks.cache import RedirectCache
from shortlinks.constants import Defaults, CLICK_DROPPED, CLICK_WRITE_FAILED
from shortlinks.dao.base import ShortLinkBaseDAO
from shortlinks.models import ClickEvent


logger = logging.getLogger(__name__)

_STOP = object()


class ClickRecorder:
    """Bounded queue + worker thread for durable click writes

    Args:
        dao (ShortLinkBaseDAO):
            Persistence Port receiving update(code, click=event) calls.
        cache (RedirectCache):
            Cache whose click counter is bumped synchronously.
        queue_size (int):
            Maximum number of pending writes.
    """

    def __init__(self, dao: ShortLinkBaseDAO, cache: RedirectCache, queue_size: int = Defaults.CLICK_QUEUE_SIZE):
        self.dao = dao
        self.cache = cache
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def record_click(self, code: str, event: ClickEvent) -> bool:
        """Count a click in the cache and schedule its durable write.

        Returns:
            bool: True if the write was queued, False if it was dropped.
        """
        self.cache.record_hit(code)
        try:
            self._queue.put_nowait((code, event))
        except queue.Full:
            logger.warning(
                'Click queue full, dropping click for short code %s.',
                code,
                extra={'code': code, 'event': CLICK_DROPPED},
            )
            return False
        return True

    def history(self, code: str, **kwargs) -> list[ClickEvent]:
        """Return the durably recorded clicks of a code, oldest first."""
        return self.dao.clicks(code, **kwargs)

    def start(self) -> None:
        with self._lock:
            if self._worker is not None:
                return
            self._worker = threading.Thread(target=self._run, name='click-recorder', daemon=True)
            self._worker.start()

    def close(self, timeout: float | None = None) -> None:
        """Write every queued click, then stop the worker.

        The stop marker is queued behind pending clicks and is allowed to block
        while the queue is full, so nothing accepted before close() is lost.
        """
        with self._lock:
            worker, self._worker = self._worker, None
        if worker is None:
            return
        self._queue.put(_STOP)
        worker.join(timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write(*item)
            finally:
                self._queue.task_done()

    def _write(self, code: str, event: ClickEvent) -> None:
        try:
            self.dao.update(code, click=event)
        except Exception:
            logger.exception(
                'Failed to record click for short code %s.',
                code,
                extra={'code': code, 'event': CLICK_WRITE_FAILED},
            )
