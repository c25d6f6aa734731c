"""In-process read-through cache of short link records

The redirect path reads every record through this cache. Misses are coalesced
per code (one Persistence Port read no matter how many concurrent callers) and
a background sweeper drops entries whose snapshot is older than the TTL.

Responsibilities:
    - Serve hits under a shared (read) lock
    - Fill misses once per code, and only after a successful fetch
    - Keep entries coherent with writes done through the service (put/update/invalidate)
    - Count clicks on cached snapshots without touching the data store
    - Sweep entries whose last refresh is older than the TTL

Consistency:
    A snapshot is refreshed when it is loaded, put or updated. Clicks bump the
    cached counter but do not refresh the snapshot. A fill whose code was
    written or invalidated while the fetch was in flight is returned to its
    callers but not cached, so a write can never be overwritten by an older read.
    Fills for requests whose deadline expired are not cached either.

Example:
    >>> with RedirectCache(dao, ttl_seconds=43_200, sweep_interval_seconds=7_200) as cache:
    ...     cache.resolve('abc123').original_url
    'https://example.com/blog/article-123'
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, UTC
from collections.abc import Callable

from shortlinks.cache.rwlock import ReadWriteLock
from shortlinks.cache.single_flight import SingleFlight
from shortlinks.constants import TTL, Defaults, CACHE_HIT, CACHE_MISS, CACHE_SWEEP
from shortlinks.dao.base import ShortLinkBaseDAO
from shortlinks.dao.exceptions import DeadlineExceededError
from shortlinks.models import ShortLinkRecord
from shortlinks.utils.deadline import Deadline


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    record: ShortLinkRecord
    last_refreshed: datetime


class RedirectCache:
    """Read-through cache in front of a ShortLinkBaseDAO

    Args:
        dao (ShortLinkBaseDAO):
            Persistence Port used to fill misses.
        ttl_seconds (float):
            Entries whose snapshot is older than this are removed by sweep().
        sweep_interval_seconds (float):
            Pause between two background sweeps (see start()).
        max_entries (int):
            Size bound. When full, the least recently refreshed entry is evicted.

    Attributes:
        _entries (OrderedDict[str, CacheEntry]):
            Entries ordered by last refresh, oldest first.
        _loading (set[str]):
            Codes with a fill in flight.
        _stale (set[str]):
            Codes written or invalidated while their fill was in flight.
    """

    def __init__(
        self,
        dao: ShortLinkBaseDAO,
        ttl_seconds: float = TTL.CACHE_ENTRY,
        sweep_interval_seconds: float = TTL.SWEEP_INTERVAL,
        max_entries: int = Defaults.MAX_CACHE_ENTRIES,
    ):
        if ttl_seconds <= 0 or sweep_interval_seconds <= 0 or max_entries <= 0:
            raise ValueError('ttl_seconds, sweep_interval_seconds and max_entries must be positive.')

        self.dao = dao
        self.ttl = timedelta(seconds=ttl_seconds)
        self.sweep_interval = sweep_interval_seconds
        self.max_entries = max_entries

        self._lock = ReadWriteLock()
        self._flights = SingleFlight()
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._loading: set[str] = set()
        self._stale: set[str] = set()

        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, code: str) -> bool:
        with self._lock.read():
            return code in self._entries

    def __enter__(self) -> 'RedirectCache':
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def peek(self, code: str) -> ShortLinkRecord | None:
        """Return the cached snapshot for code without filling on miss."""
        with self._lock.read():
            entry = self._entries.get(code)
            return None if entry is None else entry.record

    def resolve(self, code: str, deadline: Deadline | None = None) -> ShortLinkRecord:
        """Return the record for code, reading through to the DAO on a miss.

        Concurrent misses for the same code share a single DAO read. Disabled
        records are returned (and cached) like any other; refusing them is up
        to the caller.

        Raises:
            ShortLinkNotFoundError:
                If the code does not exist (nothing is cached).
            DataStoreError:
                If the DAO read fails (nothing is cached).
            DeadlineExceededError:
                If the deadline expires before the record is available.
        """
        record = self.peek(code)
        if record is not None:
            logger.debug('Cache hit for short code %s.', code, extra={'code': code, 'event': CACHE_HIT})
            return record

        logger.debug('Cache miss for short code %s.', code, extra={'code': code, 'event': CACHE_MISS})
        timeout = None if deadline is None else deadline.remaining()
        try:
            record, _ = self._flights.do(code, lambda: self._load(code, deadline), timeout=timeout)
        except DeadlineExceededError:
            # The shared fetch may have run under another caller's deadline
            if deadline is not None and deadline.expired:
                raise
            record, _ = self._flights.do(code, lambda: self._load(code, deadline), timeout=timeout)
        return record

    def _load(self, code: str, deadline: Deadline | None) -> ShortLinkRecord:
        with self._lock.write():
            # Filled while this caller was waiting to lead
            entry = self._entries.get(code)
            if entry is not None:
                return entry.record
            self._loading.add(code)
            self._stale.discard(code)

        try:
            record = self.dao.get(code, deadline=deadline)
        except BaseException:
            with self._lock.write():
                self._loading.discard(code)
                self._stale.discard(code)
            raise

        with self._lock.write():
            self._loading.discard(code)
            stale = code in self._stale
            self._stale.discard(code)

            if stale or (deadline is not None and deadline.expired):
                return record
            entry = self._entries.get(code)
            if entry is not None:
                return entry.record
            try:
                self._store(record)
            except MemoryError:
                logger.warning('Could not cache short code %s, serving it uncached.', code, extra={'code': code})
        return record

    def _store(self, record: ShortLinkRecord) -> None:
        # Caller holds the write lock
        if record.code not in self._entries:
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
        self._entries[record.code] = CacheEntry(record=record, last_refreshed=datetime.now(UTC))
        self._entries.move_to_end(record.code)

    def _mark_stale(self, code: str) -> None:
        # Caller holds the write lock
        if code in self._loading:
            self._stale.add(code)

    def put(self, record: ShortLinkRecord) -> None:
        """Write a fresh snapshot through to the cache."""
        with self._lock.write():
            self._mark_stale(record.code)
            self._store(record)

    def put_if_absent(self, record: ShortLinkRecord) -> ShortLinkRecord:
        """Cache record unless code is already cached, and return the cached snapshot.

        A stored record can lag behind the cached one by the clicks still
        waiting in the click queue, so an existing entry always wins.
        """
        with self._lock.write():
            entry = self._entries.get(record.code)
            if entry is not None:
                return entry.record
            self._store(record)
            return record

    def update(self, code: str, mutator: Callable[[ShortLinkRecord], ShortLinkRecord]) -> bool:
        """Apply mutator to the cached snapshot of code, if any.

        Returns:
            bool: True if an entry was updated, False if code is not cached.
        """
        with self._lock.write():
            self._mark_stale(code)
            entry = self._entries.get(code)
            if entry is None:
                return False
            entry.record = mutator(entry.record)
            entry.last_refreshed = datetime.now(UTC)
            self._entries.move_to_end(code)
            return True

    def record_hit(self, code: str) -> bool:
        """Increment the click counter of the cached snapshot of code, if any."""
        with self._lock.write():
            entry = self._entries.get(code)
            if entry is None:
                return False
            entry.record = replace(entry.record, clicks=entry.record.clicks + 1)
            return True

    def invalidate(self, code: str) -> bool:
        """Drop code from the cache. Returns True if it was cached."""
        with self._lock.write():
            self._mark_stale(code)
            return self._entries.pop(code, None) is not None

    def sweep(self, now: datetime | None = None) -> int:
        """Remove every entry whose snapshot is older than the TTL.

        Expired codes are collected under the read lock and removed in one short
        write section, so readers are only blocked for the removal itself.

        Returns:
            int: number of entries removed
        """
        now = now or datetime.now(UTC)
        cutoff = now - self.ttl

        with self._lock.read():
            expired = []
            for code, entry in self._entries.items():
                if entry.last_refreshed > cutoff:
                    break
                expired.append(code)

        removed = 0
        if expired:
            with self._lock.write():
                for code in expired:
                    entry = self._entries.get(code)
                    # Refreshed between the two sections
                    if entry is not None and entry.last_refreshed <= cutoff:
                        del self._entries[code]
                        removed += 1

        logger.info(
            'Swept %s expired entries from the redirect cache.',
            removed,
            extra={'removed': removed, 'event': CACHE_SWEEP},
        )
        return removed

    def start(self) -> None:
        """Start the background sweeper thread (no-op if already running)."""
        if self._sweeper is not None:
            return
        self._stop.clear()
        self._sweeper = threading.Thread(target=self._sweep_forever, name='redirect-cache-sweeper', daemon=True)
        self._sweeper.start()

    def close(self, timeout: float | None = None) -> None:
        """Stop the background sweeper thread and wait for it to exit."""
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout)
            self._sweeper = None

    def _sweep_forever(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.exception('Redirect cache sweep failed.', extra={'event': CACHE_SWEEP})
