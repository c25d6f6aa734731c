"""Unit tests for the reader-preferring ReadWriteLock.

Test coverage includes:

1. Shared reads
   - Ensures many readers hold the lock at the same time.

2. Exclusive writes
   - Ensures a writer waits for active readers and blocks new readers.
"""

import threading

from shortlinks.cache import ReadWriteLock


# -------------------------------
# 1. Shared reads
# -------------------------------


def test_readers_share_the_lock():
    """Ensure concurrent readers do not block each other."""
    lock = ReadWriteLock()
    barrier = threading.Barrier(4, timeout=5)

    def read():
        with lock.read():
            # Every reader must be inside the read section to pass the barrier
            barrier.wait()

    threads = [threading.Thread(target=read) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert not barrier.broken


# -------------------------------
# 2. Exclusive writes
# -------------------------------


def test_writer_waits_for_readers():
    """Ensure a writer only enters once the last reader has left."""
    lock = ReadWriteLock()
    reader_inside = threading.Event()
    release_reader = threading.Event()
    writer_done = threading.Event()

    def read():
        with lock.read():
            reader_inside.set()
            release_reader.wait(5)

    def write():
        with lock.write():
            writer_done.set()

    reader = threading.Thread(target=read)
    reader.start()
    reader_inside.wait(5)

    writer = threading.Thread(target=write)
    writer.start()
    assert not writer_done.wait(0.1)

    release_reader.set()
    assert writer_done.wait(5)
    reader.join(5)
    writer.join(5)


def test_writer_blocks_readers():
    """Ensure readers wait while a writer holds the lock."""
    lock = ReadWriteLock()
    reader_done = threading.Event()

    def read():
        with lock.read():
            reader_done.set()

    with lock.write():
        reader = threading.Thread(target=read)
        reader.start()
        assert not reader_done.wait(0.1)

    assert reader_done.wait(5)
    reader.join(5)
