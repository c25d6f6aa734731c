"""Unit tests for SingleFlight call coalescing.

Test coverage includes:

1. Coalescing
   - Ensures concurrent calls for one key run the function once and share its result.
   - Ensures calls for different keys run independently.

2. Failure propagation
   - Ensures the leader's exception reaches every follower and the key is released.
   - Ensures followers time out with DeadlineExceededError.
"""

import time
import threading

import pytest

from shortlinks.cache import SingleFlight
from shortlinks.dao.exceptions import DeadlineExceededError


def _run_concurrently(target, n):
    threads = [threading.Thread(target=target) for _ in range(n)]
    for t in threads:
        t.start()
    return threads


# -------------------------------
# 1. Coalescing
# -------------------------------


def test_concurrent_calls_share_one_execution():
    """Ensure N concurrent callers trigger exactly one call."""
    flights = SingleFlight()
    release = threading.Event()
    calls = []
    results = []

    def lookup():
        calls.append(1)
        release.wait(5)
        return 'record'

    def caller():
        results.append(flights.do('abc123', lookup))

    threads = _run_concurrently(caller, 1)
    while not flights.in_flight('abc123'):
        pass
    threads += _run_concurrently(caller, 9)
    time.sleep(0.2)  # let followers reach do()
    release.set()
    for t in threads:
        t.join(5)

    assert len(calls) == 1
    assert [value for value, _ in results] == ['record'] * 10
    assert sorted(shared for _, shared in results) == [False] + [True] * 9
    assert not flights.in_flight('abc123')


def test_different_keys_do_not_coalesce():
    """Ensure distinct keys each run their own call."""
    flights = SingleFlight()

    assert flights.do('abc123', lambda: 1) == (1, False)
    assert flights.do('def456', lambda: 2) == (2, False)


# -------------------------------
# 2. Failure propagation
# -------------------------------


def test_leader_exception_reaches_followers():
    """Ensure every waiting caller sees the leader's exception."""
    flights = SingleFlight()
    release = threading.Event()
    errors = []

    def lookup():
        release.wait(5)
        raise KeyError('abc123')

    def caller():
        try:
            flights.do('abc123', lookup)
        except KeyError as e:
            errors.append(e)

    threads = _run_concurrently(caller, 1)
    while not flights.in_flight('abc123'):
        pass
    threads += _run_concurrently(caller, 4)
    time.sleep(0.2)  # let followers reach do()
    release.set()
    for t in threads:
        t.join(5)

    assert len(errors) == 5
    assert not flights.in_flight('abc123')
    assert flights.do('abc123', lambda: 'retried') == ('retried', False)


def test_follower_timeout():
    """Ensure a follower gives up with DeadlineExceededError after its timeout."""
    flights = SingleFlight()
    release = threading.Event()

    leader = _run_concurrently(lambda: flights.do('abc123', lambda: release.wait(5)), 1)
    while not flights.in_flight('abc123'):
        pass

    with pytest.raises(DeadlineExceededError):
        flights.do('abc123', lambda: 'never', timeout=0.05)

    release.set()
    leader[0].join(5)
