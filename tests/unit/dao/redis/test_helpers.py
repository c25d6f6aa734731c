"""Unit tests for the Redis DAO helpers.

Test coverage includes:
    1. handle_redis_connection_error decorator
       - Ensures the wrapped method executes and returns its result.
       - Ensures Redis connection and timeout errors are converted into DataStoreError.
       - Confirms functools.wraps preserves the original function's name and docstring.
    2. Record hash serialization
       - Ensures booleans are stored as 0/1 and timestamps as ISO strings.
       - Ensures decoded Redis hashes are parsed back into ShortLinkRecord.
    3. Click event serialization
       - Ensures click events are stored as JSON with a flattened user agent.
"""

import json
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from shortlinks.dao.redis.helpers import (
    handle_redis_connection_error,
    record_to_hash,
    hash_to_record,
    click_to_json,
    json_to_click,
)
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.models import ClickEvent, ShortLinkRecord, UserAgentSummary


class DummyDAO:
    def __init__(self):
        self.redis = MagicMock()
        self.redis.connection_pool.connection_kwargs = {
            'host': 'localhost',
            'port': 6379,
            'db': 0,
        }

    @handle_redis_connection_error
    def ping(self):
        return 'OK'

    @handle_redis_connection_error
    def fail(self, error):
        raise error


# -------------------------------
# 1. handle_redis_connection_error decorator
# -------------------------------


def test_decorator_allows_normal_execution():
    """Ensure the wrapped function executes normally when no error occurs."""
    assert DummyDAO().ping() == 'OK'


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ConnectionError('Cannot connect'),
        redis.exceptions.TimeoutError('Timeout reading from socket'),
    ],
)
def test_decorator_transforms_redis_connection_error(error):
    """Ensure Redis ConnectionError and TimeoutError are re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match="Can't connect to Redis at localhost:6379/0."):
        DummyDAO().fail(error)


def test_decorator_lets_other_errors_through():
    """Ensure non-connectivity errors are not masked."""
    with pytest.raises(KeyError):
        DummyDAO().fail(KeyError('missing'))


def test_decorator_preserves_function_metadata():
    """Ensure function name and docstring are preserved via functools.wraps."""

    @handle_redis_connection_error
    def sample_function():
        """This is a sample docstring."""
        return 'OK'

    assert sample_function.__name__ == 'sample_function'
    assert 'sample docstring' in sample_function.__doc__


# -------------------------------
# 2. Record hash serialization
# -------------------------------


def test_record_to_hash():
    """Ensure a record is flattened into Redis-friendly values."""
    record = ShortLinkRecord(
        code='abc123',
        owner_id='1.2.3.4',
        original_url='https://example.com/a',
        created_at=datetime(2025, 10, 15, 12, 0, tzinfo=UTC),
        clicks=3,
        disabled=True,
        is_guest=True,
    )

    assert record_to_hash(record) == {
        'code': 'abc123',
        'owner_id': '1.2.3.4',
        'original_url': 'https://example.com/a',
        'created_at': '2025-10-15T12:00:00+00:00',
        'clicks': 3,
        'disabled': 1,
        'is_guest': 1,
    }


def test_hash_to_record():
    """Ensure a decoded Redis hash is parsed back into a record."""
    mapping = {
        'code': 'abc123',
        'owner_id': 'jane@example.com',
        'original_url': 'https://example.com/a',
        'created_at': '2025-10-15T12:00:00+00:00',
        'clicks': '7',
        'disabled': '0',
        'is_guest': '0',
    }

    record = hash_to_record(mapping)

    assert record.code == 'abc123'
    assert record.created_at == datetime(2025, 10, 15, 12, 0, tzinfo=UTC)
    assert record.clicks == 7
    assert record.disabled is False
    assert record.is_guest is False


# -------------------------------
# 3. Click event serialization
# -------------------------------


def test_click_json_layout():
    """Ensure click events are stored as flat JSON objects."""
    click = ClickEvent(
        code='abc123',
        ip='5.6.7.8',
        user_agent=UserAgentSummary(browser='Firefox', device='Other', device_type='desktop'),
        timestamp=datetime(2025, 10, 15, 12, 0, tzinfo=UTC),
    )

    blob = click_to_json(click)

    assert json.loads(blob) == {
        'code': 'abc123',
        'ip': '5.6.7.8',
        'browser': 'Firefox',
        'device': 'Other',
        'device_type': 'desktop',
        'timestamp': '2025-10-15T12:00:00+00:00',
    }
    assert json_to_click(blob) == click
