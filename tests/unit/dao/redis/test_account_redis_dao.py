"""Unit tests for the AccountRedisDAO

Test coverage includes:

1. Account lookup
   - Ensures exists() checks the namespaced account key.
   - Confirms Redis connection errors raise DataStoreError.
   - Ensures invalid types raise BeartypeCallHintParamViolation.
"""

from unittest.mock import MagicMock

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from shortlinks.dao.exceptions import DataStoreError
from shortlinks.dao.redis import AccountRedisDAO


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def redis_client():
    _redis_client = MagicMock(spec=redis.Redis)
    _redis_client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0},
    )
    return _redis_client


@pytest.fixture
def dao(redis_client):
    return AccountRedisDAO(redis_client=redis_client, prefix='testapp:test')


# -------------------------------
# 1. Account lookup
# -------------------------------


@pytest.mark.parametrize('stored, expected', [(1, True), (0, False)])
def test_exists(dao, redis_client, stored, expected):
    """Ensure exists() reflects the presence of the account key."""
    redis_client.exists.return_value = stored

    assert dao.exists('jane@example.com') is expected
    redis_client.exists.assert_called_once_with('testapp:test:accounts:jane@example.com')


def test_exists_with_redis_connection_error(dao, redis_client):
    """Ensure Redis connection errors raise DataStoreError."""
    redis_client.exists.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis:6379/0."):
        dao.exists('jane@example.com')


def test_exists_with_invalid_type(dao):
    """Ensure invalid owner id types raise a Beartype error."""
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.exists(42)
