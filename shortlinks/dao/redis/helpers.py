import json
import functools
from datetime import datetime
from typing import Any
from collections.abc import Callable

import redis

from shortlinks.models import ClickEvent, ShortLinkRecord, UserAgentSummary
from shortlinks.dao.exceptions import DataStoreError


__all__ = []


def handle_redis_connection_error[F: Callable[..., Any]](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.ConnectionError
            or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def count_for_owner(self, owner_id):
        ...     return self.redis.llen(self.keys.owner_links_key(owner_id))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            info = self.redis.connection_pool.connection_kwargs
            redis_host = info.get('host')
            redis_port = info.get('port')
            redis_db = info.get('db')
            raise DataStoreError(f"Can't connect to Redis at {redis_host}:{redis_port}/{redis_db}.") from e

    return wrapper


def record_to_hash(record: ShortLinkRecord) -> dict[str, str | int]:
    """Serialize a ShortLinkRecord into a flat Redis hash mapping."""
    return {
        'code': record.code,
        'owner_id': record.owner_id,
        'original_url': record.original_url,
        'created_at': record.created_at.isoformat(),
        'clicks': record.clicks,
        'disabled': int(record.disabled),
        'is_guest': int(record.is_guest),
    }


def hash_to_record(mapping: dict[str, str]) -> ShortLinkRecord:
    """Deserialize a Redis hash mapping (decoded responses) into a ShortLinkRecord."""
    return ShortLinkRecord(
        code=mapping['code'],
        owner_id=mapping['owner_id'],
        original_url=mapping['original_url'],
        created_at=datetime.fromisoformat(mapping['created_at']),
        clicks=int(mapping.get('clicks', 0)),
        disabled=mapping.get('disabled', '0') == '1',
        is_guest=mapping.get('is_guest', '0') == '1',
    )


def click_to_json(click: ClickEvent) -> str:
    # fmt: off
    return json.dumps({
        'code': click.code,
        'ip': click.ip,
        'browser': click.user_agent.browser,
        'device': click.user_agent.device,
        'device_type': click.user_agent.device_type,
        'timestamp': click.timestamp.isoformat(),
    })
    # fmt: on


def json_to_click(blob: str) -> ClickEvent:
    data = json.loads(blob)
    return ClickEvent(
        code=data['code'],
        ip=data['ip'],
        user_agent=UserAgentSummary(
            browser=data['browser'],
            device=data['device'],
            device_type=data['device_type'],
        ),
        timestamp=datetime.fromisoformat(data['timestamp']),
    )
