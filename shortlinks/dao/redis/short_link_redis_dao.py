"""Data Access Object (DAO) implementation for managing short links in Redis

This module provides a Redis-based implementation of ShortLinkBaseDAO for CRUD-like
operations with ShortLinkRecord instances and their click events.

Data layout (all keys namespaced by RedisKeySchema):
    - <prefix>:links:<code>             HASH   record fields (see helpers.record_to_hash)
    - <prefix>:links:<code>:clicks      LIST   JSON click events, oldest first
    - <prefix>:owners:<owner>:links     LIST   codes created by an owner, oldest first

Classes:
    ShortLinkRedisDAO:
        DAO for storing and retrieving ShortLinkRecord in a Redis datastore.

Example:
    >>> dao = ShortLinkRedisDAO(prefix='shortlinks:dev')
    >>> dao.create('1.2.3.4', 'https://example.com/page', 'abc123', is_guest=True)
    ShortLinkRecord(code='abc123', owner_id='1.2.3.4', ...)
    >>> dao.get('abc123').original_url
    'https://example.com/page'
    >>> dao.count_for_owner('1.2.3.4')
    1
"""

from datetime import datetime, UTC
from typing import Optional

import redis
from beartype import beartype

from shortlinks.models import ClickEvent, ShortLinkRecord
from shortlinks.dao.base import AccountBaseDAO, ShortLinkBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import (
    handle_redis_connection_error,
    record_to_hash,
    hash_to_record,
    click_to_json,
    json_to_click,
)
from shortlinks.dao.exceptions import ShortLinkAlreadyExistsError, ShortLinkNotFoundError, UserDoesNotExistError
from shortlinks.utils.deadline import check_deadline


class ShortLinkRedisDAO(RedisClientMixin, ShortLinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short link records

    This class implements the ShortLinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
        accounts (AccountBaseDAO | None):
            Account lookup used to reject records for unknown non-guest owners.
    """

    def __init__(self, *args, accounts: Optional[AccountBaseDAO] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.accounts = accounts

    @handle_redis_connection_error
    @beartype
    def create(self, owner_id: str, original_url: str, code: str, is_guest: bool, **kwargs) -> ShortLinkRecord:
        """Insert a short link record into Redis

        The code is claimed with an optimistic transaction: the link key is WATCHed,
        checked for existence and written together with the owner's link list in one
        MULTI/EXEC. If another client writes the same key in between, EXEC fails with
        a WatchError and the claim is reported as a duplicate.

        Raises:
            ShortLinkAlreadyExistsError:
                If a record with the same code already exists.
            UserDoesNotExistError:
                If is_guest is False and the owner has no account.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        check_deadline(kwargs.get('deadline'))
        if not is_guest and self.accounts is not None and not self.accounts.exists(owner_id, **kwargs):
            raise UserDoesNotExistError(f"User with ID '{owner_id}' does not exist.")

        record = ShortLinkRecord(
            code=code,
            owner_id=owner_id,
            original_url=original_url,
            created_at=datetime.now(UTC),
            is_guest=is_guest,
        )
        link_key = self.keys.link_key(code)
        owner_links_key = self.keys.owner_links_key(owner_id)

        try:
            with self.redis.pipeline() as pipe:
                pipe.watch(link_key)
                if pipe.exists(link_key):
                    raise ShortLinkAlreadyExistsError(f"Short link with code '{code}' already exists.")
                pipe.multi()
                pipe.hset(link_key, mapping=record_to_hash(record))
                pipe.rpush(owner_links_key, code)
                pipe.execute()
        except redis.exceptions.WatchError as e:
            raise ShortLinkAlreadyExistsError(f"Short link with code '{code}' already exists.") from e

        return record

    @handle_redis_connection_error
    @beartype
    def get(self, code: str, **kwargs) -> ShortLinkRecord:
        check_deadline(kwargs.get('deadline'))
        mapping = self.redis.hgetall(self.keys.link_key(code))
        if not mapping:
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        return hash_to_record(mapping)

    @handle_redis_connection_error
    @beartype
    def list_for_owner(self, owner_id: str, **kwargs) -> list[ShortLinkRecord]:
        check_deadline(kwargs.get('deadline'))
        codes = self.redis.lrange(self.keys.owner_links_key(owner_id), 0, -1)
        if not codes:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for code in codes:
                pipe.hgetall(self.keys.link_key(code))
            mappings = pipe.execute()

        return [hash_to_record(mapping) for mapping in mappings if mapping]

    @handle_redis_connection_error
    @beartype
    def update(self, code: str, original_url: str | None = None, click: ClickEvent | None = None, **kwargs) -> None:
        """Replace the original URL and/or append a click event

        The click counter increment and the click event append run in the same
        MULTI/EXEC so the counter never drifts from the event log.
        """
        check_deadline(kwargs.get('deadline'))
        link_key = self.keys.link_key(code)
        if not self.redis.exists(link_key):
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        if original_url is None and click is None:
            return

        with self.redis.pipeline(transaction=True) as pipe:
            if original_url is not None:
                pipe.hset(link_key, 'original_url', original_url)
            if click is not None:
                pipe.hincrby(link_key, 'clicks', 1)
                pipe.rpush(self.keys.link_clicks_key(code), click_to_json(click))
            pipe.execute()

    @handle_redis_connection_error
    @beartype
    def set_disabled(self, code: str, disabled: bool, **kwargs) -> None:
        check_deadline(kwargs.get('deadline'))
        link_key = self.keys.link_key(code)
        if not self.redis.exists(link_key):
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        self.redis.hset(link_key, 'disabled', int(disabled))

    @handle_redis_connection_error
    @beartype
    def count_for_owner(self, owner_id: str, **kwargs) -> int:
        check_deadline(kwargs.get('deadline'))
        return int(self.redis.llen(self.keys.owner_links_key(owner_id)))

    @handle_redis_connection_error
    @beartype
    def clicks(self, code: str, **kwargs) -> list[ClickEvent]:
        check_deadline(kwargs.get('deadline'))
        if not self.redis.exists(self.keys.link_key(code)):
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        return [json_to_click(blob) for blob in self.redis.lrange(self.keys.link_clicks_key(code), 0, -1)]
