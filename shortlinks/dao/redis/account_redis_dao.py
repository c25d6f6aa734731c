from beartype import beartype

from shortlinks.dao.base import AccountBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error
from shortlinks.utils.deadline import check_deadline


class AccountRedisDAO(RedisClientMixin, AccountBaseDAO):
    """Account lookup against the '<prefix>:accounts:<email>' keys written by the account service."""

    @handle_redis_connection_error
    @beartype
    def exists(self, owner_id: str, **kwargs) -> bool:
        check_deadline(kwargs.get('deadline'))
        return bool(self.redis.exists(self.keys.account_key(owner_id)))
