from paylink.dao.redis.redis_key_schema import RedisKeySchema
from paylink.dao.redis.mixins import RedisClientMixin
from paylink.dao.redis.short_link_redis_dao import ShortLinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortLinkRedisDAO',
]
