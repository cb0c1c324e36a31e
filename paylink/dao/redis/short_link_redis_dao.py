"""Data Access Object (DAO) implementation for managing short links in Redis

This module provides a Redis-based implementation of ShortLinkBaseDAO.

Responsibilities:
    - Insert token -> target mappings with SET NX EX (never overwrite a live token);
    - Retrieve mappings together with their remaining TTL;
    - Translate Redis connectivity failures into DataStoreError.

Example:
    >>> from paylink.models import ShortLinkModel
    >>> from paylink.dao.redis import ShortLinkRedisDAO

    >>> dao = ShortLinkRedisDAO(redis_url='redis://localhost:6379/0', prefix='paylink:dev')
    >>> link = ShortLinkModel(token='Xy3_k9QaPz', target='https://checkout.stripe.com/c/pay/cs_test_abc')
    >>> dao.insert(link, ttl=3600)
    <ShortLinkRedisDAO>

    >>> dao.get('Xy3_k9QaPz').target
    'https://checkout.stripe.com/c/pay/cs_test_abc'
"""

from datetime import datetime, timedelta, UTC

from beartype import beartype

from paylink.models import ShortLinkModel
from paylink.dao.base import ShortLinkBaseDAO
from paylink.dao.redis.mixins import RedisClientMixin
from paylink.dao.redis.helpers import handle_redis_connection_error
from paylink.dao.exceptions import ShortLinkAlreadyExistsError, ShortLinkNotFoundError


class ShortLinkRedisDAO(RedisClientMixin, ShortLinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short link mappings

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, short_link: ShortLinkModel, ttl: int, **kwargs) -> 'ShortLinkRedisDAO':
        """Insert a short link mapping into Redis

        A single `SET <key> <target> NX EX <ttl>` is issued, so the existence
        check and the write are atomic. Two concurrent issuers that draw the
        same token can't both succeed.

        Args:
            short_link (ShortLinkModel):
                Mapping to store.
            ttl (int):
                Lifetime in seconds. Must be positive.

        Returns:
            ShortLinkRedisDAO: self (for method chaining)

        Raises:
            ValueError:
                If ttl is not positive.
            ShortLinkAlreadyExistsError:
                If the token is still live in Redis.
            DataStoreError:
                If Redis is unreachable or rejects the command.
        """
        if ttl <= 0:
            raise ValueError(f'TTL must be a positive number of seconds (given value: {ttl}).')

        link_key = self.keys.link_key(short_link.token)
        if not self.redis.set(link_key, short_link.target, ex=ttl, nx=True):
            raise ShortLinkAlreadyExistsError(f"Short link with token '{short_link.token}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, token: str, **kwargs) -> ShortLinkModel:
        """Retrieve a stored short link mapping by token

        Fetches the target and its remaining TTL in a single Redis transaction.

        Raises:
            ShortLinkNotFoundError:
                If the token doesn't exist (never issued or already expired).
            DataStoreError:
                If Redis connectivity issues occur.
        """
        link_key = self.keys.link_key(token)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(link_key)
            pipe.ttl(link_key)
            target, ttl = pipe.execute()

        if target is None:
            raise ShortLinkNotFoundError(f"Short link with token '{token}' not found.")

        # TTL is -1 for keys without expiry; those never come from insert()
        expires_at = datetime.now(UTC) + timedelta(seconds=ttl) if ttl is not None and ttl >= 0 else None
        return ShortLinkModel(token=token, target=target, expires_at=expires_at)
