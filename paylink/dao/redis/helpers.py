import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from paylink.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def describe_connection(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise
            any redis.exceptions.RedisError, e.g. a lost connection or an OOM reply.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on any Redis failure.

    Example:
        >>> @handle_redis_connection_error
        ... def get_target(self, token):
        ...     return self.redis.get(token)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_connection(self.redis)}.") from e
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f"Redis at {describe_connection(self.redis)} rejected the command: {e}") from e

    return wrapper
