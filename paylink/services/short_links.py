"""Short link issuance and resolution.

Turns long, provider-hosted checkout URLs into short, human-relayable tokens
and reverses the mapping on demand. Only targets on the trusted payment host
are accepted, so the public /p/<token> redirector can't be abused as an open
redirect.

Classes:
    ShortLinkService:
        issue(target, ttl) -> str | None
        resolve(token) -> str | None

Functions:
    build_short_link_service(settings) -> ShortLinkService

Example:
    >>> service = build_short_link_service(settings)
    >>> token = service.issue('https://checkout.stripe.com/c/pay/cs_test_abc', 3600)
    >>> service.resolve(token)
    'https://checkout.stripe.com/c/pay/cs_test_abc'
"""

import logging
from datetime import datetime, timedelta, UTC
from collections.abc import Callable

from paylink.constants import ShortLinkDefaults
from paylink.dao.base import ShortLinkBaseDAO
from paylink.dao.redis import ShortLinkRedisDAO
from paylink.dao.exceptions import DataStoreError, ShortLinkAlreadyExistsError, ShortLinkNotFoundError
from paylink.exceptions import TokenCollisionError, UnsafeTargetError
from paylink.models import ShortLinkModel
from paylink.utils.config import Settings, app_prefix
from paylink.utils.shortener import generate_token, is_allowed_target, is_well_formed_token


logger = logging.getLogger(__name__)


class ShortLinkService:
    """Issue and resolve short link tokens on top of a ShortLinkBaseDAO.

    A service without a DAO is "unavailable": issue() and resolve() both
    return None so callers fall back to the long URL.

    Args:
        dao (ShortLinkBaseDAO | None):
            Backing store, or None when no store is configured.
        token_factory (Callable[[], str]):
            Token generator. Defaults to generate_token().
        max_attempts (int):
            Number of tokens tried before giving up with TokenCollisionError.
    """

    def __init__(
        self,
        dao: ShortLinkBaseDAO | None,
        token_factory: Callable[[], str] = generate_token,
        max_attempts: int = ShortLinkDefaults.MAX_ATTEMPTS,
    ):
        self.dao = dao
        self.token_factory = token_factory
        self.max_attempts = max_attempts

    @property
    def available(self) -> bool:
        return self.dao is not None

    def issue(self, target: str, ttl: int) -> str | None:
        """Store a fresh token -> target mapping and return the token.

        Args:
            target (str):
                Absolute URL on the trusted payment host.
            ttl (int):
                Lifetime of the mapping in seconds (> 0).

        Returns:
            str | None:
                The accepted token, or None if no store is configured.

        Raises:
            UnsafeTargetError:
                If target isn't on the allow-list. Nothing is written.
            ValueError:
                If ttl is not positive.
            TokenCollisionError:
                If every attempted token was already taken.
            DataStoreError:
                If the store fails. Callers should fall back to the long URL.
        """
        if not self.available:
            return None
        if not is_allowed_target(target):
            raise UnsafeTargetError(f'Refusing to shorten a link to an untrusted host: {target!r}')
        if ttl <= 0:
            raise ValueError(f'TTL must be a positive number of seconds (given value: {ttl}).')

        for attempt in range(1, self.max_attempts + 1):
            token = self.token_factory()
            short_link = ShortLinkModel(token=token, target=target, expires_at=datetime.now(UTC) + timedelta(seconds=ttl))
            try:
                self.dao.insert(short_link, ttl)
            except ShortLinkAlreadyExistsError:
                logger.warning('Short link token collision. Retrying with a new token.', extra={'attempt': attempt})
                continue
            logger.info('Issued short link.', extra={'token': token, 'ttl': ttl})
            return token

        raise TokenCollisionError(f'No free short link token found after {self.max_attempts} attempts')

    def resolve(self, token: str) -> str | None:
        """Return the target URL for token, or None if unknown or expired.

        Raises:
            DataStoreError:
                If the store fails.
        """
        if not self.available or not is_well_formed_token(token):
            return None
        try:
            return self.dao.get(token).target
        except ShortLinkNotFoundError:
            return None


def build_short_link_service(settings: Settings) -> ShortLinkService:
    """Wire a ShortLinkService to Redis, or an unavailable one when Redis isn't usable"""
    if not settings.short_links_enabled:
        logger.debug('REDIS_URL is not configured. Short links are disabled.')
        return ShortLinkService(dao=None)

    try:
        dao = ShortLinkRedisDAO(redis_url=settings.redis_url, redis_timeout=settings.http_timeout, prefix=app_prefix())
    except (DataStoreError, ValueError):
        # ValueError: REDIS_URL redis-py can't parse
        logger.warning('Short link store is unusable. Short links are disabled for this invocation.', exc_info=True)
        return ShortLinkService(dao=None)
    return ShortLinkService(dao=dao)
