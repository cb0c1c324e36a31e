"""Short link token utilities

Functions:
    generate_token(length=10) -> str:
        Draw a random, URL-safe token from a cryptographically strong source.
    is_allowed_target(url) -> bool:
        Check a redirect target against the trusted payment host allow-list.
    is_well_formed_token(token) -> bool:
        Check that a token could have been produced by generate_token().

Example:
    >>> from paylink.utils.shortener import generate_token, is_allowed_target
    >>> generate_token()
    'q3V_x9LbT0'
    >>> is_allowed_target('https://checkout.stripe.com/c/pay/cs_test_abc')
    True
    >>> is_allowed_target('https://evil.example.com/phish')
    False
"""

import re
import math
import secrets

from paylink.constants import ALLOWED_TARGET_PATTERN, ShortLinkDefaults


_ALLOWED_TARGET_RE = re.compile(ALLOWED_TARGET_PATTERN, re.IGNORECASE)
_TOKEN_RE = re.compile(r'[A-Za-z0-9_-]+')


def generate_token(length: int = ShortLinkDefaults.TOKEN_LENGTH) -> str:
    """Generate a random base64url token of exactly `length` characters.

    Tokens are drawn from `secrets` rather than derived from a counter, so
    live tokens can't be enumerated by guessing neighbours.

    Raises:
        ValueError: If length is not within 1..MAX_TOKEN_LENGTH.
    """
    if not 0 < length <= ShortLinkDefaults.MAX_TOKEN_LENGTH:
        raise ValueError(f'Token length must be between 1 and {ShortLinkDefaults.MAX_TOKEN_LENGTH} (given value: {length}).')

    # Every byte yields 4/3 characters, so this always covers `length`
    nbytes = math.ceil(length * 6 / 8)
    return secrets.token_urlsafe(nbytes)[:length]


def is_allowed_target(url: str) -> bool:
    return isinstance(url, str) and _ALLOWED_TARGET_RE.fullmatch(url) is not None


def is_well_formed_token(token: str) -> bool:
    # fmt: off
    return isinstance(token, str) \
        and 0 < len(token) <= ShortLinkDefaults.MAX_TOKEN_LENGTH \
        and _TOKEN_RE.fullmatch(token) is not None
    # fmt: on
