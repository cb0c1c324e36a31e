"""Helper utilities for AWS lambda functions.

Functions:
    base_url() -> str
        Extract correct public base URL from API Gateway event
    get_short_url() -> str
        Get string representation of the public short link for a given token
    get_header() -> str | None
        Case-insensitive lookup of an HTTP request header
    parse_json_body() -> dict
        Decode the JSON object in a request body
    raw_body() -> bytes
        Request body bytes exactly as received (for signature checks)
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into a JSON 500 response

Example:
    Typical usage inside a Lambda handler:

        >>> from paylink.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.ap-northeast-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.ap-northeast-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import os
import base64
import json
import logging
import functools
from typing import Any
from collections.abc import Callable

from paylink.constants import ShortLinkDefaults, UNKNOWN_INTERNAL_SERVER_ERROR
from paylink.exceptions import MissingEnvironmentVariableError, ValidationError
from paylink.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    Works with both custom and default AWS API Gateway domains.
    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://pay.example.jp"
             - "https://abc123.execute-api.ap-northeast-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(token: str, event: dict[str, Any]) -> str:
    """Get string representation of the public short link

    Args:
        token (str): short link token
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: short link, e.g. 'https://pay.example.jp/p/Xy3_k9QaPz'
    """
    return f'{base_url(event).rstrip("/")}/{ShortLinkDefaults.PATH_PREFIX}/{token}'


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Return a request header value regardless of the header name's casing"""
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def parse_json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Decode the JSON object carried in an API Gateway event body

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        raw = base64.b64decode(raw).decode('utf-8')
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError('INVALID_JSON_BODY') from e
    if not isinstance(body, dict):
        raise ValidationError('INVALID_JSON_BODY')
    return body


def raw_body(event: dict[str, Any]) -> bytes:
    """Return the request body exactly as received, undoing API Gateway's base64 wrapping"""
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        return base64.b64decode(body)
    return body.encode('utf-8')


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('STRIPE_SECRET_KEY', 'APP_BASE_URL')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'STRIPE_SECRET_KEY', 'APP_BASE_URL'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with a JSON 500 instead of crashing the invocation

    When running locally the original exception is re-raised so it shows up
    in the SAM console.
    """

    @functools.wraps(handler)
    def wrapper(event, context):
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in lambda handler. Responding with 500.', extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR})
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps(
                    {
                        'message': 'Internal Server Error',
                        'error_code': UNKNOWN_INTERNAL_SERVER_ERROR,
                    }
                ),
            }

    return wrapper
