import logging
from typing import Any

from paylink.exceptions import ConfigurationError
from paylink.services.short_links import build_short_link_service
from paylink.utils.config import cached_settings
from paylink.utils.helpers import guarantee_500_response
from paylink.utils.responses import response_302, response_404, response_500
from paylink.lambdas.redirect_link.constants import MISSING_TOKEN, REDIRECT_SUCCESS, SHORT_LINK_NOT_FOUND


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Redirect a short link to its checkout page

    This Lambda handler follows this procedure:
    - Step 1: Extract token from request path
    - Step 2: Resolve token to its target URL
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: checkout page
        404: token missing, unknown or expired (or short links disabled)
        500: Internal server error

    Example:
        >>> event = {'pathParameters': {'token': 'Xy3_k9QaPz'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://checkout.stripe.com/c/pay/cs_test_abc'
    """
    # 0- Get application's settings
    try:
        settings = cached_settings()
    except ConfigurationError as e:
        logger.exception('Invalid configuration. Responding with 500.')
        return response_500(error_code=e.error_code)

    # 1- Extract token from request's path
    token = (event.get('pathParameters') or {}).get('token')
    if not token:
        logger.info('Missing "token" in path. Responding with 404.', extra={'event': MISSING_TOKEN})
        return response_404()

    # 2- Resolve token
    target_url = build_short_link_service(settings).resolve(token)
    if target_url is None:
        logger.info(
            'Short link not found or expired. Responding with 404.',
            extra={'token': token, 'event': SHORT_LINK_NOT_FOUND},
        )
        return response_404('Link expired or not found')

    # 3- Redirect client to target URL
    logger.info('Redirecting client to target URL. Responding with 302.', extra={'token': token, 'event': REDIRECT_SUCCESS})
    return response_302(location=target_url)
