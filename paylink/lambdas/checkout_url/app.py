import hmac
import logging
from typing import Any

from paylink.exceptions import ConfigurationError, InvalidApiKeyError, PaylinkError
from paylink.services.checkout import build_checkout_service
from paylink.utils.config import Settings, cached_settings
from paylink.utils.helpers import get_header, guarantee_500_response, parse_json_body
from paylink.utils.responses import json_response, response_204, response_400, response_401, response_500
from paylink.lambdas.checkout_url.constants import CHECKOUT_URL_CREATED, CHECKOUT_URL_REJECTED, CONFIGURATION_ERROR, INVALID_API_KEY


logger = logging.getLogger(__name__)


def authorize(event: dict, settings: Settings) -> None:
    """Check the x-api-key header when the deployment configures an API key

    Raises:
        InvalidApiKeyError: If the key is missing or wrong.
    """
    if not settings.api_key_required:
        return
    provided = get_header(event, 'x-api-key') or ''
    if not hmac.compare_digest(provided.encode('utf-8'), settings.api_key.encode('utf-8')):
        raise InvalidApiKeyError('Invalid or missing API key')


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Create a checkout link for an order and return it to the caller

    Used by back-office tools that deliver the link through their own channel.

    Request:
        POST /api/orders/{orderId}/checkout-url
        x-api-key: <PAYLINK_API_KEY>   (only when configured)
        {"finalTotalJpy": 5980, "expiresInSec": 3600}

    HTTP responses:
        200: {ok: true, url, longUrl, sessionId, expiresAt, shortened}
        400: {ok: false, error, errorCode}
        401: missing or invalid API key
        500: configuration errors
    """
    # 0- Get application's settings
    try:
        settings = cached_settings()
    except ConfigurationError as e:
        logger.exception('Invalid configuration. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500(error_code=e.error_code)

    cors = {'allow_origin': settings.cors_allow_origin}
    if event.get('httpMethod') == 'OPTIONS':
        return response_204(**cors)

    # 1- Authorize the caller
    try:
        authorize(event, settings)
    except InvalidApiKeyError as e:
        logger.warning('Rejected request with invalid API key. Responding with 401.', extra={'event': INVALID_API_KEY})
        return response_401(str(e), error_code=e.error_code, **cors)

    # 2- Create the checkout link
    order_id = (event.get('pathParameters') or {}).get('orderId')
    try:
        body = parse_json_body(event)
        link = build_checkout_service(settings).create_link(
            order_id,
            body.get('finalTotalJpy'),
            event,
            expires_in=body.get('expiresInSec'),
        )
    except ConfigurationError as e:
        logger.error('Checkout link can\'t be created with the current configuration. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500(str(e), error_code=e.error_code, **cors)
    except PaylinkError as e:
        logger.warning(
            'Checkout link rejected. Responding with 400.',
            extra={'event': CHECKOUT_URL_REJECTED, 'orderId': order_id, 'error': e.error_code, 'reason': str(e)},
        )
        return response_400(str(e) or 'FAILED', error_code=e.error_code, **cors)

    # 3- Return the link
    logger.info('Checkout link created. Responding with 200.', extra={'event': CHECKOUT_URL_CREATED, 'orderId': order_id})
    return json_response(
        200,
        {
            'ok': True,
            'url': link.url,
            'longUrl': link.long_url,
            'sessionId': link.session_id,
            'expiresAt': link.expires_at.isoformat() if link.expires_at else None,
            'shortened': link.shortened,
        },
        **cors,
    )
