import logging
from typing import Any

from paylink.exceptions import ConfigurationError, PaylinkError
from paylink.services.checkout import build_checkout_service
from paylink.utils.config import cached_settings
from paylink.utils.helpers import guarantee_500_response, parse_json_body
from paylink.utils.responses import json_response, response_204, response_400, response_500
from paylink.lambdas.send_payment.constants import CONFIGURATION_ERROR, PAYMENT_LINK_REJECTED, PAYMENT_LINK_SENT


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Create a checkout link for an order and text it to the customer

    This Lambda handler follows this procedure:
    - Step 1: Extract order id (path) and amount/phone (JSON body)
    - Step 2: Validate input, create checkout session, shorten link, send SMS
    - Step 3: Respond with the link that was sent

    Request:
        POST /api/orders/{orderId}/send-payment
        {"finalTotalJpy": 5980, "phoneE164": "+819012345678", "expiresInSec": 3600}

    HTTP responses:
        200: {ok: true, url}
        400: {ok: false, error, errorCode} (validation or provider errors)
        500: configuration errors (e.g. SMS not configured)

    Example:
        >>> event = {'pathParameters': {'orderId': '1001'}, 'body': '{"finalTotalJpy": 5980, "phoneE164": "+819012345678"}'}
        >>> lambda_handler(event, None)['statusCode']
        200
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

    # 1- Extract order id and payment details
    order_id = (event.get('pathParameters') or {}).get('orderId')
    try:
        body = parse_json_body(event)

        # 2- Create the checkout link and relay it by SMS
        service = build_checkout_service(settings, with_sms=True)
        link = service.send_payment_link(
            order_id,
            body.get('finalTotalJpy'),
            body.get('phoneE164'),
            event,
            expires_in=body.get('expiresInSec'),
        )
    except ConfigurationError as e:
        logger.error('Payment link can\'t be sent with the current configuration. Responding with 500.', extra={'event': CONFIGURATION_ERROR, 'orderId': order_id})
        return response_500(str(e), error_code=e.error_code, **cors)
    except PaylinkError as e:
        logger.warning(
            'Payment link rejected. Responding with 400.',
            extra={'event': PAYMENT_LINK_REJECTED, 'orderId': order_id, 'error': e.error_code, 'reason': str(e)},
        )
        return response_400(str(e) or 'FAILED', error_code=e.error_code, **cors)

    # 3- Return the link that was sent
    logger.info('Payment link sent. Responding with 200.', extra={'event': PAYMENT_LINK_SENT, 'orderId': order_id})
    return json_response(200, {'ok': True, 'url': link.url}, **cors)
