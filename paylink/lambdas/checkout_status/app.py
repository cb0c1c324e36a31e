import logging
from typing import Any

from paylink.clients.stripe_checkout import CheckoutGateway
from paylink.exceptions import ConfigurationError, UpstreamError
from paylink.utils.config import cached_settings
from paylink.utils.helpers import guarantee_500_response
from paylink.utils.responses import json_response, response_400, response_500
from paylink.lambdas.checkout_status.constants import MISSING_CS, STATUS_LOOKUP_FAILED, STATUS_LOOKUP_SUCCESS


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Report the payment status of a checkout session (called from the success page)

    HTTP responses:
        200: {ok, orderId, amount, currency, payment_status, status}
        400: missing `cs` query parameter, or Stripe couldn't return the session
        500: configuration error

    Example:
        >>> event = {'queryStringParameters': {'cs': 'cs_test_a1B2'}}
        >>> json.loads(lambda_handler(event, None)['body'])['payment_status']
        'paid'
    """
    # 0- Get application's settings
    try:
        settings = cached_settings()
    except ConfigurationError as e:
        logger.exception('Invalid configuration. Responding with 500.')
        return response_500(error_code=e.error_code)

    # 1- Extract checkout session id from the query string
    session_id = (event.get('queryStringParameters') or {}).get('cs')
    if not session_id:
        logger.info('Missing "cs" in query string. Responding with 400.', extra={'event': MISSING_CS})
        return response_400(MISSING_CS, allow_origin=settings.cors_allow_origin)

    # 2- Look the session up
    try:
        session = CheckoutGateway(settings).retrieve_session(session_id)
    except UpstreamError as e:
        logger.warning('Checkout session lookup failed. Responding with 400.', extra={'event': STATUS_LOOKUP_FAILED, 'sessionId': session_id})
        return response_400(str(e), allow_origin=settings.cors_allow_origin)

    logger.info('Checkout session looked up.', extra={'event': STATUS_LOOKUP_SUCCESS, 'sessionId': session_id})
    return json_response(
        200,
        {
            'ok': True,
            'orderId': session.client_reference_id,
            'amount': session.amount_total,
            'currency': session.currency,
            'payment_status': session.payment_status,  # 'paid' | 'unpaid' | 'no_payment_required'
            'status': session.status,  # 'complete' | 'open' | 'expired'
        },
        allow_origin=settings.cors_allow_origin,
    )
