import logging
from typing import Any

from paylink.clients.orders import OrdersClient
from paylink.clients.stripe_checkout import CheckoutGateway
from paylink.exceptions import ConfigurationError, InvalidSignatureError
from paylink.services.webhooks import handle_stripe_event
from paylink.utils.config import cached_settings
from paylink.utils.helpers import get_header, guarantee_500_response, raw_body
from paylink.utils.responses import json_response, response_500, text_response
from paylink.lambdas.stripe_webhook.constants import INVALID_SIGNATURE, WEBHOOK_HANDLER_FAILED, WEBHOOK_PROCESSED


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Receive Stripe webhooks and reconcile WooCommerce order status

    This Lambda handler follows this procedure:
    - Step 1: Verify the Stripe-Signature header against the raw request body
    - Step 2: Dispatch the verified event (paid sessions move orders to processing)
    - Step 3: Acknowledge with 200

    The body is only parsed after the signature checks out.

    HTTP responses:
        200: {received: true}
        400: signature missing or invalid (no order is touched)
        500: handler failure; Stripe retries the delivery
    """
    # 0- Get application's settings
    try:
        settings = cached_settings()
    except ConfigurationError as e:
        logger.exception('Invalid configuration. Responding with 500.')
        return response_500(error_code=e.error_code)

    # 1- Verify signature against the raw body
    try:
        stripe_event = CheckoutGateway(settings).construct_event(raw_body(event), get_header(event, 'Stripe-Signature'))
    except InvalidSignatureError as e:
        logger.warning('Webhook signature rejected. Responding with 400.', extra={'event': INVALID_SIGNATURE, 'reason': str(e)})
        return text_response(400, f'Webhook Error: {e}')

    # 2- Dispatch the event
    try:
        outcome = handle_stripe_event(stripe_event, OrdersClient(settings))
    except Exception as e:
        # Any non-2xx makes Stripe retry the delivery later
        logger.exception(
            'Webhook handler failed. Responding with 500.',
            extra={'event': WEBHOOK_HANDLER_FAILED, 'stripeEventId': getattr(stripe_event, 'id', None)},
        )
        return text_response(500, f'Webhook Error: {e}')

    # 3- Acknowledge
    logger.info(
        'Webhook processed.',
        extra={'event': WEBHOOK_PROCESSED, 'stripeEventId': getattr(stripe_event, 'id', None), 'outcome': outcome},
    )
    return json_response(200, {'received': True})
