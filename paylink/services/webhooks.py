"""Stripe webhook event dispatch

Reconciles order status in WooCommerce from verified Stripe events. The
event must already have passed signature verification.
"""

import logging
from typing import Any

from paylink.clients.orders import OrdersClient
from paylink.constants import ORDER_STATUS_PROCESSING, PAID_ORDER_STATUSES


logger = logging.getLogger(__name__)

# Event types
SESSION_COMPLETED = 'checkout.session.completed'
SESSION_EXPIRED = 'checkout.session.expired'

# Outcomes
ORDER_PROCESSING = 'ORDER_PROCESSING'
ORDER_ALREADY_PAID = 'ORDER_ALREADY_PAID'
SESSION_SKIPPED = 'SESSION_SKIPPED'
SESSION_EXPIRED_LOGGED = 'SESSION_EXPIRED'
EVENT_IGNORED = 'EVENT_IGNORED'


def parse_order_id(value: Any) -> int | None:
    try:
        order_id = int(str(value))
    except (TypeError, ValueError):
        return None
    return order_id if order_id > 0 else None


def handle_session_completed(session: Any, orders: OrdersClient) -> str:
    order_id = parse_order_id(getattr(session, 'client_reference_id', None))
    if order_id is None:
        logger.info('Completed session carries no order id. Skipping.', extra={'sessionId': getattr(session, 'id', None)})
        return SESSION_SKIPPED
    if getattr(session, 'mode', None) != 'payment' or getattr(session, 'payment_status', None) != 'paid':
        logger.info('Completed session is not a paid payment. Skipping.', extra={'orderId': order_id})
        return SESSION_SKIPPED

    # Stripe retries deliveries; an order already moved on must not be touched again
    current = orders.get_order(order_id)
    status = str(current.get('status') or '')
    if status in PAID_ORDER_STATUSES:
        logger.info('Order already %s.', status, extra={'orderId': order_id})
        return ORDER_ALREADY_PAID

    orders.update_status(order_id, ORDER_STATUS_PROCESSING)
    logger.info('Order moved to processing.', extra={'orderId': order_id, 'previousStatus': status})
    return ORDER_PROCESSING


def handle_stripe_event(event: Any, orders: OrdersClient) -> str:
    """Dispatch a verified Stripe event by type and return the outcome code

    Raises:
        UpstreamError: If the order API fails (the caller answers 500 so Stripe retries).
    """
    event_type = getattr(event, 'type', None)
    session = event.data.object if event_type in (SESSION_COMPLETED, SESSION_EXPIRED) else None

    if event_type == SESSION_COMPLETED:
        return handle_session_completed(session, orders)
    if event_type == SESSION_EXPIRED:
        logger.info('Checkout session expired.', extra={'orderId': getattr(session, 'client_reference_id', None)})
        return SESSION_EXPIRED_LOGGED

    logger.debug('Ignoring Stripe event.', extra={'stripeEventType': event_type})
    return EVENT_IGNORED
