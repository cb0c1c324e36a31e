"""Stripe Checkout gateway

Thin wrapper over the Stripe SDK covering the three calls the service makes:
creating hosted checkout sessions, verifying webhook payloads and retrieving
sessions for the status page. Stripe failures are re-raised as UpstreamError
so handlers can branch on the error kind.

Example:
    >>> gateway = CheckoutGateway(settings)
    >>> session = gateway.create_session('1001', 5980)
    >>> session.idempotency_key
    'order-1001-5980'
"""

import time
import logging
from datetime import datetime, UTC
from urllib.parse import quote

import stripe

from paylink.constants import TTL
from paylink.exceptions import InvalidSignatureError, UpstreamError
from paylink.models import CheckoutSessionModel
from paylink.utils.config import Settings


logger = logging.getLogger(__name__)

PROVIDER = 'stripe'


def idempotency_key(order_id: str | int, amount: int) -> str:
    """Idempotency key shared by every request for the same order and amount.

    A changed amount yields a new key, so a corrected total creates a new session.
    """
    return f'order-{order_id}-{amount}'


def session_expires_at(expires_in: int | None, now: int | None = None) -> int | None:
    """Absolute expiry (unix seconds) for a session, capped at 24 hours from now"""
    if not expires_in:
        return None
    now = int(time.time()) if now is None else now
    return now + min(expires_in, TTL.ONE_DAY)


class CheckoutGateway:
    def __init__(self, settings: Settings):
        self.settings = settings

    def create_session(self, order_id: str | int, amount: int, expires_in: int | None = None) -> CheckoutSessionModel:
        """Create (or, for a repeated order+amount, reuse) a hosted checkout session

        Raises:
            UpstreamError: If Stripe rejects the request.
        """
        order = quote(str(order_id), safe='')
        params = {
            'mode': 'payment',
            'line_items': [
                {
                    'price_data': {
                        'currency': self.settings.currency,
                        'product_data': {'name': f'Order #{order_id}'},
                        'unit_amount': amount,
                    },
                    'quantity': 1,
                }
            ],
            'success_url': f'{self.settings.app_base_url}/payment/success?order={order}',
            'cancel_url': f'{self.settings.app_base_url}/payment/cancel?order={order}',
            'client_reference_id': str(order_id),
        }
        expires_at = session_expires_at(expires_in)
        if expires_at is not None:
            params['expires_at'] = expires_at

        key = idempotency_key(order_id, amount)
        try:
            session = stripe.checkout.Session.create(
                api_key=self.settings.stripe_secret_key,
                idempotency_key=key,
                **params,
            )
        except stripe.StripeError as e:
            logger.error('Stripe refused to create a checkout session.', extra={'orderId': str(order_id), 'stripeCode': e.code})
            raise UpstreamError(e.user_message or str(e), provider=PROVIDER, code=e.code) from e

        logger.info('Created checkout session.', extra={'orderId': str(order_id), 'sessionId': session.id})
        session_expiry = getattr(session, 'expires_at', None)
        return CheckoutSessionModel(
            id=session.id,
            url=session.url,
            idempotency_key=key,
            expires_at=datetime.fromtimestamp(session_expiry, tz=UTC) if session_expiry else None,
        )

    def construct_event(self, payload: bytes | str, signature: str | None) -> stripe.Event:
        """Verify a webhook payload against the endpoint secret and parse it

        Must be given the raw request body. Any re-serialization breaks the signature.

        Raises:
            InvalidSignatureError: If the signature is missing, wrong or stale,
                or the payload is not valid JSON.
        """
        if not signature:
            raise InvalidSignatureError('Missing Stripe-Signature header')
        try:
            return stripe.Webhook.construct_event(payload, signature, self.settings.stripe_webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise InvalidSignatureError(f'Webhook signature verification failed: {e.user_message or e}') from e
        except ValueError as e:
            raise InvalidSignatureError('Webhook payload is not valid JSON') from e

    def retrieve_session(self, session_id: str) -> stripe.checkout.Session:
        """Fetch a checkout session with its payment intent expanded

        Raises:
            UpstreamError: If Stripe can't return the session.
        """
        try:
            return stripe.checkout.Session.retrieve(
                session_id,
                expand=['payment_intent'],
                api_key=self.settings.stripe_secret_key,
            )
        except stripe.StripeError as e:
            raise UpstreamError(e.user_message or str(e), provider=PROVIDER, code=e.code) from e
