"""Checkout link orchestration

Validates payment requests, creates the hosted checkout session, swaps in a
short link when the store is available and, for the SMS flow, relays the
link to the customer's phone.

Every check on caller input runs before the first external call.
"""

import re
import math
import logging
from datetime import datetime, UTC
from typing import Any

from paylink.constants import E164_PATTERN, TTL
from paylink.clients.sms import SmsSender, compose_payment_message
from paylink.clients.stripe_checkout import CheckoutGateway
from paylink.dao.exceptions import DataStoreError
from paylink.exceptions import FeatureDisabledError, TokenCollisionError, UnsafeTargetError, ValidationError
from paylink.models import CheckoutLink, CheckoutSessionModel
from paylink.services.short_links import ShortLinkService, build_short_link_service
from paylink.utils.config import Settings
from paylink.utils.helpers import get_short_url


logger = logging.getLogger(__name__)

_E164_RE = re.compile(E164_PATTERN)


def validate_order_id(order_id: Any) -> str:
    if order_id is None or not str(order_id).strip():
        raise ValidationError('MISSING_ORDER_ID')
    return str(order_id).strip()


def validate_amount(amount: Any) -> int:
    # bool is an int subclass; True must not pass as 1 yen
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError('INVALID_AMOUNT_JPY_INTEGER_REQUIRED')
    return amount


def validate_phone(phone: Any) -> str:
    if not isinstance(phone, str) or not _E164_RE.fullmatch(phone):
        raise ValidationError('INVALID_E164_PHONE')
    return phone


def validate_expires_in(expires_in: Any) -> int | None:
    if expires_in is None:
        return None
    if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in <= 0:
        raise ValidationError('INVALID_EXPIRES_IN_SEC')
    return expires_in


def link_ttl(session: CheckoutSessionModel, now: datetime | None = None) -> int:
    """Short link lifetime: whatever remains of the checkout session, 24h by default"""
    if session.expires_at is None:
        return TTL.DEFAULT_SHORT_LINK
    now = now or datetime.now(UTC)
    return max(1, math.ceil((session.expires_at - now).total_seconds()))


class CheckoutService:
    """Create checkout links and optionally relay them by SMS.

    Args:
        gateway (CheckoutGateway): Payment provider.
        short_links (ShortLinkService): Short link issuer (may be unavailable).
        sms (SmsSender | None): SMS relay, None when SMS isn't configured.
        store_name (str): Branding used in SMS messages.
    """

    def __init__(self, gateway: CheckoutGateway, short_links: ShortLinkService, sms: SmsSender | None = None, store_name: str = 'Online Store'):
        self.gateway = gateway
        self.short_links = short_links
        self.sms = sms
        self.store_name = store_name

    def _shorten(self, session: CheckoutSessionModel, event: dict[str, Any]) -> str | None:
        try:
            token = self.short_links.issue(session.url, link_ttl(session))
        except (DataStoreError, TokenCollisionError, UnsafeTargetError, ValueError):
            logger.warning(
                'Short link issuance failed. Falling back to the long checkout URL.',
                exc_info=True,
                extra={'sessionId': session.id},
            )
            return None
        return None if token is None else get_short_url(token, event)

    def create_link(self, order_id: Any, amount: Any, event: dict[str, Any], expires_in: Any = None) -> CheckoutLink:
        """Create a checkout session and return the link to hand out

        Raises:
            ValidationError: On bad order id, amount or expiry.
            UpstreamError: If the payment provider fails.
        """
        order_id = validate_order_id(order_id)
        amount = validate_amount(amount)
        expires_in = validate_expires_in(expires_in)
        return self._create_link(order_id, amount, event, expires_in)

    def _create_link(self, order_id: str, amount: int, event: dict[str, Any], expires_in: int | None) -> CheckoutLink:
        session = self.gateway.create_session(order_id, amount, expires_in)
        short_url = self._shorten(session, event)
        return CheckoutLink(
            url=short_url or session.url,
            long_url=session.url,
            session_id=session.id,
            expires_at=session.expires_at,
            shortened=short_url is not None,
        )

    def send_payment_link(self, order_id: Any, amount: Any, phone: Any, event: dict[str, Any], expires_in: Any = None) -> CheckoutLink:
        """Create a checkout link and text it to the customer

        Raises:
            ValidationError: On bad order id, amount, phone or expiry.
            FeatureDisabledError: If SMS isn't configured.
            RecipientNotVerifiedError: If the SMS account can't reach the number.
            UpstreamError: If the payment or SMS provider fails.
        """
        order_id = validate_order_id(order_id)
        amount = validate_amount(amount)
        phone = validate_phone(phone)
        expires_in = validate_expires_in(expires_in)
        if self.sms is None:
            raise FeatureDisabledError('SMS is not configured (set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN)')

        link = self._create_link(order_id, amount, event, expires_in)
        valid_hours = math.ceil(min(expires_in or TTL.ONE_DAY, TTL.ONE_DAY) / 3600)
        body = compose_payment_message(self.store_name, order_id, amount, link.url, valid_hours=valid_hours)
        self.sms.send(phone, body)
        logger.info('Payment link sent.', extra={'orderId': order_id, 'sessionId': link.session_id, 'shortened': link.shortened})
        return link


def build_checkout_service(settings: Settings, with_sms: bool = False) -> CheckoutService:
    """Wire a CheckoutService from settings. SMS is attached only when asked for and configured"""
    sms = SmsSender(settings) if with_sms and settings.sms_enabled else None
    return CheckoutService(
        gateway=CheckoutGateway(settings),
        short_links=build_short_link_service(settings),
        sms=sms,
        store_name=settings.store_name,
    )
