"""Unit tests for checkout link orchestration

Test coverage includes:

1. Input validation
   - Order id, amount, phone and expiry rules.
   - Invalid input never reaches the payment provider.

2. create_link()
   - Short link handed out when the store is available.
   - Long URL fallback when shortening is unavailable or fails,
     including commands refused by Redis (OOM, READONLY).

3. send_payment_link()
   - SMS carries the link and total.
   - SMS disabled fails before any provider call.

4. link_ttl()
"""

from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
import redis
from freezegun import freeze_time

from paylink.clients.sms import SmsSender
from paylink.clients.stripe_checkout import CheckoutGateway
from paylink.dao.redis import ShortLinkRedisDAO
from paylink.dao.exceptions import DataStoreError
from paylink.exceptions import FeatureDisabledError, RecipientNotVerifiedError, TokenCollisionError, UnsafeTargetError, ValidationError
from paylink.models import CheckoutSessionModel
from paylink.services.checkout import (
    CheckoutService,
    build_checkout_service,
    link_ttl,
    validate_amount,
    validate_expires_in,
    validate_order_id,
    validate_phone,
)
from paylink.services.short_links import ShortLinkService


LONG_URL = 'https://checkout.stripe.com/c/pay/cs_test_abc'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def checkout_session():
    return CheckoutSessionModel(
        id='cs_test_abc',
        url=LONG_URL,
        idempotency_key='order-1001-5980',
        expires_at=datetime(2025, 10, 16, 12, 0, tzinfo=UTC),
    )


@pytest.fixture
def gateway(checkout_session):
    _gateway = MagicMock(spec=CheckoutGateway)
    _gateway.create_session.return_value = checkout_session
    return _gateway


@pytest.fixture
def short_links():
    _short_links = MagicMock(spec=ShortLinkService)
    _short_links.issue.return_value = 'Xy3_k9QaPz'
    return _short_links


@pytest.fixture
def sms():
    _sms = MagicMock(spec=SmsSender)
    _sms.send.return_value = 'SM123'
    return _sms


@pytest.fixture
def service(gateway, short_links, sms):
    return CheckoutService(gateway=gateway, short_links=short_links, sms=sms, store_name='Nico Hub')


# -------------------------------
# 1. Input validation
# -------------------------------


@pytest.mark.parametrize('order_id, expected', [('1001', '1001'), (1001, '1001'), (' 42 ', '42')])
def test_validate_order_id(order_id, expected):
    assert validate_order_id(order_id) == expected


@pytest.mark.parametrize('order_id', [None, '', '   '])
def test_validate_order_id_missing(order_id):
    with pytest.raises(ValidationError, match='MISSING_ORDER_ID'):
        validate_order_id(order_id)


@pytest.mark.parametrize('amount', [0, -1, 59.8, '5980', None, True])
def test_validate_amount_invalid(amount):
    with pytest.raises(ValidationError, match='INVALID_AMOUNT_JPY_INTEGER_REQUIRED'):
        validate_amount(amount)


def test_validate_amount():
    assert validate_amount(5980) == 5980


@pytest.mark.parametrize('phone', ['+819012345678', '+12025550123'])
def test_validate_phone(phone):
    assert validate_phone(phone) == phone


@pytest.mark.parametrize(
    'phone',
    ['09012345678', '+81-90-1234-5678', '+1234567', '+1234567890123456', '+819012345678\n', '+８１９０１２３４５６７８', None, 819012345678],
)
def test_validate_phone_invalid(phone):
    with pytest.raises(ValidationError, match='INVALID_E164_PHONE'):
        validate_phone(phone)


@pytest.mark.parametrize('expires_in, expected', [(None, None), (3600, 3600)])
def test_validate_expires_in(expires_in, expected):
    assert validate_expires_in(expires_in) == expected


@pytest.mark.parametrize('expires_in', [0, -60, '3600', 1.5, False])
def test_validate_expires_in_invalid(expires_in):
    with pytest.raises(ValidationError, match='INVALID_EXPIRES_IN_SEC'):
        validate_expires_in(expires_in)


@pytest.mark.parametrize(
    'kwargs',
    [
        {'order_id': None, 'amount': 5980},
        {'order_id': '1001', 'amount': 0},
        {'order_id': '1001', 'amount': 5980, 'expires_in': -1},
    ],
)
def test_create_link_validates_before_calling_provider(service, gateway, apigw_event, kwargs):
    with pytest.raises(ValidationError):
        service.create_link(event=apigw_event, **kwargs)
    gateway.create_session.assert_not_called()


# -------------------------------
# 2. create_link()
# -------------------------------


@freeze_time('2025-10-16 11:00:00')
def test_create_link_with_short_link(service, gateway, short_links, apigw_event):
    link = service.create_link('1001', 5980, apigw_event)

    assert link.url == 'https://pay.example.jp/p/Xy3_k9QaPz'
    assert link.long_url == LONG_URL
    assert link.session_id == 'cs_test_abc'
    assert link.shortened
    gateway.create_session.assert_called_once_with('1001', 5980, None)
    short_links.issue.assert_called_once_with(LONG_URL, 3600)  # whatever remains of the session


def test_create_link_passes_expiry(service, gateway, apigw_event):
    service.create_link('1001', 5980, apigw_event, expires_in=1800)
    gateway.create_session.assert_called_once_with('1001', 5980, 1800)


def test_create_link_without_store(service, short_links, apigw_event):
    short_links.issue.return_value = None

    link = service.create_link('1001', 5980, apigw_event)

    assert link.url == LONG_URL
    assert not link.shortened


@pytest.mark.parametrize(
    'error',
    [
        DataStoreError("Can't connect to Redis at redis.test:6379/0."),
        TokenCollisionError('No free short link token found after 5 attempts'),
        UnsafeTargetError('untrusted'),
    ],
)
def test_create_link_falls_back_to_long_url(service, short_links, apigw_event, error):
    short_links.issue.side_effect = error

    link = service.create_link('1001', 5980, apigw_event)

    assert link.url == LONG_URL
    assert not link.shortened


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ResponseError("OOM command not allowed when used memory > 'maxmemory'."),
        redis.exceptions.ReadOnlyError("You can't write against a read only replica."),
    ],
)
def test_send_payment_link_falls_back_when_redis_refuses_write(gateway, sms, redis_client, app_prefix, apigw_event, error):
    redis_client.set.side_effect = error
    short_links = ShortLinkService(dao=ShortLinkRedisDAO(redis_client=redis_client, prefix=app_prefix))
    service = CheckoutService(gateway=gateway, short_links=short_links, sms=sms, store_name='Nico Hub')

    link = service.send_payment_link('1001', 5980, '+819012345678', apigw_event)

    assert link.url == LONG_URL
    assert not link.shortened
    redis_client.set.assert_called_once()
    assert LONG_URL in sms.send.call_args.args[1]


# -------------------------------
# 3. send_payment_link()
# -------------------------------


def test_send_payment_link(service, sms, apigw_event):
    link = service.send_payment_link('1001', 5980, '+819012345678', apigw_event)

    assert link.url == 'https://pay.example.jp/p/Xy3_k9QaPz'
    sms.send.assert_called_once_with(
        '+819012345678',
        '[Nico Hub] Payment link for order #1001\n'
        'Total: ¥5,980 (tax included)\n'
        'https://pay.example.jp/p/Xy3_k9QaPz\n'
        'This link expires in 24 hours.',
    )


@pytest.mark.parametrize('expires_in, hours', [(3600, 1), (5400, 2), (172800, 24)])
def test_send_payment_link_message_reflects_expiry(service, sms, apigw_event, expires_in, hours):
    service.send_payment_link('1001', 5980, '+819012345678', apigw_event, expires_in=expires_in)

    body = sms.send.call_args.args[1]
    assert body.endswith(f'This link expires in {hours} hours.')


def test_send_payment_link_invalid_phone(service, gateway, sms, apigw_event):
    with pytest.raises(ValidationError, match='INVALID_E164_PHONE'):
        service.send_payment_link('1001', 5980, '090-1234-5678', apigw_event)
    gateway.create_session.assert_not_called()
    sms.send.assert_not_called()


def test_send_payment_link_without_sms(gateway, short_links, apigw_event):
    service = CheckoutService(gateway=gateway, short_links=short_links, sms=None)

    with pytest.raises(FeatureDisabledError):
        service.send_payment_link('1001', 5980, '+819012345678', apigw_event)
    gateway.create_session.assert_not_called()


def test_send_payment_link_recipient_not_verified(service, sms, apigw_event):
    sms.send.side_effect = RecipientNotVerifiedError('not verified', provider='twilio', code=21608)

    with pytest.raises(RecipientNotVerifiedError):
        service.send_payment_link('1001', 5980, '+819012345678', apigw_event)


# -------------------------------
# 4. link_ttl() and wiring
# -------------------------------


def test_link_ttl_without_session_expiry(checkout_session):
    session = CheckoutSessionModel(id='cs_1', url=LONG_URL, idempotency_key='order-1-1')
    assert link_ttl(session) == 86400


def test_link_ttl_remaining_lifetime(checkout_session):
    now = checkout_session.expires_at - timedelta(minutes=30)
    assert link_ttl(checkout_session, now=now) == 1800


def test_link_ttl_never_below_one_second(checkout_session):
    now = checkout_session.expires_at + timedelta(minutes=5)
    assert link_ttl(checkout_session, now=now) == 1


def test_build_checkout_service(settings, monkeypatch):
    monkeypatch.setattr('paylink.services.checkout.build_short_link_service', lambda s: ShortLinkService(dao=None))
    monkeypatch.setattr('paylink.services.checkout.SmsSender', lambda s: 'sms-sender')

    assert build_checkout_service(settings).sms is None
    assert build_checkout_service(settings, with_sms=True).sms == 'sms-sender'
    assert build_checkout_service(settings, with_sms=True).store_name == 'Nico Hub'
