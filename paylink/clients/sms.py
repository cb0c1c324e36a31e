"""Twilio SMS gateway

Example:
    >>> sender = SmsSender(settings)
    >>> body = compose_payment_message('Nico Hub', '1001', 5980, 'https://pay.example.jp/p/Xy3_k9QaPz')
    >>> sender.send('+819012345678', body)
    'SM0123456789abcdef0123456789abcdef'
"""

import logging

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from paylink.constants import TWILIO_UNVERIFIED_RECIPIENT
from paylink.exceptions import FeatureDisabledError, RecipientNotVerifiedError, UpstreamError
from paylink.utils.config import Settings


logger = logging.getLogger(__name__)

PROVIDER = 'twilio'


def compose_payment_message(store_name: str, order_id: str | int, amount: int, url: str, valid_hours: int = 24) -> str:
    return '\n'.join(
        [
            f'[{store_name}] Payment link for order #{order_id}',
            f'Total: ¥{amount:,} (tax included)',
            url,
            f'This link expires in {valid_hours} hours.',
        ]
    )


class SmsSender:
    """Send text messages through Twilio

    Messages go through the messaging service when TWILIO_MESSAGING_SERVICE_SID
    is configured, otherwise from the TWILIO_FROM number.

    Raises:
        FeatureDisabledError: If Twilio credentials are not configured.
    """

    def __init__(self, settings: Settings, client: Client | None = None):
        if not settings.sms_enabled:
            raise FeatureDisabledError('SMS is not configured (set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN)')
        self.settings = settings
        self.client = client or Client(settings.twilio_account_sid, settings.twilio_auth_token)

    def _sender_params(self) -> dict[str, str]:
        if self.settings.twilio_messaging_service_sid:
            return {'messaging_service_sid': self.settings.twilio_messaging_service_sid}
        return {'from_': self.settings.twilio_from}

    def send(self, to: str, body: str) -> str:
        """Send body to an E.164 phone number and return the message SID

        Raises:
            RecipientNotVerifiedError: If a trial account targets an unverified number.
            UpstreamError: On any other Twilio failure.
        """
        try:
            message = self.client.messages.create(to=to, body=body, **self._sender_params())
        except TwilioRestException as e:
            if e.code == TWILIO_UNVERIFIED_RECIPIENT:
                raise RecipientNotVerifiedError(
                    f'Twilio trial restriction: recipient number is not verified (code {TWILIO_UNVERIFIED_RECIPIENT})',
                    provider=PROVIDER,
                    code=e.code,
                ) from e
            logger.error('Twilio refused to send the message.', extra={'twilioCode': e.code, 'twilioStatus': e.status})
            raise UpstreamError(e.msg or 'Twilio request failed', provider=PROVIDER, code=e.code) from e

        logger.info('Sent SMS.', extra={'messageSid': message.sid})
        return message.sid
