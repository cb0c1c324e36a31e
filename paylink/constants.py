from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Upper bound for a checkout session's lifetime (Stripe caps sessions at 24h)
    ONE_DAY = 86_400  # 60 * 60 * 24
    # Short link lifetime when the checkout session carries no explicit expiry
    DEFAULT_SHORT_LINK = ONE_DAY


class ShortLinkDefaults:
    """Short link token generation parameters."""

    TOKEN_LENGTH = 10  # 60 bits of entropy with the base64url alphabet
    MAX_TOKEN_LENGTH = 64
    MAX_ATTEMPTS = 5
    PATH_PREFIX = 'p'


# Short links may only redirect to Stripe-hosted payment pages (matched in full)
ALLOWED_TARGET_PATTERN = r'https://(checkout|buy|pay)\.stripe\.com/.+'

# Phone numbers must be E.164 formatted (matched in full, ASCII digits only)
E164_PATTERN = r'\+[0-9]{8,15}'

# Twilio: trial accounts can only message verified recipients
TWILIO_UNVERIFIED_RECIPIENT = 21608

# WooCommerce order statuses
ORDER_STATUS_PROCESSING = 'processing'
ORDER_STATUS_COMPLETED = 'completed'
PAID_ORDER_STATUSES = frozenset({ORDER_STATUS_PROCESSING, ORDER_STATUS_COMPLETED})


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        APP_BASE_URL = 'APP_BASE_URL'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        API_KEY = 'PAYLINK_API_KEY'
        CORS_ALLOW_ORIGIN = 'CORS_ALLOW_ORIGIN'
        STORE_NAME = 'STORE_NAME'
        CURRENCY = 'CHECKOUT_CURRENCY'
        HTTP_TIMEOUT = 'HTTP_TIMEOUT'
        # Secrets Manager name holding a JSON object with any of the variables below
        SECRET = 'PAYLINK_SECRET'  # noqa: S105

    class Stripe(StrEnum):
        SECRET_KEY = 'STRIPE_SECRET_KEY'  # noqa: S105
        WEBHOOK_SECRET = 'STRIPE_WEBHOOK_SECRET'  # noqa: S105

    class Twilio(StrEnum):
        ACCOUNT_SID = 'TWILIO_ACCOUNT_SID'
        AUTH_TOKEN = 'TWILIO_AUTH_TOKEN'  # noqa: S105
        MESSAGING_SERVICE_SID = 'TWILIO_MESSAGING_SERVICE_SID'
        FROM = 'TWILIO_FROM'

    class WooCommerce(StrEnum):
        BASE_URL = 'WC_BASE_URL'
        CONSUMER_KEY = 'WC_CONSUMER_KEY'
        CONSUMER_SECRET = 'WC_CONSUMER_SECRET'  # noqa: S105

    class Redis(StrEnum):
        URL = 'REDIS_URL'

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
