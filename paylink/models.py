from dataclasses import dataclass
from datetime import datetime


# fmt: off
@dataclass(frozen=True)
class ShortLinkModel:
    token: str                          # Opaque identifier used in /p/<token>
    target: str                         # Absolute URL the token redirects to
    expires_at: datetime | None = None  # TTL as Python datetime, after which the mapping is gone


@dataclass(frozen=True)
class CheckoutSessionModel:
    id: str                             # Provider session id (cs_test_..., cs_live_...)
    url: str                            # Provider-hosted checkout page
    idempotency_key: str                # order-<order id>-<amount>
    expires_at: datetime | None = None  # When the provider stops accepting payment


@dataclass(frozen=True)
class CheckoutLink:
    url: str                            # Link handed to the customer (short when available)
    long_url: str                       # Provider-hosted checkout page
    session_id: str
    expires_at: datetime | None = None
    shortened: bool = False
# fmt: on
