"""WooCommerce order REST client

Talks to the WooCommerce REST API v3 with consumer key/secret query
authentication.

Example:
    >>> orders = OrdersClient(settings)
    >>> orders.get_order(1001)['status']
    'pending'
    >>> orders.update_status(1001, 'processing')['status']
    'processing'
"""

import logging
from typing import Optional

import requests

from paylink.exceptions import UpstreamError
from paylink.types import Order
from paylink.utils.config import Settings


logger = logging.getLogger(__name__)

PROVIDER = 'woocommerce'


class OrdersClient:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f'{self.settings.wc_base_url}/wp-json/wc/v3{path}'

    def _auth(self) -> dict[str, str]:
        return {
            'consumer_key': self.settings.wc_consumer_key,
            'consumer_secret': self.settings.wc_consumer_secret,
        }

    def _request(self, method: str, order_id: str | int, **kwargs) -> Order:
        try:
            response = self.session.request(
                method,
                self._url(f'/orders/{order_id}'),
                params=self._auth(),
                timeout=self.settings.http_timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise UpstreamError(f'Woo {method} {order_id} failed: {e}', provider=PROVIDER) from e

        if not response.ok:
            raise UpstreamError(
                f'Woo {method} {order_id} failed: {response.status_code} {response.text[:200]}',
                provider=PROVIDER,
                code=response.status_code,
            )
        return response.json()

    def get_order(self, order_id: str | int) -> Order:
        """Fetch an order by id

        Raises:
            UpstreamError: On transport errors or non-2xx responses.
        """
        return self._request('GET', order_id)

    def update_status(self, order_id: str | int, status: str) -> Order:
        """Set an order's status field

        Raises:
            UpstreamError: On transport errors or non-2xx responses.
        """
        order = self._request('PUT', order_id, json={'status': status})
        logger.info('Updated order status.', extra={'orderId': str(order_id), 'status': status})
        return order
