from typing import cast
from unittest.mock import MagicMock

import pytest
import redis

from paylink.types import LambdaContext, LambdaEvent
from paylink.utils.config import Settings, cached_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are cached per container; every test starts from a cold container."""
    cached_settings.cache_clear()
    yield
    cached_settings.cache_clear()


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def settings() -> Settings:
    # fmt: off
    return Settings(
        stripe_secret_key='sk_test_123',
        stripe_webhook_secret='whsec_test_123',
        app_base_url='https://shop.example.jp',
        wc_base_url='https://shop.example.jp',
        wc_consumer_key='ck_test',
        wc_consumer_secret='cs_test',
        twilio_account_sid='AC123',
        twilio_auth_token='twilio-token',
        twilio_messaging_service_sid='MG123',
        redis_url='redis://redis.test:6379/0',
        store_name='Nico Hub',
    )
    # fmt: on


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    client.set.return_value = True
    client.get.return_value = None
    return client


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'paylink-test'})


@pytest.fixture
def apigw_event() -> LambdaEvent:
    return cast(LambdaEvent, {
        'httpMethod': 'GET',
        'headers': {},
        'requestContext': {'domainName': 'pay.example.jp', 'stage': 'Prod'},
    })
