"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Settings validation
   - Required values, optional feature flags, half-configured features.

3. Secrets Manager resolution
   - Ensures resolve_secret() parses the JSON secret.
   - Ensures malformed secrets raise BadConfigurationError.

4. load_settings() precedence
   - Environment variables win over the secret.
"""

import os
import json
from unittest.mock import MagicMock

import pytest
import botocore

from paylink.exceptions import BadConfigurationError, MissingEnvironmentVariableError
from paylink.utils import config


REQUIRED_ENV = {
    'STRIPE_SECRET_KEY': 'sk_test_123',
    'STRIPE_WEBHOOK_SECRET': 'whsec_test_123',
    'APP_BASE_URL': 'https://shop.example.jp/',
    'WC_BASE_URL': 'https://shop.example.jp',
    'WC_CONSUMER_KEY': 'ck_test',
    'WC_CONSUMER_SECRET': 'cs_test',
}

OPTIONAL_ENV = (
    'TWILIO_ACCOUNT_SID',
    'TWILIO_AUTH_TOKEN',
    'TWILIO_MESSAGING_SERVICE_SID',
    'TWILIO_FROM',
    'REDIS_URL',
    'PAYLINK_API_KEY',
    'PAYLINK_SECRET',
    'CORS_ALLOW_ORIGIN',
    'STORE_NAME',
    'CHECKOUT_CURRENCY',
    'HTTP_TIMEOUT',
)


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def clean_env(monkeypatch):
    """Start every settings test from an environment without any paylink variables."""
    for name in (*REQUIRED_ENV, *OPTIONAL_ENV):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def required_env(clean_env):
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)
    return clean_env


def secrets_client(payload: str | None) -> MagicMock:
    client = MagicMock()
    client.get_secret_value.return_value = {'SecretString': payload}
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the lowercased value of APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Prod')
    assert config.app_env() == 'prod'


def test_app_env_default(monkeypatch):
    monkeypatch.delenv('APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'paylink')
    assert config.app_name() == 'paylink'


def test_app_prefix(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'paylink')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'prod')
    assert config.app_prefix() == 'paylink:prod'


def test_app_prefix_without_app_name(monkeypatch):
    monkeypatch.delenv('APP_NAME', raising=False)
    assert config.app_prefix() is None


# -------------------------------
# 2. Settings validation
# -------------------------------


def test_from_mapping_with_required_values_only():
    settings = config.Settings.from_mapping(REQUIRED_ENV)

    assert settings.stripe_secret_key == 'sk_test_123'
    assert settings.app_base_url == 'https://shop.example.jp'  # trailing slash stripped
    assert settings.store_name == 'Online Store'
    assert settings.currency == 'jpy'
    assert settings.http_timeout == 10.0
    assert not settings.sms_enabled
    assert not settings.short_links_enabled
    assert not settings.api_key_required
    assert not settings.cors_enabled


def test_from_mapping_with_optional_features():
    values = {
        **REQUIRED_ENV,
        'TWILIO_ACCOUNT_SID': 'AC123',
        'TWILIO_AUTH_TOKEN': 'token',
        'TWILIO_FROM': '+15005550006',
        'REDIS_URL': 'redis://localhost:6379/0',
        'PAYLINK_API_KEY': 'k3y',
        'CORS_ALLOW_ORIGIN': 'https://shop.example.jp',
        'CHECKOUT_CURRENCY': 'USD',
        'HTTP_TIMEOUT': '2.5',
    }
    settings = config.Settings.from_mapping(values)

    assert settings.sms_enabled
    assert settings.short_links_enabled
    assert settings.api_key_required
    assert settings.cors_enabled
    assert settings.currency == 'usd'
    assert settings.http_timeout == 2.5


@pytest.mark.parametrize('missing', list(REQUIRED_ENV))
def test_from_mapping_missing_required_value(missing):
    values = {k: v for k, v in REQUIRED_ENV.items() if k != missing}

    with pytest.raises(MissingEnvironmentVariableError, match=f"'{missing}'"):
        config.Settings.from_mapping(values)


def test_from_mapping_empty_value_counts_as_missing():
    with pytest.raises(MissingEnvironmentVariableError, match="'STRIPE_SECRET_KEY'"):
        config.Settings.from_mapping({**REQUIRED_ENV, 'STRIPE_SECRET_KEY': ''})


@pytest.mark.parametrize(
    'overrides, message',
    [
        ({'TWILIO_ACCOUNT_SID': 'AC123'}, 'Both TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN'),
        ({'TWILIO_ACCOUNT_SID': 'AC123', 'TWILIO_AUTH_TOKEN': 'token'}, 'Either TWILIO_MESSAGING_SERVICE_SID or TWILIO_FROM'),
        ({'HTTP_TIMEOUT': 'soon'}, 'HTTP_TIMEOUT must be a number'),
        ({'HTTP_TIMEOUT': '0'}, 'HTTP_TIMEOUT must be positive'),
    ],
)
def test_from_mapping_bad_configuration(overrides, message):
    with pytest.raises(BadConfigurationError, match=message):
        config.Settings.from_mapping({**REQUIRED_ENV, **overrides})


# -------------------------------
# 3. Secrets Manager resolution
# -------------------------------


def test_resolve_secret(monkeypatch):
    monkeypatch.setenv('PAYLINK_SECRET', 'paylink/prod')
    client = secrets_client(json.dumps({'STRIPE_SECRET_KEY': 'sk_live_1', 'HTTP_TIMEOUT': 3}))

    assert config.resolve_secret(client) == {'STRIPE_SECRET_KEY': 'sk_live_1', 'HTTP_TIMEOUT': '3'}
    client.get_secret_value.assert_called_once_with(SecretId='paylink/prod')


def test_resolve_secret_requires_secret_name(clean_env):
    with pytest.raises(MissingEnvironmentVariableError, match="'PAYLINK_SECRET'"):
        config.resolve_secret(secrets_client('{}'))


@pytest.mark.parametrize('payload', ['not json', '["a", "b"]'])
def test_resolve_secret_with_malformed_payload(monkeypatch, payload):
    monkeypatch.setenv('PAYLINK_SECRET', 'paylink/prod')

    with pytest.raises(BadConfigurationError):
        config.resolve_secret(secrets_client(payload))


def test_resolve_secret_client_error(monkeypatch):
    monkeypatch.setenv('PAYLINK_SECRET', 'paylink/prod')
    client = MagicMock()
    client.get_secret_value.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'not found'}},
        'GetSecretValue',
    )

    with pytest.raises(botocore.exceptions.ClientError):
        config.resolve_secret(client)


# -------------------------------
# 4. load_settings() precedence
# -------------------------------


def test_load_settings_from_environment(required_env):
    settings = config.load_settings()
    assert settings.wc_consumer_key == 'ck_test'


def test_load_settings_merges_secret(clean_env):
    clean_env.setenv('PAYLINK_SECRET', 'paylink/prod')
    clean_env.setenv('STRIPE_SECRET_KEY', 'sk_from_env')
    clean_env.setenv('REDIS_URL', '')  # empty env values don't shadow the secret
    client = secrets_client(json.dumps({**REQUIRED_ENV, 'STRIPE_SECRET_KEY': 'sk_from_secret', 'REDIS_URL': 'redis://secret:6379/0'}))

    settings = config.load_settings(client)

    assert settings.stripe_secret_key == 'sk_from_env'
    assert settings.redis_url == 'redis://secret:6379/0'
    assert settings.wc_consumer_secret == 'cs_test'


def test_load_settings_missing_required(clean_env):
    with pytest.raises(MissingEnvironmentVariableError):
        config.load_settings()


def test_cached_settings_is_built_once(required_env, monkeypatch):
    calls = []
    real_load_settings = config.load_settings
    monkeypatch.setattr(config, 'load_settings', lambda: calls.append(1) or real_load_settings())

    assert config.cached_settings() is config.cached_settings()
    assert len(calls) == 1
