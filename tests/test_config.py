"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from app.config import DEFAULT_VERIFICATION_STRATEGIES, load_settings
from app.exceptions import ConfigurationError

BASE_ENV = {
    'SUPABASE_URL': 'https://project.supabase.co/',
    'SUPABASE_SERVICE_ROLE_KEY': 'service-key',
    'INVITE_REDIRECT_URL': 'https://app.example.com/welcome/',
}


def _env(**overrides) -> dict[str, str]:
    env = dict(BASE_ENV)
    env.update(overrides)
    return {key: value for key, value in env.items() if value is not None}


def test_minimal_environment() -> None:
    settings = load_settings(_env())

    assert settings.base_url == 'https://project.supabase.co'
    assert settings.service_credential == 'service-key'
    assert settings.public_credential is None
    assert settings.allowed_origins == ()
    assert settings.version == 'user-admin'
    assert settings.timeout_seconds == 10.0
    assert settings.verification_strategies == DEFAULT_VERIFICATION_STRATEGIES


def test_optional_values() -> None:
    settings = load_settings(
        _env(
            SUPABASE_ANON_KEY='anon-key',
            CORS_ALLOWED_ORIGINS='https://app.example.com, http://localhost:5173,',
            APP_VERSION='2024-06-01',
            IDENTITY_TIMEOUT_SECONDS='2.5',
            VERIFICATION_STRATEGIES='service_session',
        )
    )

    assert settings.public_credential == 'anon-key'
    assert settings.allowed_origins == ('https://app.example.com', 'http://localhost:5173')
    assert settings.version == '2024-06-01'
    assert settings.timeout_seconds == 2.5
    assert settings.verification_strategies == ('service_session',)


def test_credentials_hidden_from_repr() -> None:
    settings = load_settings(_env(SUPABASE_ANON_KEY='anon-key'))
    assert 'service-key' not in repr(settings)
    assert 'anon-key' not in repr(settings)


@pytest.mark.parametrize('name', ['SUPABASE_URL', 'INVITE_REDIRECT_URL', 'SUPABASE_SERVICE_ROLE_KEY'])
def test_missing_required_value(name) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env(**{name: None}))
    assert exc_info.value.message == f'Missing required configuration: {name}'
    assert exc_info.value.status_code == 500


@pytest.mark.parametrize(
    ('name', 'value'),
    [
        ('IDENTITY_TIMEOUT_SECONDS', 'soon'),
        ('IDENTITY_TIMEOUT_SECONDS', '0'),
        ('VERIFICATION_STRATEGIES', 'magic_link'),
        ('VERIFICATION_STRATEGIES', ' , '),
    ],
)
def test_invalid_values(name, value) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env(**{name: value}))
    assert name in exc_info.value.message


def test_service_key_from_secret(mocker) -> None:
    get_secret = mocker.patch(
        'app.config.get_secret_json', return_value={'service_role_key': 'secret-key'}
    )

    settings = load_settings(
        _env(SUPABASE_SERVICE_ROLE_KEY=None, SUPABASE_SERVICE_ROLE_SECRET_ARN='arn:secret')
    )

    assert settings.service_credential == 'secret-key'
    get_secret.assert_called_once_with('arn:secret')


def test_secret_without_key(mocker) -> None:
    mocker.patch('app.config.get_secret_json', return_value={'other': 'x'})

    with pytest.raises(ConfigurationError):
        load_settings(
            _env(SUPABASE_SERVICE_ROLE_KEY=None, SUPABASE_SERVICE_ROLE_SECRET_ARN='arn:secret')
        )
