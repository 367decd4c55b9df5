"""Tests for custom exception classes."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from app.exceptions import (  # noqa: E402
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    IdentityProviderError,
    RoleUnresolvableError,
    ValidationError,
)


class TestAppError:
    """Tests for base AppError class."""

    def test_default_status_code(self) -> None:
        error = AppError('Something went wrong')
        assert error.status_code == 500
        assert error.message == 'Something went wrong'

    def test_to_dict_without_detail(self) -> None:
        assert AppError('Error message').to_dict() == {'error': 'Error message'}

    def test_to_dict_with_detail(self) -> None:
        result = AppError('Error', detail='Additional info').to_dict()
        assert result == {'error': 'Error', 'detail': 'Additional info'}


class TestValidationError:
    def test_status_code_is_400(self) -> None:
        assert ValidationError('Invalid input').status_code == 400

    def test_without_field_has_no_detail(self) -> None:
        error = ValidationError('Unknown action: promote')
        assert error.to_dict() == {'error': 'Unknown action: promote'}

    def test_includes_field_in_detail(self) -> None:
        error = ValidationError('user_id is required', field='user_id')
        assert error.field == 'user_id'
        assert 'user_id' in error.detail


class TestAuthenticationError:
    def test_status_code_is_401(self) -> None:
        assert AuthenticationError().status_code == 401

    def test_default_message(self) -> None:
        assert AuthenticationError().message == 'Unauthorised'

    def test_carries_detail(self) -> None:
        error = AuthenticationError('Unauthorised: could not verify token', detail='invalid JWT')
        assert error.to_dict()['detail'] == 'invalid JWT'


class TestAuthorizationErrors:
    def test_forbidden_is_403(self) -> None:
        error = AuthorizationError()
        assert error.status_code == 403
        assert error.message == 'Forbidden'

    def test_role_unresolvable_is_forbidden(self) -> None:
        error = RoleUnresolvableError()
        assert isinstance(error, AuthorizationError)
        assert error.status_code == 403
        assert error.message == 'Could not verify your role'


class TestIdentityProviderError:
    def test_status_code_is_400(self) -> None:
        error = IdentityProviderError('User not found', provider_status=404)
        assert error.status_code == 400
        assert error.provider_status == 404

    def test_message_passed_through(self) -> None:
        error = IdentityProviderError('Email rate limit exceeded')
        assert error.to_dict() == {'error': 'Email rate limit exceeded'}


class TestServerErrors:
    def test_configuration_error(self) -> None:
        error = ConfigurationError('SUPABASE_URL')
        assert error.status_code == 500
        assert 'SUPABASE_URL' in error.message
        assert error.config_name == 'SUPABASE_URL'
