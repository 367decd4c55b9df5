"""Custom exception classes for the user admin functions.

Each exception carries the HTTP status code the boundary responds with
and an optional detail string for diagnostics.
"""

from __future__ import annotations

from typing import Any
from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.
    Each exception carries an HTTP status code and optional details.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        detail: Optional additional context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response body."""
        result: dict[str, Any] = {"error": self.message}
        if self.detail:
            result["detail"] = self.detail
        return result


class ValidationError(AppError):
    """Raised when a request is malformed or not allowed as submitted.

    Covers missing fields, unknown actions, invalid roles and
    self-deletion attempts.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        detail = f"Field: {field}" if field else None
        super().__init__(message, status_code=400, detail=detail)
        self.field = field


class AuthenticationError(AppError):
    """Raised when the caller's bearer token is missing or unverifiable."""

    def __init__(self, message: str = "Unauthorised", detail: Optional[str] = None):
        super().__init__(message, status_code=401, detail=detail)


class AuthorizationError(AppError):
    """Raised when the caller is verified but lacks permission.

    Use when the caller's role does not allow the requested action
    or the requested target role.
    """

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class RoleUnresolvableError(AuthorizationError):
    """Raised when the caller's profile cannot be loaded."""

    def __init__(self, message: str = "Could not verify your role"):
        super().__init__(message)


class IdentityProviderError(AppError):
    """Raised when a call to the identity provider fails.

    The provider's message is passed through to the client verbatim.
    """

    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(message, status_code=400)
        self.provider_status = provider_status


class ConfigurationError(AppError):
    """Raised when required configuration is missing."""

    def __init__(self, config_name: str):
        super().__init__(
            f"Missing required configuration: {config_name}",
            status_code=500,
        )
        self.config_name = config_name
