"""Supabase Auth (GoTrue) REST client.

Only the handful of endpoints the user admin functions need are wrapped:

    GET    /auth/v1/user                 - resolve the user behind a JWT
    POST   /auth/v1/invite               - invite a user by email
    DELETE /auth/v1/admin/users/{id}     - delete a user

Every call is a single attempt. Failures are raised as
IdentityProviderError carrying the provider's message verbatim.
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode

from app.exceptions import IdentityProviderError
from app.utils.logging import get_logger, mask_email

logger = get_logger(__name__)

_MESSAGE_FIELDS = ("msg", "message", "error_description", "error")


class IdentityProviderClient:
    """Minimal admin client for the Supabase Auth API."""

    def __init__(
        self,
        base_url: str,
        service_credential: str,
        timeout_seconds: float = 10.0,
    ):
        self._auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._service_credential = service_credential
        self._timeout = timeout_seconds
        self._ssl_context = ssl.create_default_context()

    def get_user(self, api_key: str, authorization: str) -> dict[str, Any]:
        """Return the user record for the JWT in *authorization*.

        Args:
            api_key: Project key sent as the ``apikey`` header.
            authorization: Full ``Authorization`` header value.
        """
        user = self._request(
            "GET",
            "/user",
            headers={"apikey": api_key, "Authorization": authorization},
        )
        if not isinstance(user, dict) or not user.get("id"):
            raise IdentityProviderError("No user returned for token")
        return user

    def invite_user_by_email(
        self,
        email: str,
        data: Mapping[str, Any],
        redirect_to: Optional[str] = None,
    ) -> dict[str, Any]:
        """Send an invite email and return the created user record."""
        path = "/invite"
        if redirect_to:
            path = f"{path}?{urlencode({'redirect_to': redirect_to})}"

        logger.info(f"Inviting user {mask_email(email)}")
        user = self._request(
            "POST",
            path,
            headers=self._service_headers(),
            body={"email": email, "data": dict(data)},
        )
        if not isinstance(user, dict) or not user.get("id"):
            raise IdentityProviderError("Invite failed")
        return user

    def delete_user(self, user_id: str) -> None:
        """Permanently delete a user from the identity store."""
        self._request(
            "DELETE",
            f"/admin/users/{quote(user_id, safe='')}",
            headers=self._service_headers(),
        )
        logger.info("Deleted identity user", extra={"user_id": user_id})

    def _service_headers(self) -> dict[str, str]:
        return {
            "apikey": self._service_credential,
            "Authorization": f"Bearer {self._service_credential}",
        }

    def _request(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Execute a single HTTP call and decode the JSON response."""
        request_headers = {"Accept": "application/json", **headers}
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            request_headers["Content-Type"] = "application/json"

        # The base URL comes from deployment configuration, not user input.
        request = urllib.request.Request(
            f"{self._auth_url}{path}",
            data=data,
            headers=request_headers,
            method=method,
        )
        try:
            with urllib.request.urlopen(  # nosec B310
                request,
                timeout=self._timeout,
                context=self._ssl_context,
            ) as response:
                raw = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            message = _error_message(exc)
            logger.warning(
                f"Identity provider {method} {path.split('?')[0]} failed",
                extra={"status": exc.code},
            )
            raise IdentityProviderError(message, provider_status=exc.code) from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            # Errors raised while reading the response are not wrapped by urlopen.
            reason = getattr(exc, "reason", None) or exc
            raise IdentityProviderError(
                f"Identity provider unreachable: {reason}"
            ) from exc

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise IdentityProviderError("Invalid response from identity provider") from exc


def _error_message(exc: urllib.error.HTTPError) -> str:
    """Pick the provider's error message out of an error response."""
    try:
        raw = exc.read().decode("utf-8", errors="replace")
    except Exception:  # nosec B110 - fall back to the status line
        raw = ""

    try:
        payload = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        payload = {}

    if isinstance(payload, dict):
        for name in _MESSAGE_FIELDS:
            value = payload.get(name)
            if isinstance(value, str) and value:
                return value

    return raw.strip() or f"Identity provider returned HTTP {exc.code}"
