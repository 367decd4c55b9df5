"""Shared response utilities for the user admin Lambdas."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Sequence

from pydantic import BaseModel

from app.auth.authorizer_helpers import get_header

ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOWED_METHODS = "GET, POST, OPTIONS"
PREFLIGHT_MAX_AGE = "86400"


def get_security_headers() -> dict[str, str]:
    """Get security headers for all responses.

    SECURITY: Responses carry user identifiers, so they must not be
    cached or sniffed.
    """
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Cache-Control": "no-store, no-cache, must-revalidate",
        "Pragma": "no-cache",
    }


def get_cors_headers(
    event: Optional[Mapping[str, Any]] = None,
    allowed_origins: Sequence[str] = (),
) -> dict[str, str]:
    """Get CORS headers for the response.

    The request origin is echoed back when it is on the allow-list.
    Otherwise the first allowed origin is returned so browsers on other
    origins are rejected; an empty allow-list means any origin.

    Args:
        event: The Lambda event containing the request origin header.
        allowed_origins: Origins permitted to call the function.

    Returns:
        Dictionary of CORS headers to include in the response.
    """
    request_origin = ""
    if event:
        request_origin = get_header(event.get("headers") or {}, "origin")

    if request_origin and request_origin in allowed_origins:
        allow_origin = request_origin
    elif allowed_origins:
        allow_origin = allowed_origins[0]
    else:
        allow_origin = "*"

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Vary": "Origin",
    }


def json_response(
    status_code: int,
    body: Any,
    event: Optional[Mapping[str, Any]] = None,
    allowed_origins: Sequence[str] = (),
) -> dict[str, Any]:
    """Create a JSON API Gateway response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict, Pydantic model, or dataclass).
        event: Optional Lambda event for CORS origin detection.
        allowed_origins: Origins permitted by CORS.

    Returns:
        API Gateway response dictionary.
    """
    response_headers = {
        "Content-Type": "application/json",
    }
    response_headers.update(get_security_headers())
    response_headers.update(get_cors_headers(event, allowed_origins))

    return {
        "statusCode": status_code,
        "headers": response_headers,
        "body": json.dumps(_serialize_body(body), default=str),
    }


def preflight_response(
    event: Optional[Mapping[str, Any]] = None,
    allowed_origins: Sequence[str] = (),
) -> dict[str, Any]:
    """Create an empty 204 response for a CORS preflight request."""
    headers = get_cors_headers(event, allowed_origins)
    headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    return {
        "statusCode": 204,
        "headers": headers,
        "body": "",
    }


def error_response(
    status_code: int,
    message: str,
    detail: Optional[str] = None,
    event: Optional[Mapping[str, Any]] = None,
    allowed_origins: Sequence[str] = (),
) -> dict[str, Any]:
    """Create an ``{error, detail?}`` response."""
    body: dict[str, Any] = {"error": message}
    if detail:
        body["detail"] = detail

    return json_response(status_code, body, event=event, allowed_origins=allowed_origins)


def _serialize_body(body: Any) -> Any:
    """Serialize response body to JSON-compatible format."""
    if isinstance(body, BaseModel):
        return body.model_dump(exclude_none=True)

    if hasattr(body, "__dataclass_fields__"):
        return asdict(body)

    return body
