"""Request parsing helpers for the user admin API."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Collection, Mapping, Optional

import pydantic

from app.api.schemas import UserOpAction
from app.api.schemas import UserOpRequest
from app.exceptions import ValidationError


def _parse_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the JSON object in the request body."""
    raw = event.get("body") or ""
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Invalid JSON body") from exc
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body")
    return body


def _parse_user_op(
    body: Mapping[str, Any],
    allowed_actions: Collection[UserOpAction],
    default_action: Optional[UserOpAction] = None,
    default_role: Optional[str] = None,
) -> UserOpRequest:
    """Build a UserOpRequest from a parsed body.

    Args:
        body: The decoded JSON body.
        allowed_actions: Actions this entry point accepts.
        default_action: Action assumed when the body has none.
        default_role: Role assumed for invites that omit it.

    Raises:
        ValidationError: If the action is missing or unknown, or a
            field has the wrong type.
    """
    payload = dict(body)

    action = payload.get("action")
    if not action:
        if default_action is None:
            raise ValidationError("Missing required field: action", field="action")
        action = default_action.value
    if not isinstance(action, str) or action not in {a.value for a in allowed_actions}:
        raise ValidationError(f"Unknown action: {action}")
    payload["action"] = action

    if default_role and not payload.get("role") and action != UserOpAction.DELETE_USER.value:
        payload["role"] = default_role

    try:
        return UserOpRequest.model_validate(payload)
    except pydantic.ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ValidationError(
            "Invalid request body",
            field=", ".join(fields) or None,
        ) from exc
