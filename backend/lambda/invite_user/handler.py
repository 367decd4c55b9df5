"""Lambda entrypoint for inviting users.

Admins and managers may invite; only admins may invite other admins.
The body's action field is optional and defaults to invite.
"""

from __future__ import annotations

from typing import Any
from typing import Mapping

from app.api.user_admin import INVITE_USER, build_lambda_handler

_handler = build_lambda_handler(INVITE_USER)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the shared user admin handler."""

    return _handler(event, context)
