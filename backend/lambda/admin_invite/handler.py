"""Lambda entrypoint for admin-only invites.

Only active admins may call it. The invitee's role defaults to staff.
"""

from __future__ import annotations

from typing import Any
from typing import Mapping

from app.api.user_admin import ADMIN_INVITE, build_lambda_handler

_handler = build_lambda_handler(ADMIN_INVITE)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    return _handler(event, context)
