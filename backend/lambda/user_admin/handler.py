"""Lambda entrypoint for the user admin API (invite, resend, delete_user).

Also answers GET with a version probe so deployments can be confirmed live.
"""

from __future__ import annotations

from typing import Any, Mapping

from app.api.user_admin import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    return _handler(event, context)
