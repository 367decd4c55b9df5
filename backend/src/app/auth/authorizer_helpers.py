"""Header helpers shared by the caller resolver and response builders."""

from __future__ import annotations

import re
from typing import Any, Mapping

_BEARER_PREFIX = re.compile(r'^Bearer(\s+|$)', re.IGNORECASE)


def get_header(headers: Mapping[str, Any], name: str) -> str:
    """Get a header value case-insensitively."""
    for key, value in headers.items():
        if key.lower() == name.lower():
            return str(value)
    return ''


def extract_token(authorization: str) -> str:
    """Strip a case-insensitive ``Bearer`` prefix and surrounding space."""
    return _BEARER_PREFIX.sub('', authorization or '').strip()
