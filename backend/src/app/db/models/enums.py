"""Enum definitions for database models."""

from __future__ import annotations

import enum


class ProfileRole(str, enum.Enum):
    """Application roles stored on a profile.

    Values are compared as exact strings; no case or whitespace
    normalization is applied.
    """

    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
