"""SQLAlchemy models for the profile store."""

from app.db.models.enums import ProfileRole
from app.db.models.profile import Profile

__all__ = [
    "Profile",
    "ProfileRole",
]
