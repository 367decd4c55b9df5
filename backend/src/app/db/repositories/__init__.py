"""Repository implementations for the profile store."""

from app.db.repositories.base import BaseRepository
from app.db.repositories.profile import ProfileRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
]
