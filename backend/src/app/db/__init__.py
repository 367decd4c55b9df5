"""Profile store: models, engine and repositories."""

from app.db.base import Base
from app.db.models import Profile
from app.db.models import ProfileRole

__all__ = [
    "Base",
    "Profile",
    "ProfileRole",
]
