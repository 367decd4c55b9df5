"""Repository for application profiles."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models import Profile
from app.db.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Lookups and reconciliation writes for the profiles table."""

    def __init__(self, session: Session):
        super().__init__(session, Profile)

    def insert_if_missing(
        self,
        profile_id: str,
        email: str,
        full_name: str,
        role: str,
    ) -> bool:
        """Create an active profile unless one already exists.

        A row created concurrently (for example by the auth.users
        trigger) between the lookup and the insert counts as existing.

        Returns:
            True if a row was inserted, False if one already existed.
        """
        if self.exists(profile_id):
            return False

        savepoint = self._session.begin_nested()
        try:
            self._session.add(
                Profile(
                    id=profile_id,
                    email=email,
                    full_name=full_name,
                    role=role,
                    active=True,
                )
            )
            self._session.flush()
        except IntegrityError:
            savepoint.rollback()
            if self.exists(profile_id):
                return False
            raise
        savepoint.commit()
        return True

    def delete_if_present(self, profile_id: str) -> bool:
        """Delete the profile for *profile_id*; absence is not an error."""
        return self.delete_by_id(profile_id)
