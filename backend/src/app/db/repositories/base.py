"""Base repository with common lookups and writes.

Entity-specific repositories extend this with their own queries.
"""

from __future__ import annotations

from typing import Any
from typing import Generic
from typing import Optional
from typing import Type
from typing import TypeVar

from sqlalchemy.orm import Session

from app.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository over a single SQLAlchemy model.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages.
    """

    def __init__(self, session: Session, model: Type[T]):
        self._session = session
        self._model = model

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    def get_by_id(self, entity_id: Any) -> Optional[T]:
        """Get an entity by its primary key, or None."""
        return self._session.get(self._model, entity_id)

    def exists(self, entity_id: Any) -> bool:
        return self.get_by_id(entity_id) is not None

    def delete(self, entity: T) -> None:
        self._session.delete(entity)
        self._session.flush()

    def delete_by_id(self, entity_id: Any) -> bool:
        """Delete an entity by primary key.

        Returns:
            True if the entity was deleted, False if it was not found.
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True
