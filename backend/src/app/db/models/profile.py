"""Profile model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Text, func, true
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.db.base import Base


class Profile(Base):
    """Application record mirroring role and activity per identity user.

    ``id`` is the Supabase Auth user id. A profile must never outlive its
    identity user; the explicit delete in the user admin handler backs up
    the cascading foreign key created by the migration.
    """

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "role IN ('staff', 'manager', 'admin')",
            name="profiles_role_check",
        ),
    )

    id: Mapped[str] = mapped_column(
        Text().with_variant(UUID(as_uuid=False), "postgresql"),
        primary_key=True,
        comment="Supabase Auth user id",
    )
    email: Mapped[str] = mapped_column(Text(), nullable=False)
    full_name: Mapped[str] = mapped_column(Text(), nullable=False)
    role: Mapped[str] = mapped_column(
        Text(),
        nullable=False,
        default="staff",
        server_default="staff",
    )
    active: Mapped[bool] = mapped_column(
        Boolean(),
        nullable=False,
        default=True,
        server_default=true(),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
