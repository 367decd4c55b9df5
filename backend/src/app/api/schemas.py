"""Pydantic schemas for user admin requests and results."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator

from app.db.models import ProfileRole
from app.exceptions import ValidationError


class UserOpAction(str, enum.Enum):
    """Privileged operations a caller may request."""

    INVITE = "invite"
    RESEND = "resend"
    DELETE_USER = "delete_user"


INVITE_ACTIONS = frozenset({UserOpAction.INVITE, UserOpAction.RESEND})


class UserOpRequest(BaseModel):
    """Body of a POST request.

    Fields are optional at parse time; which ones are required depends
    on the action and is checked by ``require_fields``.
    """

    model_config = ConfigDict(extra="ignore")

    action: UserOpAction
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("email", "full_name", "user_id")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    # Roles are matched exactly against the enum, without normalization.
    @field_validator("role")
    @classmethod
    def _blank_role(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def is_invite(self) -> bool:
        return self.action in INVITE_ACTIONS

    def require_fields(self) -> None:
        """Check the fields the action needs.

        Raises:
            ValidationError: If a required field is missing or the
                target role is not one of the fixed roles.
        """
        if self.is_invite:
            if not self.email or not self.full_name or not self.role:
                raise ValidationError("email, full_name and role are all required")
            if self.role not in ProfileRole.values():
                raise ValidationError(
                    f"role must be one of: {', '.join(ProfileRole.values())}",
                    field="role",
                )
        elif self.action == UserOpAction.DELETE_USER:
            if not self.user_id:
                raise ValidationError("user_id is required", field="user_id")


class OpOutcome(str, enum.Enum):
    INVITED = "invited"
    DELETED = "deleted"


class OpResult(BaseModel):
    """Successful outcome of an executed operation."""

    outcome: OpOutcome
    user_id: Optional[str] = None

    def to_response(self) -> dict[str, object]:
        if self.outcome == OpOutcome.INVITED:
            return {"success": True, "user_id": self.user_id}
        return {"success": True}
