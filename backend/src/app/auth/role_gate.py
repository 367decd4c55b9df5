"""Role-based permission checks for user admin actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.api.schemas import UserOpAction
from app.api.schemas import UserOpRequest
from app.auth.caller import Caller
from app.db.models import Profile
from app.db.models import ProfileRole
from app.db.repositories import ProfileRepository
from app.exceptions import AuthorizationError
from app.exceptions import RoleUnresolvableError
from app.exceptions import ValidationError
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PermissionDecision:
    """Outcome of a permission check; never persisted."""

    allowed: bool
    reason: Optional[str] = None
    status_code: int = 200

    @classmethod
    def allow(cls) -> "PermissionDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, status_code: int = 403) -> "PermissionDecision":
        return cls(allowed=False, reason=reason, status_code=status_code)

    def raise_for_denial(self) -> None:
        """Raise the error matching a denied decision."""
        if self.allowed:
            return
        if self.status_code == 400:
            raise ValidationError(self.reason or "Invalid request")
        raise AuthorizationError(self.reason or "Forbidden")


def evaluate_baseline(profile: Profile, admin_only: bool = False) -> PermissionDecision:
    """Decide whether the caller may manage users at all."""
    if not profile.active:
        return PermissionDecision.deny("Forbidden")

    is_admin = profile.role == ProfileRole.ADMIN.value
    is_manager = profile.role == ProfileRole.MANAGER.value

    if admin_only and not is_admin:
        return PermissionDecision.deny("Admin only")
    if not is_admin and not is_manager:
        return PermissionDecision.deny("You do not have permission to manage users")
    return PermissionDecision.allow()


def evaluate_action(
    caller: Caller,
    profile: Profile,
    request: UserOpRequest,
) -> PermissionDecision:
    """Apply the action-specific rules after the baseline passed."""
    is_admin = profile.role == ProfileRole.ADMIN.value

    if request.is_invite:
        if request.role == ProfileRole.ADMIN.value and not is_admin:
            return PermissionDecision.deny("Only admins can create admin accounts")
        return PermissionDecision.allow()

    if request.action == UserOpAction.DELETE_USER:
        # Self-deletion is rejected as a bad request for every role.
        if request.user_id == caller.id:
            return PermissionDecision.deny(
                "You cannot remove your own account", status_code=400
            )
        if not is_admin:
            return PermissionDecision.deny("Only admins can remove users")
        return PermissionDecision.allow()

    return PermissionDecision.allow()


def evaluate(
    caller: Caller,
    profile: Profile,
    request: UserOpRequest,
    admin_only: bool = False,
) -> PermissionDecision:
    """Full decision for *request* made by *caller* holding *profile*."""
    decision = evaluate_baseline(profile, admin_only=admin_only)
    if not decision.allowed:
        return decision
    return evaluate_action(caller, profile, request)


class RoleGate:
    """Load the caller's profile and enforce the permission rules.

    Args:
        profiles: Repository used to look up the caller's profile.
        admin_only: Require an admin caller for every action.
    """

    def __init__(self, profiles: ProfileRepository, admin_only: bool = False):
        self._profiles = profiles
        self._admin_only = admin_only

    def load_profile(self, caller: Caller) -> Profile:
        """Load the caller's profile.

        Raises:
            RoleUnresolvableError: If the row is missing or the lookup fails.
        """
        try:
            profile = self._profiles.get_by_id(caller.id)
        except SQLAlchemyError as exc:
            logger.warning("Caller profile lookup failed", exc_info=True)
            raise RoleUnresolvableError() from exc
        if profile is None:
            logger.warning("No profile for caller", extra={"user_id": caller.id})
            raise RoleUnresolvableError()
        return profile

    def authorize_caller(self, caller: Caller) -> Profile:
        """Enforce the baseline gate and return the caller's profile."""
        profile = self.load_profile(caller)
        decision = evaluate_baseline(profile, admin_only=self._admin_only)
        if not decision.allowed:
            logger.warning(
                "Caller lacks a user management role",
                extra={"user_id": caller.id, "role": profile.role},
            )
        decision.raise_for_denial()
        return profile

    def authorize_request(
        self,
        caller: Caller,
        profile: Profile,
        request: UserOpRequest,
    ) -> PermissionDecision:
        """Enforce the action-specific rules for an already-gated caller."""
        decision = evaluate_action(caller, profile, request)
        if not decision.allowed:
            logger.warning(
                f"Denied {request.action.value}",
                extra={"user_id": caller.id, "reason": decision.reason},
            )
        decision.raise_for_denial()
        return decision

    def check(self, caller: Caller, request: UserOpRequest) -> PermissionDecision:
        """Run the full gate for *request*.

        Raises:
            RoleUnresolvableError, AuthorizationError, ValidationError:
                When the request is denied.
        """
        profile = self.authorize_caller(caller)
        return self.authorize_request(caller, profile, request)
