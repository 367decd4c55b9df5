"""Privileged user operations and profile reconciliation.

The identity provider is the source of truth for users. After a
successful invite or delete, the profiles table is corrected to match:

- invite/resend inserts the profile when the auth.users trigger did not
- delete_user removes the profile when the foreign key cascade did not

Both corrections are best effort. There is no rollback primitive for
the identity provider, so a failed profile write is logged and the
primary result is still returned as a success.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from app.api.schemas import OpOutcome
from app.api.schemas import OpResult
from app.api.schemas import UserOpAction
from app.api.schemas import UserOpRequest
from app.db.repositories import ProfileRepository
from app.exceptions import IdentityProviderError
from app.services.identity_provider import IdentityProviderClient
from app.utils.logging import get_logger, hash_for_correlation, mask_email

logger = get_logger(__name__)


class UserOpExecutor:
    """Execute an authorized UserOpRequest.

    Args:
        identity: Identity-provider admin client.
        profiles: Repository over the profiles table.
        redirect_url: Fixed post-invite landing page.
    """

    def __init__(
        self,
        identity: IdentityProviderClient,
        profiles: ProfileRepository,
        redirect_url: str,
    ):
        self._identity = identity
        self._profiles = profiles
        self._redirect_url = redirect_url

    def execute(self, request: UserOpRequest) -> OpResult:
        """Run the requested operation.

        The request must already have passed ``require_fields``.

        Raises:
            IdentityProviderError: When the provider rejects the call.
        """
        handlers = {
            UserOpAction.INVITE: self._invite,
            UserOpAction.RESEND: self._invite,
            UserOpAction.DELETE_USER: self._delete_user,
        }
        return handlers[request.action](request)

    def _invite(self, request: UserOpRequest) -> OpResult:
        email = request.email or ""
        user = self._identity.invite_user_by_email(
            email,
            {"full_name": request.full_name, "role": request.role},
            redirect_to=self._redirect_url,
        )
        user_id = str(user.get("id") or "")
        if not user_id:
            raise IdentityProviderError("Invite failed")

        logger.info(
            f"Invited {mask_email(email)} as {request.role}",
            extra={"user_id": user_id, "action": request.action.value},
        )
        self.reconcile_invited_profile(
            user_id,
            email=email,
            full_name=request.full_name or "",
            role=request.role or "",
        )
        return OpResult(outcome=OpOutcome.INVITED, user_id=user_id)

    def _delete_user(self, request: UserOpRequest) -> OpResult:
        user_id = request.user_id or ""
        self._identity.delete_user(user_id)
        self.reconcile_deleted_profile(user_id)
        return OpResult(outcome=OpOutcome.DELETED)

    def reconcile_invited_profile(
        self,
        user_id: str,
        email: str,
        full_name: str,
        role: str,
    ) -> bool:
        """Insert the invitee's profile if it is missing.

        Returns:
            True if a row was written. A profile that already exists
            results in no write at all.
        """
        session = self._profiles.session
        try:
            inserted = self._profiles.insert_if_missing(
                user_id,
                email=email,
                full_name=full_name,
                role=role,
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.error(
                "Profile reconciliation after invite failed",
                extra={"user_id": user_id, "email_hash": hash_for_correlation(email)},
                exc_info=True,
            )
            return False

        if inserted:
            logger.info("Created missing profile", extra={"user_id": user_id})
        return inserted

    def reconcile_deleted_profile(self, user_id: str) -> bool:
        """Remove the deleted user's profile if it still exists."""
        session = self._profiles.session
        try:
            deleted = self._profiles.delete_if_present(user_id)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.error(
                "Profile cleanup after delete failed",
                extra={"user_id": user_id},
                exc_info=True,
            )
            return False

        if deleted:
            logger.info("Removed profile of deleted user", extra={"user_id": user_id})
        return deleted
