"""User admin API handler.

Lets an admin or manager invite, re-invite or delete application users
while the Supabase service role key stays on the server. One handler
serves every deployed entry point; entry points differ only in the
actions they accept and a few defaults.

Request flow:
    Authorization header -> CallerResolver -> RoleGate -> UserOpExecutor

Routes handled (per entry point):
    OPTIONS *   - CORS preflight
    GET     *   - version probe (user_admin only)
    POST    *   - {action, email?, full_name?, role?, user_id?}
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from botocore.exceptions import ClientError
from sqlalchemy.orm import Session

from app.api.admin_request import _parse_body, _parse_user_op
from app.api.schemas import UserOpAction
from app.auth.authorizer_helpers import get_header
from app.auth.caller import CallerResolver, build_strategies
from app.auth.role_gate import RoleGate
from app.config import UserAdminSettings, load_settings
from app.db.engine import get_session_factory
from app.db.repositories import ProfileRepository
from app.exceptions import AppError, ConfigurationError
from app.services.identity_provider import IdentityProviderClient
from app.services.user_ops import UserOpExecutor
from app.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    log_lambda_event,
    log_response,
    set_request_context,
)
from app.utils.responses import error_response, json_response, preflight_response

configure_logging()
logger = get_logger(__name__)


@dataclass(frozen=True)
class EntryPoint:
    """Per-deployment behaviour of the shared handler."""

    name: str
    allowed_actions: tuple[UserOpAction, ...]
    default_action: Optional[UserOpAction] = None
    default_role: Optional[str] = None
    admin_only: bool = False
    version_probe: bool = False


USER_ADMIN = EntryPoint(
    name="user_admin",
    allowed_actions=(
        UserOpAction.INVITE,
        UserOpAction.RESEND,
        UserOpAction.DELETE_USER,
    ),
    version_probe=True,
)
INVITE_USER = EntryPoint(
    name="invite_user",
    allowed_actions=(UserOpAction.INVITE,),
    default_action=UserOpAction.INVITE,
)
ADMIN_INVITE = EntryPoint(
    name="admin_invite",
    allowed_actions=(UserOpAction.INVITE,),
    default_action=UserOpAction.INVITE,
    default_role="staff",
    admin_only=True,
)


class AccessControlledUserOp:
    """Authenticate, authorize and execute one user admin request.

    Args:
        settings: Explicit configuration for this deployment.
        entry_point: Which actions and defaults apply.
        identity: Identity-provider client; built from settings if None.
        session_factory: Callable returning a profile store Session.
    """

    def __init__(
        self,
        settings: UserAdminSettings,
        entry_point: EntryPoint = USER_ADMIN,
        identity: Optional[IdentityProviderClient] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self._settings = settings
        self._entry_point = entry_point
        self._identity = identity or IdentityProviderClient(
            settings.base_url,
            settings.service_credential,
            timeout_seconds=settings.timeout_seconds,
        )
        self._session_factory = session_factory or get_session_factory()
        self._resolver = CallerResolver(
            build_strategies(
                self._identity,
                settings.service_credential,
                settings.public_credential,
                settings.verification_strategies,
            )
        )

    def handle(self, event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
        """Handle an API Gateway proxy event."""
        started = time.perf_counter()
        set_request_context(
            req_id=(event.get("requestContext") or {}).get("requestId", ""),
            fn_name=getattr(context, "function_name", None) or self._entry_point.name,
        )
        try:
            log_lambda_event(logger, event)
            response = self._route(event)
            log_response(
                logger,
                response["statusCode"],
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            clear_request_context()

    def _route(self, event: Mapping[str, Any]) -> dict[str, Any]:
        method = str(event.get("httpMethod", "")).upper()

        if method == "OPTIONS":
            return preflight_response(event, self._settings.allowed_origins)

        if method == "GET" and self._entry_point.version_probe:
            return self._respond(
                200, {"version": self._settings.version, "ok": True}, event
            )

        if method != "POST":
            return self._respond(405, {"error": "Method not allowed"}, event)

        return _safe(lambda: self._handle_post(event), event, self._settings)

    def _handle_post(self, event: Mapping[str, Any]) -> dict[str, Any]:
        authorization = get_header(event.get("headers") or {}, "authorization")
        caller = self._resolver.resolve(authorization)

        with self._session_factory() as session:
            profiles = ProfileRepository(session)
            gate = RoleGate(profiles, admin_only=self._entry_point.admin_only)
            caller_profile = gate.authorize_caller(caller)

            request = _parse_user_op(
                _parse_body(event),
                self._entry_point.allowed_actions,
                default_action=self._entry_point.default_action,
                default_role=self._entry_point.default_role,
            )
            request.require_fields()
            gate.authorize_request(caller, caller_profile, request)

            executor = UserOpExecutor(
                self._identity,
                profiles,
                redirect_url=self._settings.redirect_url,
            )
            result = executor.execute(request)

        return self._respond(200, result.to_response(), event)

    def _respond(
        self,
        status_code: int,
        body: Any,
        event: Mapping[str, Any],
    ) -> dict[str, Any]:
        return json_response(
            status_code,
            body,
            event=event,
            allowed_origins=self._settings.allowed_origins,
        )


def _safe(
    handler: Callable[[], dict[str, Any]],
    event: Mapping[str, Any],
    settings: Optional[UserAdminSettings] = None,
) -> dict[str, Any]:
    """Execute *handler* with common error handling."""
    origins = settings.allowed_origins if settings else ()
    try:
        return handler()
    except AppError as exc:
        if exc.status_code >= 500:
            logger.error(f"Application error: {exc.message}")
        else:
            logger.warning(f"Request rejected: {exc.message}", extra={"status": exc.status_code})
        return error_response(
            exc.status_code,
            exc.message,
            detail=exc.detail,
            event=event,
            allowed_origins=origins,
        )
    except Exception as exc:
        logger.exception("Unexpected error in user admin handler")
        return error_response(
            500,
            "Internal server error",
            detail=str(exc),
            event=event,
            allowed_origins=origins,
        )


def build_lambda_handler(
    entry_point: EntryPoint,
) -> Callable[[Mapping[str, Any], Any], dict[str, Any]]:
    """Return a Lambda entrypoint that builds its handler on first use.

    The handler (settings, identity client, engine) is cached for the
    lifetime of the container. Failures while building it, including
    Secrets Manager errors, are returned as a JSON 500.
    """
    cache: dict[str, AccessControlledUserOp] = {}

    def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
        if "handler" not in cache:
            try:
                cache["handler"] = AccessControlledUserOp(load_settings(), entry_point)
            except ConfigurationError as exc:
                logger.exception("User admin handler is misconfigured")
                return error_response(exc.status_code, exc.message, event=event)
            except (ClientError, RuntimeError) as exc:
                logger.exception("User admin handler could not be initialised")
                return error_response(500, "Internal server error", detail=str(exc), event=event)
        return cache["handler"].handle(event, context)

    return lambda_handler


lambda_handler = build_lambda_handler(USER_ADMIN)
