"""Caller verification against Supabase Auth.

The caller's JWT is verified by asking the identity provider who it
belongs to. Several strategies are tried in order because different
Supabase deployments accept different combinations of project key and
forwarded header. The chain is a compatibility fallback for backend
version skew and can be collapsed to a single strategy through the
VERIFICATION_STRATEGIES setting once the backend is pinned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from app.auth.authorizer_helpers import extract_token
from app.exceptions import AuthenticationError
from app.exceptions import IdentityProviderError
from app.services.identity_provider import IdentityProviderClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Caller:
    """Verified identity making the current request."""

    id: str
    token: str
    email: Optional[str] = None


@dataclass(frozen=True)
class VerificationStrategy:
    """One way of turning a token into a provider user record.

    ``verify`` receives the extracted token and the original
    Authorization header and returns the user record or raises.
    """

    name: str
    verify: Callable[[str, str], dict[str, Any]]


class CallerResolver:
    """Resolve the bearer token of a request into a Caller."""

    def __init__(self, strategies: Sequence[VerificationStrategy]):
        self._strategies = list(strategies)

    @property
    def strategy_names(self) -> list[str]:
        return [strategy.name for strategy in self._strategies]

    def resolve(self, authorization: Optional[str]) -> Caller:
        """Verify the caller behind *authorization*.

        Raises:
            AuthenticationError: If no token is present or every
                strategy fails. The last failure is kept as detail.
        """
        token = extract_token(authorization or "")
        logger.debug("Resolving caller", extra={"token_length": len(token)})
        if not token:
            raise AuthenticationError("Unauthorised: no token provided")

        last_error = "no verification strategy configured"
        for strategy in self._strategies:
            try:
                user = strategy.verify(token, authorization or "")
            except IdentityProviderError as exc:
                last_error = exc.message
                logger.info(
                    f"Caller verification via {strategy.name} failed",
                    extra={"reason": exc.message},
                )
                continue

            user_id = str(user.get("id") or "")
            if not user_id:
                last_error = f"{strategy.name} returned no user"
                continue

            logger.info(f"Caller verified via {strategy.name}", extra={"user_id": user_id})
            return Caller(id=user_id, token=token, email=user.get("email"))

        raise AuthenticationError(
            "Unauthorised: could not verify token",
            detail=last_error,
        )


def build_strategies(
    client: IdentityProviderClient,
    service_credential: str,
    public_credential: Optional[str],
    names: Sequence[str],
) -> list[VerificationStrategy]:
    """Build the ordered strategy list for the configured *names*.

    Strategies:
        service_introspection: service key, normalized Bearer token.
        public_session: anon key, original Authorization header.
        service_session: service key, original Authorization header.
    """

    def service_introspection(token: str, _header: str) -> dict[str, Any]:
        return client.get_user(service_credential, f"Bearer {token}")

    def public_session(_token: str, header: str) -> dict[str, Any]:
        return client.get_user(public_credential or "", header)

    def service_session(_token: str, header: str) -> dict[str, Any]:
        return client.get_user(service_credential, header)

    available = {
        "service_introspection": service_introspection,
        "public_session": public_session,
        "service_session": service_session,
    }

    strategies = []
    for name in names:
        if name == "public_session" and not public_credential:
            continue
        strategies.append(VerificationStrategy(name=name, verify=available[name]))
    return strategies
