"""Runtime configuration for the user admin functions.

Settings are read from the Lambda environment once per container and
passed into the handler explicitly. The Supabase service role key may be
supplied directly or through an AWS Secrets Manager secret.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import field
from typing import Mapping
from typing import Optional

from app.exceptions import ConfigurationError
from app.services.secrets import get_secret_json

DEFAULT_VERIFICATION_STRATEGIES = (
    "service_introspection",
    "public_session",
    "service_session",
)
SERVICE_ROLE_SECRET_KEY = "service_role_key"


@dataclass(frozen=True)
class UserAdminSettings:
    """Configuration consumed by the user admin handler.

    Attributes:
        base_url: Supabase project URL (identity and storage backend).
        service_credential: High-privilege service role key.
        public_credential: Low-privilege anon key, if configured.
        redirect_url: Where invitees land after accepting the invite.
        allowed_origins: Origins permitted by CORS.
        version: Version string reported by the GET probe.
        timeout_seconds: Timeout for identity-provider calls.
        verification_strategies: Ordered caller verification strategies.
    """

    base_url: str
    service_credential: str = field(repr=False)
    redirect_url: str
    public_credential: Optional[str] = field(default=None, repr=False)
    allowed_origins: tuple[str, ...] = ()
    version: str = "user-admin"
    timeout_seconds: float = 10.0
    verification_strategies: tuple[str, ...] = DEFAULT_VERIFICATION_STRATEGIES


def load_settings(environ: Optional[Mapping[str, str]] = None) -> UserAdminSettings:
    """Build settings from environment variables.

    Raises:
        ConfigurationError: If a required variable is missing or invalid.
    """
    env = os.environ if environ is None else environ

    base_url = _require(env, "SUPABASE_URL").rstrip("/")
    redirect_url = _require(env, "INVITE_REDIRECT_URL")

    return UserAdminSettings(
        base_url=base_url,
        service_credential=_service_credential(env),
        public_credential=env.get("SUPABASE_ANON_KEY") or None,
        redirect_url=redirect_url,
        allowed_origins=_split_list(env.get("CORS_ALLOWED_ORIGINS", "")),
        version=env.get("APP_VERSION") or "user-admin",
        timeout_seconds=_parse_timeout(env.get("IDENTITY_TIMEOUT_SECONDS")),
        verification_strategies=_parse_strategies(env.get("VERIFICATION_STRATEGIES")),
    )


def _require(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(name)
    return value


def _service_credential(env: Mapping[str, str]) -> str:
    """Resolve the service role key from env or Secrets Manager."""
    key = (env.get("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
    if key:
        return key

    secret_arn = (env.get("SUPABASE_SERVICE_ROLE_SECRET_ARN") or "").strip()
    if not secret_arn:
        raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY")

    secret = get_secret_json(secret_arn)
    key = str(secret.get(SERVICE_ROLE_SECRET_KEY) or "").strip()
    if not key:
        raise ConfigurationError(f"{SERVICE_ROLE_SECRET_KEY} in {secret_arn}")
    return key


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return 10.0
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError("IDENTITY_TIMEOUT_SECONDS") from exc
    if timeout <= 0:
        raise ConfigurationError("IDENTITY_TIMEOUT_SECONDS")
    return timeout


def _parse_strategies(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_VERIFICATION_STRATEGIES
    names = _split_list(raw)
    unknown = [name for name in names if name not in DEFAULT_VERIFICATION_STRATEGIES]
    if unknown or not names:
        raise ConfigurationError("VERIFICATION_STRATEGIES")
    return names
