"""Secrets Manager helpers with per-container caching."""

from __future__ import annotations

import base64
import json
from typing import Any

import boto3
import botocore.config

_SECRET_CACHE: dict[str, dict[str, Any]] = {}
_CLIENT: Any = None


def _secretsmanager_client() -> Any:
    """Create (once) a Secrets Manager client with short timeouts."""
    global _CLIENT
    if _CLIENT is None:
        config = botocore.config.Config(
            connect_timeout=5,
            read_timeout=10,
            retries={"max_attempts": 2},
        )
        _CLIENT = boto3.client("secretsmanager", config=config)
    return _CLIENT


def get_secret_json(secret_arn: str) -> dict[str, Any]:
    """Fetch a JSON secret from AWS Secrets Manager.

    Supabase keys and database credentials are stored as JSON objects;
    a warm Lambda container reuses the parsed payload.
    """
    if secret_arn in _SECRET_CACHE:
        return _SECRET_CACHE[secret_arn]

    response = _secretsmanager_client().get_secret_value(SecretId=secret_arn)
    secret_str = response.get("SecretString")
    if not secret_str and response.get("SecretBinary"):
        secret_str = base64.b64decode(response["SecretBinary"]).decode("utf-8")
    if not secret_str:
        raise RuntimeError("Secret value is empty")

    secret_payload = json.loads(secret_str)
    if not isinstance(secret_payload, dict):
        raise RuntimeError("Secret value must be a JSON object")
    _SECRET_CACHE[secret_arn] = secret_payload
    return secret_payload


def clear_secret_cache() -> None:
    """Clear cached secrets and the client (useful in tests)."""
    global _CLIENT
    _SECRET_CACHE.clear()
    _CLIENT = None
