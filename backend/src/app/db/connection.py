"""Database connection helpers for the Lambda runtime."""

from __future__ import annotations

import os
from urllib.parse import quote_plus

from app.services.secrets import get_secret_json


def get_database_url() -> str:
    """Resolve the profile store URL from env or Secrets Manager.

    DATABASE_URL wins when set. Otherwise DATABASE_SECRET_ARN must point
    at a JSON secret holding the Supabase Postgres connection fields.
    """

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    secret_arn = os.getenv("DATABASE_SECRET_ARN")
    if not secret_arn:
        raise RuntimeError("DATABASE_URL or DATABASE_SECRET_ARN is required")

    secret = get_secret_json(secret_arn)
    username = (
        os.getenv("DATABASE_USERNAME") or secret.get("username") or secret.get("user")
    )
    password = secret.get("password")
    host = os.getenv("DATABASE_HOST") or secret.get("host")
    port = os.getenv("DATABASE_PORT") or secret.get("port") or 5432
    database = (
        secret.get("dbname")
        or secret.get("database")
        or os.getenv("DATABASE_NAME")
        or "postgres"
    )

    if not username or not host or not password:
        raise RuntimeError("Secret is missing database connection fields")

    return (
        "postgresql+psycopg://"
        f"{quote_plus(str(username))}:{quote_plus(str(password))}"
        f"@{host}:{port}/{database}"
    )
