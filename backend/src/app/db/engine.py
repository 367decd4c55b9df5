"""Database engine and session management.

Engines are cached at module level so warm Lambda containers reuse
their connection instead of reconnecting on every invocation.
"""

from __future__ import annotations

import os
from typing import Any
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.db.connection import get_database_url

_ENGINE_CACHE: dict[str, Engine] = {}


def get_engine(
    use_cache: bool = True,
    pool_class: Optional[type] = None,
) -> Engine:
    """Get or create the profile store engine.

    Args:
        use_cache: Whether to reuse the module-level engine.
        pool_class: Override the connection pool class.

    Returns:
        A configured SQLAlchemy engine.
    """
    cache_key = "default"
    if use_cache and cache_key in _ENGINE_CACHE:
        return _ENGINE_CACHE[cache_key]

    database_url = get_database_url()
    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=_get_connect_args(database_url),
        **_get_pool_settings(pool_class),
    )

    if use_cache:
        _ENGINE_CACHE[cache_key] = engine

    return engine


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker[Session]:
    """Return a session factory bound to *engine* (default engine if None)."""
    return sessionmaker(bind=engine or get_engine(), expire_on_commit=False)


def _get_connect_args(database_url: str) -> dict[str, str]:
    """Return driver arguments; Supabase Postgres requires TLS."""
    if not database_url.startswith("postgresql"):
        return {}
    return {"sslmode": os.getenv("DATABASE_SSLMODE", "require")}


def _get_pool_settings(pool_class: Optional[type]) -> dict[str, Any]:
    """Return pool settings sized for one request per container."""
    if pool_class == NullPool:
        return {"poolclass": NullPool}

    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "1")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "0")),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "300")),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
    }
