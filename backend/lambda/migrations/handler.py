"""Lambda entrypoint that applies profile store migrations.

Invoked once per deployment. Alembic scripts are bundled under
/var/task/db/alembic next to the application source.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from alembic import command
from alembic.config import Config

from app.db.connection import get_database_url
from app.utils.logging import configure_logging, get_logger, set_request_context

configure_logging()
logger = get_logger(__name__)

DEFAULT_SCRIPT_LOCATION = "/var/task/db/alembic"


def _run_migrations(database_url: str, revision: str = "head") -> None:
    """Upgrade the profile store to *revision*."""
    config = Config()
    config.set_main_option(
        "script_location",
        os.getenv("ALEMBIC_SCRIPT_LOCATION", DEFAULT_SCRIPT_LOCATION),
    )
    # configparser interpolation treats % specially
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    command.upgrade(config, revision)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    set_request_context(req_id=getattr(context, "aws_request_id", None))
    revision = str(event.get("revision") or "head")
    logger.info(f"Running migrations to {revision}")
    _run_migrations(get_database_url(), revision)
    logger.info("Migrations complete")
    return {"status": "ok", "revision": revision}
