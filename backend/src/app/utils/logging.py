"""Structured logging utilities for the user admin Lambdas.

Log entries are emitted as single-line JSON on stdout so CloudWatch Logs
Insights can filter on request id, level and logger name.

SECURITY NOTES:
- Bearer tokens and service credentials are never logged, only their length
- Use mask_email() for invitee and caller email addresses
- Use hash_for_correlation() when a stable identifier is needed across logs
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Mapping
from typing import MutableMapping
from typing import Optional


def mask_email(email: str) -> str:
    """Mask an email address for safe logging.

    Examples:
        >>> mask_email("john.doe@example.com")
        'jo***@***.com'
        >>> mask_email("a@b.co")
        'a***@***.co'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    domain_parts = domain.rsplit(".", 1)

    visible_local = local[:2] if len(local) > 2 else local[:1]
    tld = domain_parts[-1] if len(domain_parts) > 1 else ""

    return f"{visible_local}***@***.{tld}" if tld else f"{visible_local}***@***"


def hash_for_correlation(value: str) -> str:
    """Return a short, stable hash of *value* for log correlation."""
    return hashlib.sha256(value.encode()).hexdigest()[:12]


request_id: ContextVar[str] = ContextVar("request_id", default="")
function_name: ContextVar[str] = ContextVar("function_name", default="")


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with request context and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        req_id = request_id.get()
        if req_id:
            log_data["request_id"] = req_id

        fn_name = function_name.get()
        if fn_name:
            log_data["function"] = fn_name

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that nests ``extra`` fields under ``context``."""

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        context = dict(self.extra or {})
        context.update(kwargs.pop("extra", None) or {})
        if context:
            kwargs["extra"] = {"context": context}
        return msg, kwargs


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL environment
            variable or INFO.
    """
    log_level: str = level or os.getenv("LOG_LEVEL") or "INFO"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Get a context-aware logger for *name*."""
    return ContextLogger(logging.getLogger(name), extra)


def set_request_context(
    req_id: Optional[str] = None,
    fn_name: Optional[str] = None,
) -> None:
    """Set per-invocation context included in every log entry."""
    if req_id:
        request_id.set(req_id)
    if fn_name:
        function_name.set(fn_name)


def clear_request_context() -> None:
    """Clear request context after an invocation."""
    request_id.set("")
    function_name.set("")


def log_lambda_event(logger: ContextLogger, event: Mapping[str, Any]) -> None:
    """Log a summary of the incoming event at DEBUG level.

    The body is never logged, only its length.
    """
    body = event.get("body") or ""
    logger.debug(
        "Lambda event received",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "body_length": len(body),
        },
    )


def log_response(
    logger: ContextLogger,
    status_code: int,
    duration_ms: Optional[float] = None,
) -> None:
    """Log the response status, at WARNING for 4xx/5xx responses."""
    context: dict[str, Any] = {"status_code": status_code}
    if duration_ms is not None:
        context["duration_ms"] = round(duration_ms, 2)

    level = logging.INFO if status_code < 400 else logging.WARNING
    logger.log(level, "Lambda response", extra=context)
