"""Utility modules for the backend application."""

from app.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    hash_for_correlation,
    mask_email,
    set_request_context,
)
from app.utils.responses import error_response, json_response, preflight_response

__all__ = [
    "clear_request_context",
    "configure_logging",
    "error_response",
    "get_logger",
    "hash_for_correlation",
    "json_response",
    "mask_email",
    "preflight_response",
    "set_request_context",
]
