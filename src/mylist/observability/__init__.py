"""Observability module: structured logging with request correlation."""

from mylist.observability.logging import (
    configure_logging,
    correlation_id_var,
    request_context,
    request_id_var,
    user_id_var,
)

__all__ = [
    "configure_logging",
    "request_context",
    "request_id_var",
    "correlation_id_var",
    "user_id_var",
]
