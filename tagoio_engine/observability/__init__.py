"""Observability module for logging."""

from tagoio_engine.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
]
