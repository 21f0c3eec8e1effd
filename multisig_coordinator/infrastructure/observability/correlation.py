"""Correlation ID management across signer processes.

One correlation ID follows a coordination flow (propose, confirm,
execute) through every log entry and every outbound HTTP request, so the
entries written by different signers about one proposal can be joined.

Usage:
    # At flow start (or when resuming a flow started elsewhere)
    set_correlation_id(incoming_id or generate_correlation_id())

    # HTTP adapters forward it
    headers = correlation_headers()
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

CORRELATION_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4)."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, or empty string if unset."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID in the current context.

    Args:
        correlation_id: The correlation ID to set.
    """
    _correlation_id.set(correlation_id)


def correlation_headers() -> dict[str, str]:
    """Headers carrying the current correlation ID to a collaborator.

    Returns:
        A single-entry header dict, or an empty dict if no ID is set.
    """
    correlation_id = get_correlation_id()
    return {CORRELATION_HEADER: correlation_id} if correlation_id else {}


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding correlation_id to every log entry.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with correlation_id added.
    """
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
