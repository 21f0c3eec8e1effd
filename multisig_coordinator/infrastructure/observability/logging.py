"""Structured logging configuration with structlog.

Production output is one JSON object per line; development output is
colored console text. Every entry carries level, ISO timestamp and the
current correlation ID when one is set.

Usage:
    from multisig_coordinator.infrastructure.observability import (
        configure_structlog,
    )

    configure_structlog(environment="development")
"""

from __future__ import annotations

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from multisig_coordinator.infrastructure.observability.correlation import (
    correlation_id_processor,
)

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level() -> int:
    """Get the configured log level from environment."""
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog for the coordinator.

    Should be called once at process startup.

    Args:
        environment: 'production' for JSON output, anything else for console.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_signer(
    signer: str, component: str = "multisig"
) -> structlog.typing.FilteringBoundLogger:
    """Get a logger pre-bound to one signer process.

    Args:
        signer: Identity (hex public key) of the local signer.
        component: The component name (default: "multisig").

    Returns:
        A bound logger with signer and component set.
    """
    return structlog.get_logger().bind(signer=signer, component=component)
