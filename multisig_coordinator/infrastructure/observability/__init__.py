"""Observability: structured logging and correlation IDs."""

from multisig_coordinator.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    correlation_headers,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from multisig_coordinator.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_signer,
)

__all__: list[str] = [
    "CORRELATION_HEADER",
    "configure_structlog",
    "correlation_headers",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_signer",
    "set_correlation_id",
]
