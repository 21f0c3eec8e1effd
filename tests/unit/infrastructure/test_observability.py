"""Unit tests for correlation IDs and logging configuration."""

from __future__ import annotations

import structlog

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


class TestCorrelation:
    def setup_method(self) -> None:
        set_correlation_id("")

    def teardown_method(self) -> None:
        set_correlation_id("")

    def test_generate_is_unique(self) -> None:
        assert generate_correlation_id() != generate_correlation_id()

    def test_set_and_get(self) -> None:
        set_correlation_id("flow-42")
        assert get_correlation_id() == "flow-42"

    def test_headers(self) -> None:
        assert correlation_headers() == {}
        set_correlation_id("flow-42")
        assert correlation_headers() == {CORRELATION_HEADER: "flow-42"}

    def test_processor_adds_id(self) -> None:
        set_correlation_id("flow-42")
        event = correlation_id_processor(None, "info", {"event": "x"})
        assert event["correlation_id"] == "flow-42"

    def test_processor_without_id(self) -> None:
        event = correlation_id_processor(None, "info", {"event": "x"})
        assert "correlation_id" not in event


class TestLogging:
    def teardown_method(self) -> None:
        structlog.reset_defaults()

    def test_production_renders_json(self) -> None:
        configure_structlog("production")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert correlation_id_processor in processors

    def test_development_renders_console(self) -> None:
        configure_structlog("development")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_signer_logger_binds_context(self) -> None:
        with structlog.testing.capture_logs() as logs:
            get_logger_for_signer("ab" * 32).info("confirmation_signed")

        assert logs[0]["signer"] == "ab" * 32
        assert logs[0]["component"] == "multisig"
        assert logs[0]["event"] == "confirmation_signed"
