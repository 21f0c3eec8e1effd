"""Unit tests for CoordinatorConfig.

Tests for coordinator configuration including:
- Default value validation
- Environment variable loading
- Input validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from multisig_coordinator.config.coordinator_config import (
    DEFAULT_CHAIN_ID,
    DEFAULT_COORDINATOR_CONFIG,
    DEFAULT_MODULE_ADDRESS,
    TEST_COORDINATOR_CONFIG,
    CoordinatorConfig,
)
from multisig_coordinator.domain.services.operation_builder import DEFAULT_ENTRY_POINT

ENV_KEYS = [
    "CHAIN_ID",
    "ENTRY_POINT_ADDRESS",
    "MODULE_ADDRESS",
    "BUNDLER_URL",
    "PAYMASTER_URL",
    "SPONSORSHIP_POLICY_ID",
    "TX_SERVICE_URL",
    "TX_SERVICE_API_KEY",
    "HTTP_TIMEOUT_SECONDS",
    "INCLUSION_POLL_INTERVAL_SECONDS",
    "INCLUSION_TIMEOUT_SECONDS",
]


@pytest.fixture
def clean_env() -> dict[str, str]:
    """Process environment without any coordinator settings."""
    return {k: v for k, v in os.environ.items() if k not in ENV_KEYS}


class TestCoordinatorConfig:
    """Tests for CoordinatorConfig dataclass."""

    class TestDefaults:
        """Tests for default configuration values."""

        def test_default_chain(self) -> None:
            """Default chain is Sepolia."""
            assert CoordinatorConfig().chain_id == DEFAULT_CHAIN_ID == 11155111

        def test_default_contracts(self) -> None:
            config = CoordinatorConfig()
            assert config.entry_point_address == DEFAULT_ENTRY_POINT
            assert config.module_address == DEFAULT_MODULE_ADDRESS

        def test_default_timeouts(self) -> None:
            config = CoordinatorConfig()
            assert config.http_timeout_seconds == 10.0
            assert config.inclusion_poll_interval_seconds == 2.0
            assert config.inclusion_timeout_seconds == 120.0

        def test_endpoints_unset(self) -> None:
            config = DEFAULT_COORDINATOR_CONFIG
            assert config.bundler_url is None
            assert config.paymaster_url is None
            assert config.tx_service_url is None

    class TestValidation:
        """Tests for configuration validation."""

        def test_chain_id_non_negative(self) -> None:
            with pytest.raises(ValueError, match="chain_id must be non-negative"):
                CoordinatorConfig(chain_id=-1)

        def test_entry_point_must_be_address(self) -> None:
            with pytest.raises(ValueError, match="entry_point_address"):
                CoordinatorConfig(entry_point_address="entrypoint")

        def test_module_must_be_address(self) -> None:
            with pytest.raises(ValueError, match="module_address"):
                CoordinatorConfig(module_address="0x1234")

        def test_http_timeout_positive(self) -> None:
            with pytest.raises(ValueError, match="http_timeout_seconds"):
                CoordinatorConfig(http_timeout_seconds=0)

        def test_poll_interval_positive(self) -> None:
            with pytest.raises(ValueError, match="inclusion_poll_interval_seconds"):
                CoordinatorConfig(inclusion_poll_interval_seconds=0)

        def test_timeout_covers_poll_interval(self) -> None:
            """Inclusion timeout must allow at least one poll."""
            with pytest.raises(ValueError, match="must be at least"):
                CoordinatorConfig(
                    inclusion_poll_interval_seconds=5.0,
                    inclusion_timeout_seconds=1.0,
                )

    class TestFromEnvironment:
        """Tests for environment variable loading."""

        def test_defaults_without_env(self, clean_env: dict[str, str]) -> None:
            with patch.dict(os.environ, clean_env, clear=True):
                config = CoordinatorConfig.from_environment()
            assert config == CoordinatorConfig()

        def test_reads_env(self, clean_env: dict[str, str]) -> None:
            env = {
                **clean_env,
                "CHAIN_ID": "84532",
                "BUNDLER_URL": "https://bundler.example/rpc",
                "PAYMASTER_URL": "https://paymaster.example/rpc",
                "SPONSORSHIP_POLICY_ID": "policy-7",
                "TX_SERVICE_URL": "https://tx.example",
                "TX_SERVICE_API_KEY": "key",
                "INCLUSION_TIMEOUT_SECONDS": "30",
            }
            with patch.dict(os.environ, env, clear=True):
                config = CoordinatorConfig.from_environment()

            assert config.chain_id == 84532
            assert config.bundler_url == "https://bundler.example/rpc"
            assert config.paymaster_url == "https://paymaster.example/rpc"
            assert config.sponsorship_policy_id == "policy-7"
            assert config.tx_service_url == "https://tx.example"
            assert config.tx_service_api_key == "key"
            assert config.inclusion_timeout_seconds == 30.0

        def test_invalid_numbers_fall_back(self, clean_env: dict[str, str]) -> None:
            env = {**clean_env, "CHAIN_ID": "sepolia", "HTTP_TIMEOUT_SECONDS": "fast"}
            with patch.dict(os.environ, env, clear=True):
                config = CoordinatorConfig.from_environment()

            assert config.chain_id == DEFAULT_CHAIN_ID
            assert config.http_timeout_seconds == 10.0

        def test_blank_values_are_unset(self, clean_env: dict[str, str]) -> None:
            env = {**clean_env, "SPONSORSHIP_POLICY_ID": "  ", "MODULE_ADDRESS": ""}
            with patch.dict(os.environ, env, clear=True):
                config = CoordinatorConfig.from_environment()

            assert config.sponsorship_policy_id is None
            assert config.module_address == DEFAULT_MODULE_ADDRESS

    class TestDerived:
        """Tests for derived values."""

        def test_signing_domain(self) -> None:
            config = CoordinatorConfig(
                chain_id=5, module_address="0xA581C4A4DB7175302464FF3C06380BC3270B4037"
            )
            domain = config.signing_domain()
            assert domain.chain_id == 5
            assert domain.verifying_contract == DEFAULT_MODULE_ADDRESS

        def test_missing_live_settings(self) -> None:
            config = CoordinatorConfig(bundler_url="https://bundler.example")
            assert config.missing_live_settings() == ["PAYMASTER_URL", "TX_SERVICE_URL"]

        def test_test_config_is_complete(self) -> None:
            assert TEST_COORDINATOR_CONFIG.missing_live_settings() == []
