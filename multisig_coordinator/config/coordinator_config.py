"""Coordinator configuration.

Collaborator endpoints, chain identifiers and timeouts, with environment
variable overrides. Values are read from the process environment; the
CLI loads a ``.env`` file into it first.

Environment Variables (Chain):
- CHAIN_ID: Network chain id mixed into signing hashes (default: 11155111)
- ENTRY_POINT_ADDRESS: Entry point contract (default: v0.6 entry point)
- MODULE_ADDRESS: Verifying 4337 module (default: Safe4337Module v0.2.0)

Environment Variables (Collaborators):
- BUNDLER_URL: Bundler JSON-RPC endpoint
- PAYMASTER_URL: Paymaster JSON-RPC endpoint
- SPONSORSHIP_POLICY_ID: Paymaster sponsorship policy (optional)
- TX_SERVICE_URL: Proposal coordination service root URL
- TX_SERVICE_API_KEY: Coordination service bearer token (optional)

Environment Variables (Timeouts):
- HTTP_TIMEOUT_SECONDS: Per-request HTTP timeout (default: 10.0)
- INCLUSION_POLL_INTERVAL_SECONDS: Receipt polling interval (default: 2.0)
- INCLUSION_TIMEOUT_SECONDS: Give up waiting for inclusion (default: 120.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from multisig_coordinator.domain.models.operation import SigningDomain, is_address
from multisig_coordinator.domain.services.operation_builder import DEFAULT_ENTRY_POINT

DEFAULT_CHAIN_ID = 11155111
DEFAULT_MODULE_ADDRESS = "0xa581c4a4db7175302464ff3c06380bc3270b4037"


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_optional_env(key: str) -> str | None:
    """Get a string environment variable, treating blank as unset."""
    value = os.environ.get(key, "").strip()
    return value or None


@dataclass(frozen=True)
class CoordinatorConfig:
    """Configuration of one signer's coordinator process.

    Attributes:
        chain_id: Network chain id (part of the signing domain).
        entry_point_address: Entry point the operations are submitted to.
        module_address: Verifying module (part of the signing domain).
        bundler_url: Bundler JSON-RPC endpoint.
        paymaster_url: Paymaster JSON-RPC endpoint.
        sponsorship_policy_id: Paymaster sponsorship policy, if any.
        tx_service_url: Proposal coordination service root URL.
        tx_service_api_key: Coordination service bearer token, if any.
        http_timeout_seconds: Per-request HTTP timeout.
        inclusion_poll_interval_seconds: Delay between receipt polls.
        inclusion_timeout_seconds: Give up waiting for inclusion after this.
    """

    chain_id: int = DEFAULT_CHAIN_ID
    entry_point_address: str = DEFAULT_ENTRY_POINT
    module_address: str = DEFAULT_MODULE_ADDRESS
    bundler_url: str | None = None
    paymaster_url: str | None = None
    sponsorship_policy_id: str | None = None
    tx_service_url: str | None = None
    tx_service_api_key: str | None = None
    http_timeout_seconds: float = 10.0
    inclusion_poll_interval_seconds: float = 2.0
    inclusion_timeout_seconds: float = 120.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.chain_id < 0:
            raise ValueError(f"chain_id must be non-negative, got {self.chain_id}")
        for name in ("entry_point_address", "module_address"):
            if not is_address(getattr(self, name)):
                raise ValueError(f"{name} is not an address: {getattr(self, name)!r}")
        if self.http_timeout_seconds <= 0:
            raise ValueError(
                f"http_timeout_seconds must be positive, got {self.http_timeout_seconds}"
            )
        if self.inclusion_poll_interval_seconds <= 0:
            raise ValueError(
                "inclusion_poll_interval_seconds must be positive, "
                f"got {self.inclusion_poll_interval_seconds}"
            )
        if self.inclusion_timeout_seconds < self.inclusion_poll_interval_seconds:
            raise ValueError(
                f"inclusion_timeout_seconds ({self.inclusion_timeout_seconds}) must be "
                f"at least inclusion_poll_interval_seconds "
                f"({self.inclusion_poll_interval_seconds})"
            )

    @classmethod
    def from_environment(cls) -> CoordinatorConfig:
        """Create config from environment variables with defaults.

        Returns:
            CoordinatorConfig with values from environment or defaults.
        """
        return cls(
            chain_id=_get_int_env("CHAIN_ID", DEFAULT_CHAIN_ID),
            entry_point_address=(
                _get_optional_env("ENTRY_POINT_ADDRESS") or DEFAULT_ENTRY_POINT
            ),
            module_address=_get_optional_env("MODULE_ADDRESS") or DEFAULT_MODULE_ADDRESS,
            bundler_url=_get_optional_env("BUNDLER_URL"),
            paymaster_url=_get_optional_env("PAYMASTER_URL"),
            sponsorship_policy_id=_get_optional_env("SPONSORSHIP_POLICY_ID"),
            tx_service_url=_get_optional_env("TX_SERVICE_URL"),
            tx_service_api_key=_get_optional_env("TX_SERVICE_API_KEY"),
            http_timeout_seconds=_get_float_env("HTTP_TIMEOUT_SECONDS", 10.0),
            inclusion_poll_interval_seconds=_get_float_env(
                "INCLUSION_POLL_INTERVAL_SECONDS", 2.0
            ),
            inclusion_timeout_seconds=_get_float_env("INCLUSION_TIMEOUT_SECONDS", 120.0),
        )

    def signing_domain(self) -> SigningDomain:
        """Signing domain derived from the chain and verifying module."""
        return SigningDomain(
            chain_id=self.chain_id,
            verifying_contract=self.module_address.lower(),
        )

    def missing_live_settings(self) -> list[str]:
        """Names of endpoint settings required for live collaborators but unset."""
        required = {
            "BUNDLER_URL": self.bundler_url,
            "PAYMASTER_URL": self.paymaster_url,
            "TX_SERVICE_URL": self.tx_service_url,
        }
        return [name for name, value in required.items() if not value]


# Default config for the in-memory demo flow and tests
DEFAULT_COORDINATOR_CONFIG = CoordinatorConfig()

# Testing config with short timeouts
TEST_COORDINATOR_CONFIG = CoordinatorConfig(
    chain_id=31337,
    bundler_url="http://bundler.test/rpc",
    paymaster_url="http://paymaster.test/rpc",
    tx_service_url="http://tx-service.test",
    http_timeout_seconds=1.0,
    inclusion_poll_interval_seconds=0.01,
    inclusion_timeout_seconds=0.05,
)
