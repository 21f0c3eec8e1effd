"""Configuration for the multisig coordinator."""

from multisig_coordinator.config.coordinator_config import (
    DEFAULT_COORDINATOR_CONFIG,
    TEST_COORDINATOR_CONFIG,
    CoordinatorConfig,
)

__all__: list[str] = [
    "CoordinatorConfig",
    "DEFAULT_COORDINATOR_CONFIG",
    "TEST_COORDINATOR_CONFIG",
]
