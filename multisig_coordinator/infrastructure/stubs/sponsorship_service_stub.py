"""Sponsorship service stub for testing and the local demo flow.

Sponsors every payload by attaching a fixed paymaster address and the
configured policy id, and fills in gas estimates the proposer left at
zero. Rejections and outages can be scripted.
"""

from __future__ import annotations

from multisig_coordinator.domain.errors import (
    CollaboratorUnavailableError,
    SponsorshipRejectedError,
)
from multisig_coordinator.domain.models.operation import (
    GasParams,
    OperationPayload,
    parse_hex_bytes,
)

DEFAULT_STUB_PAYMASTER = "0x" + "a1" * 20

# Estimates used when the proposer leaves gas at zero
STUB_GAS_ESTIMATE = GasParams(
    call_gas_limit=200_000,
    verification_gas_limit=150_000,
    pre_verification_gas=50_000,
    max_fee_per_gas=1_000_000_000,
    max_priority_fee_per_gas=1_000_000,
)


class SponsorshipServiceStub:
    """Stub implementation of SponsorshipServiceProtocol.

    Attributes:
        sponsored: Payloads received by sponsor(), in call order.
    """

    def __init__(
        self,
        paymaster: str = DEFAULT_STUB_PAYMASTER,
        policy_id: str | None = None,
    ) -> None:
        """Initialize the stub.

        Args:
            paymaster: Paymaster address placed in paymaster_and_data.
            policy_id: Sponsorship policy id appended as UTF-8 bytes.
        """
        self._paymaster_and_data = parse_hex_bytes(paymaster) + (
            policy_id.encode("utf-8") if policy_id else b""
        )
        self.sponsored: list[OperationPayload] = []
        self._reject_reason: str | None = None
        self._reject_code: int | None = None
        self._unavailable = False

    async def sponsor(self, payload: OperationPayload) -> OperationPayload:
        """Sponsor a payload.

        Raises:
            SponsorshipRejectedError: If rejection is configured.
            CollaboratorUnavailableError: If an outage is configured.
        """
        self.sponsored.append(payload)

        if self._unavailable:
            raise CollaboratorUnavailableError("sponsorship", "simulated outage")
        if self._reject_reason is not None:
            raise SponsorshipRejectedError(self._reject_reason, self._reject_code)

        gas = STUB_GAS_ESTIMATE if payload.gas == GasParams() else None
        return payload.with_sponsorship(self._paymaster_and_data, gas=gas)

    # Test helpers

    def set_reject(self, reason: str, code: int | None = None) -> None:
        """Reject every following sponsorship request."""
        self._reject_reason = reason
        self._reject_code = code

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Simulate the sponsor being unreachable."""
        self._unavailable = unavailable

    @property
    def call_count(self) -> int:
        """Number of sponsor() calls."""
        return len(self.sponsored)
