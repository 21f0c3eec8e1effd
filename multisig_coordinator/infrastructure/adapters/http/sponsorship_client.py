"""Paymaster sponsorship client.

Calls ``pm_sponsorUserOperation`` with the unsigned user operation, the
entry point and the sponsorship policy. The paymaster returns the
``paymasterAndData`` to attach and may re-estimate gas.
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ValidationError
from structlog import get_logger

from multisig_coordinator.domain.errors import (
    MalformedResponseError,
    SponsorshipRejectedError,
)
from multisig_coordinator.domain.models.operation import (
    GasParams,
    OperationPayload,
    parse_hex_bytes,
)
from multisig_coordinator.infrastructure.adapters.http.json_rpc import (
    JsonRpcClient,
    parse_hex_quantity,
    to_user_operation,
)

logger = get_logger(__name__)

SERVICE_NAME = "sponsorship"


class SponsorshipResultModel(BaseModel):
    """Result of ``pm_sponsorUserOperation``."""

    paymasterAndData: str
    callGasLimit: str | None = None
    verificationGasLimit: str | None = None
    preVerificationGas: str | None = None


class PaymasterSponsorshipClient:
    """SponsorshipServiceProtocol implementation over JSON-RPC.

    Example:
        >>> sponsor = PaymasterSponsorshipClient(
        ...     url=config.paymaster_url,
        ...     entry_point=config.entry_point_address,
        ...     policy_id=config.sponsorship_policy_id,
        ... )
        >>> sponsored = await sponsor.sponsor(payload)
    """

    def __init__(
        self,
        url: str,
        entry_point: str,
        policy_id: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Paymaster JSON-RPC endpoint.
            entry_point: Entry point address passed to the paymaster.
            policy_id: Sponsorship policy id, if the paymaster requires one.
            timeout_seconds: Per-request timeout.
            transport: Optional transport (tests use httpx.MockTransport).
        """
        self._rpc = JsonRpcClient(url, SERVICE_NAME, timeout_seconds, transport)
        self._entry_point = entry_point
        self._policy_id = policy_id

    async def sponsor(self, payload: OperationPayload) -> OperationPayload:
        """Request sponsorship for a payload.

        Raises:
            SponsorshipRejectedError: The paymaster returned an RPC error.
            CollaboratorUnavailableError: The paymaster could not be reached.
            MalformedResponseError: The result failed validation.
        """
        context = {"sponsorshipPolicyId": self._policy_id} if self._policy_id else {}
        response = await self._rpc.call(
            "pm_sponsorUserOperation",
            [to_user_operation(payload), self._entry_point, context],
        )

        if response.error is not None:
            logger.warning(
                "sponsorship_rejected",
                sender=payload.sender,
                code=response.error.code,
                reason=response.error.message,
            )
            raise SponsorshipRejectedError(response.error.message, response.error.code)

        try:
            result = SponsorshipResultModel.model_validate(response.result)
            paymaster_and_data = parse_hex_bytes(result.paymasterAndData)
            gas = GasParams(
                call_gas_limit=self._quantity(
                    result.callGasLimit, payload.gas.call_gas_limit
                ),
                verification_gas_limit=self._quantity(
                    result.verificationGasLimit, payload.gas.verification_gas_limit
                ),
                pre_verification_gas=self._quantity(
                    result.preVerificationGas, payload.gas.pre_verification_gas
                ),
                max_fee_per_gas=payload.gas.max_fee_per_gas,
                max_priority_fee_per_gas=payload.gas.max_priority_fee_per_gas,
            )
        except (ValidationError, ValueError) as e:
            raise MalformedResponseError(SERVICE_NAME, str(e)) from e

        if not paymaster_and_data:
            raise MalformedResponseError(SERVICE_NAME, "empty paymasterAndData")

        logger.info("sponsorship_granted", sender=payload.sender)
        return payload.with_sponsorship(paymaster_and_data, gas=gas)

    @staticmethod
    def _quantity(value: str | None, fallback: int) -> int:
        return parse_hex_quantity(value) if value is not None else fallback

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._rpc.aclose()
