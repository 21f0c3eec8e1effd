"""Bundler submission client.

Submits the signed user operation with ``eth_sendUserOperation`` and
polls ``eth_getUserOperationReceipt`` until the operation is included or
the inclusion timeout elapses.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError
from structlog import get_logger

from multisig_coordinator.domain.errors import (
    CollaboratorRejectedError,
    InclusionTimeoutError,
    MalformedResponseError,
)
from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.operation import OperationPayload
from multisig_coordinator.domain.models.receipt import Receipt
from multisig_coordinator.infrastructure.adapters.http.json_rpc import (
    JsonRpcClient,
    to_user_operation,
)

logger = get_logger(__name__)

SERVICE_NAME = "bundler"


class TransactionReceiptModel(BaseModel):
    """The bundle transaction receipt nested in a user operation receipt."""

    transactionHash: str


class UserOperationReceiptModel(BaseModel):
    """Result of ``eth_getUserOperationReceipt``."""

    userOpHash: str
    success: bool
    receipt: TransactionReceiptModel
    actualGasCost: str | None = None
    actualGasUsed: str | None = None
    reason: str | None = None
    logs: list[dict[str, Any]] = Field(default_factory=list)


class BundlerSubmissionClient:
    """SubmissionServiceProtocol implementation over JSON-RPC.

    Example:
        >>> bundler = BundlerSubmissionClient(
        ...     url=config.bundler_url,
        ...     entry_point=config.entry_point_address,
        ... )
        >>> operation_id = await bundler.submit(payload, credential)
        >>> receipt = await bundler.await_inclusion(operation_id)
    """

    def __init__(
        self,
        url: str,
        entry_point: str,
        timeout_seconds: float = 10.0,
        poll_interval_seconds: float = 2.0,
        inclusion_timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Bundler JSON-RPC endpoint.
            entry_point: Entry point the operation is submitted to.
            timeout_seconds: Per-request timeout.
            poll_interval_seconds: Delay between receipt polls.
            inclusion_timeout_seconds: Give up waiting for inclusion after this.
            transport: Optional transport (tests use httpx.MockTransport).
        """
        self._rpc = JsonRpcClient(url, SERVICE_NAME, timeout_seconds, transport)
        self._entry_point = entry_point
        self._poll_interval = poll_interval_seconds
        self._inclusion_timeout = inclusion_timeout_seconds

    async def submit(
        self,
        payload: OperationPayload,
        credential: CompositeCredential,
    ) -> str:
        """Send the signed user operation.

        Returns:
            The user operation hash reported by the bundler.

        Raises:
            CollaboratorRejectedError: The bundler refused the operation.
            CollaboratorUnavailableError: The bundler could not be reached.
            MalformedResponseError: The result is not a hash string.
        """
        response = await self._rpc.call(
            "eth_sendUserOperation",
            [to_user_operation(payload, credential.encoded), self._entry_point],
        )
        if response.error is not None:
            raise CollaboratorRejectedError(
                SERVICE_NAME, response.error.message, response.error.code
            )
        if not isinstance(response.result, str) or not response.result.startswith("0x"):
            raise MalformedResponseError(
                SERVICE_NAME, f"expected user operation hash, got {response.result!r}"
            )

        logger.info("user_operation_sent", operation_id=response.result)
        return response.result

    async def await_inclusion(self, operation_id: str) -> Receipt:
        """Poll for the operation's receipt.

        Raises:
            InclusionTimeoutError: Not included within the inclusion timeout.
            CollaboratorRejectedError: The bundler returned an RPC error.
            MalformedResponseError: The receipt failed validation.
        """
        log = logger.bind(operation_id=operation_id)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._inclusion_timeout
        polls = 0

        while True:
            response = await self._rpc.call(
                "eth_getUserOperationReceipt", [operation_id]
            )
            polls += 1
            if response.error is not None:
                raise CollaboratorRejectedError(
                    SERVICE_NAME, response.error.message, response.error.code
                )

            if response.result is not None:
                try:
                    result = UserOperationReceiptModel.model_validate(response.result)
                except ValidationError as e:
                    raise MalformedResponseError(SERVICE_NAME, str(e)) from e

                log.info("user_operation_included", success=result.success, polls=polls)
                return Receipt(
                    success=result.success,
                    operation_id=result.userOpHash,
                    transaction_hash=result.receipt.transactionHash,
                    details={
                        "actual_gas_cost": result.actualGasCost,
                        "actual_gas_used": result.actualGasUsed,
                        "reason": result.reason,
                    },
                )

            if loop.time() + self._poll_interval > deadline:
                log.warning("user_operation_inclusion_timeout", polls=polls)
                raise InclusionTimeoutError(operation_id, self._inclusion_timeout)

            await asyncio.sleep(self._poll_interval)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._rpc.aclose()
