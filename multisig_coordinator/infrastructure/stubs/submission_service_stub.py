"""Submission service stub for testing and the local demo flow.

Records every submitted (payload, credential) pair and returns a
successful receipt, unless a failure, a reverted execution or an
inclusion timeout is scripted. An optional latency makes concurrent
submission races observable.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import blake3

from multisig_coordinator.domain.errors import InclusionTimeoutError
from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.operation import OperationPayload
from multisig_coordinator.domain.models.receipt import Receipt


@dataclass(frozen=True)
class SubmittedOperation:
    """Record of one submit() call (for test assertions).

    Attributes:
        operation_id: Identifier returned to the caller.
        payload: The payload submitted.
        credential: The composite credential submitted.
    """

    operation_id: str
    payload: OperationPayload
    credential: CompositeCredential


class SubmissionServiceStub:
    """Stub implementation of SubmissionServiceProtocol.

    Attributes:
        submitted: All submit() calls, in call order.
    """

    def __init__(self, latency_seconds: float = 0.0) -> None:
        """Initialize the stub.

        Args:
            latency_seconds: Delay applied inside submit().
        """
        self._latency = latency_seconds
        self.submitted: list[SubmittedOperation] = []
        self._submit_error: Exception | None = None
        self._inclusion_error: Exception | None = None
        self._revert = False

    async def submit(
        self,
        payload: OperationPayload,
        credential: CompositeCredential,
    ) -> str:
        """Record the submission and return a deterministic operation id.

        Raises:
            Exception: The scripted submit error, if any.
        """
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._submit_error is not None:
            raise self._submit_error

        digest = blake3.blake3(
            payload.call_data + payload.nonce.to_bytes(32, "big") + credential.encoded
        ).digest()
        operation_id = "0x" + digest.hex()
        self.submitted.append(
            SubmittedOperation(
                operation_id=operation_id, payload=payload, credential=credential
            )
        )
        return operation_id

    async def await_inclusion(self, operation_id: str) -> Receipt:
        """Return the receipt of a previously submitted operation.

        Raises:
            InclusionTimeoutError: If the operation was never submitted.
            Exception: The scripted inclusion error, if any.
        """
        if self._inclusion_error is not None:
            raise self._inclusion_error
        if not any(s.operation_id == operation_id for s in self.submitted):
            raise InclusionTimeoutError(operation_id, 0.0)

        tx_hash = "0x" + blake3.blake3(operation_id.encode("ascii")).digest().hex()
        return Receipt(
            success=not self._revert,
            operation_id=operation_id,
            transaction_hash=tx_hash,
        )

    # Test helpers

    def set_submit_error(self, error: Exception | None) -> None:
        """Raise ``error`` from every following submit()."""
        self._submit_error = error

    def set_inclusion_error(self, error: Exception | None) -> None:
        """Raise ``error`` from every following await_inclusion()."""
        self._inclusion_error = error

    def set_revert(self, revert: bool = True) -> None:
        """Report execution as reverted (receipt.success False)."""
        self._revert = revert

    @property
    def submit_count(self) -> int:
        """Number of successful submit() calls."""
        return len(self.submitted)
