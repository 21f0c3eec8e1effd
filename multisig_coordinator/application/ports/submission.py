"""Submission and inclusion service port."""

from __future__ import annotations

from typing import Protocol

from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.operation import OperationPayload
from multisig_coordinator.domain.models.receipt import Receipt


class SubmissionServiceProtocol(Protocol):
    """Protocol for broadcasting an authorized operation and tracking it."""

    async def submit(
        self,
        payload: OperationPayload,
        credential: CompositeCredential,
    ) -> str:
        """Broadcast a fully-authorized operation.

        Args:
            payload: The sponsored payload that was signed.
            credential: The composite credential authorizing it.

        Returns:
            Operation identifier used to await inclusion.
        """
        ...

    async def await_inclusion(self, operation_id: str) -> Receipt:
        """Wait until the operation is included.

        Args:
            operation_id: Identifier returned by submit().

        Returns:
            Receipt with the execution outcome.

        Raises:
            InclusionTimeoutError: Not included within the configured timeout.
        """
        ...
