"""Sponsorship service port.

A third party agrees to cover execution cost by augmenting the payload
with sponsorship data before it is signed.
"""

from __future__ import annotations

from typing import Protocol

from multisig_coordinator.domain.models.operation import OperationPayload


class SponsorshipServiceProtocol(Protocol):
    """Protocol for the gas sponsorship collaborator."""

    async def sponsor(self, payload: OperationPayload) -> OperationPayload:
        """Sponsor a payload.

        Args:
            payload: The canonical, unsponsored payload.

        Returns:
            The payload augmented with sponsorship (and possibly
            re-estimated gas) fields, ready for signing.

        Raises:
            SponsorshipRejectedError: The sponsor refused the payload.
            CollaboratorUnavailableError: The sponsor could not be reached.
            MalformedResponseError: The sponsor's response was invalid.
        """
        ...
