"""Signature collector protocol.

Manages the lifecycle of proposed operations: registration, confirmation
intake from independent signers and threshold tracking.
Follows hexagonal architecture with port/adapter pattern.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol

from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.operation import OperationPayload
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus


@dataclass(frozen=True)
class ConfirmationResult:
    """Result of a successful confirmation submission.

    Attributes:
        proposal_id: The confirmed proposal (hex signing hash).
        signer: Canonical identity of the confirming signer.
        confirmation_count: Distinct confirmations after this call.
        threshold: Confirmations required by the account.
        status: Proposal status after this call.
        replaced: Whether a different earlier signature was overwritten.
        unchanged: Whether the identical confirmation was already stored.
    """

    proposal_id: str
    signer: str
    confirmation_count: int
    threshold: int
    status: ProposalStatus
    replaced: bool = False
    unchanged: bool = False

    @property
    def threshold_met(self) -> bool:
        """Whether the proposal has reached its threshold."""
        return self.confirmation_count >= self.threshold


class SignatureCollectorProtocol(Protocol):
    """Protocol for collecting confirmations on proposals."""

    @abstractmethod
    async def register_proposal(
        self,
        payload: OperationPayload,
        signing_hash: bytes,
    ) -> str:
        """Register a proposal, idempotently.

        Returns:
            The proposal id (hex signing hash).

        Raises:
            SigningHashMismatchError: Hash does not match payload and domain.
            DuplicateProposalError: A different payload owns this hash.
        """
        ...

    @abstractmethod
    async def submit_confirmation(
        self,
        proposal_id: str,
        signer: str,
        signature: bytes,
    ) -> ConfirmationResult:
        """Verify and store one signer's confirmation.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            UnauthorizedSignerError: Signer not part of the account.
            InvalidSignatureError: Signature does not verify.
            ProposalClosedError: Proposal no longer accepts confirmations.
        """
        ...

    @abstractmethod
    async def get_confirmations(self, proposal_id: str) -> list[Confirmation]:
        """Confirmations ordered by signer registration order."""
        ...

    @abstractmethod
    async def get_proposal(self, proposal_id: str) -> Proposal:
        """Current state of a proposal."""
        ...

    @abstractmethod
    async def list_pending(self) -> list[Proposal]:
        """Pending proposals of the account, oldest first."""
        ...
