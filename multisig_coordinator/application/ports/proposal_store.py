"""Durable proposal store port.

Separates persistence and transport of proposals from coordination
logic. Proposals are keyed by signing hash (hex) and every mutating
operation is atomic per key:

- put: insert-if-absent, returns the stored proposal
- add_confirmation: atomic upsert of one signer slot plus threshold
  re-evaluation
- transition_status: atomic compare-and-swap on status

Operations on different proposals need no coordination.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.models.receipt import Receipt


class ProposalStoreProtocol(Protocol):
    """Repository protocol for proposal persistence.

    Implementations must never perform read-modify-write without
    isolation; concurrent writers on the same proposal must not lose
    updates.
    """

    @abstractmethod
    async def put(self, proposal: Proposal) -> Proposal:
        """Store a proposal unless one exists under the same id.

        Args:
            proposal: A newly opened proposal.

        Returns:
            The stored proposal: the argument if it was inserted,
            otherwise the existing one (unchanged).
        """
        ...

    @abstractmethod
    async def get(self, proposal_id: str) -> Proposal | None:
        """Retrieve a proposal by signing hash.

        Args:
            proposal_id: Hex signing hash.

        Returns:
            The proposal if found, None otherwise.
        """
        ...

    @abstractmethod
    async def list_pending(self, account_address: str) -> list[Proposal]:
        """List OPEN and THRESHOLD_MET proposals of an account.

        Args:
            account_address: Lowercase account address.

        Returns:
            Pending proposals ordered by created_at ascending.
        """
        ...

    @abstractmethod
    async def add_confirmation(
        self,
        proposal_id: str,
        confirmation: Confirmation,
    ) -> Proposal:
        """Atomically store a signer's confirmation.

        Overwrites the signer's previous confirmation (last write wins)
        and promotes OPEN to THRESHOLD_MET when the threshold is reached.

        Args:
            proposal_id: Hex signing hash.
            confirmation: A verified confirmation.

        Returns:
            The updated proposal.

        Raises:
            ProposalNotFoundError: No proposal under this id.
            ProposalClosedError: Proposal no longer accepts confirmations.
            UnauthorizedSignerError: Signer is not part of the account.
        """
        ...

    @abstractmethod
    async def transition_status(
        self,
        proposal_id: str,
        expected: ProposalStatus,
        new: ProposalStatus,
        *,
        operation_id: str | None = None,
        receipt: Receipt | None = None,
        failure_reason: str | None = None,
    ) -> Proposal:
        """Atomic status transition using compare-and-swap.

        Args:
            proposal_id: Hex signing hash.
            expected: Status the proposal must currently have.
            new: Target status; must be valid from ``expected``.
            operation_id: Submission identifier to record.
            receipt: Receipt to record.
            failure_reason: Failure cause to record.

        Returns:
            The updated proposal.

        Raises:
            ProposalNotFoundError: No proposal under this id.
            ConcurrentModificationError: Current status is not ``expected``.
        """
        ...
