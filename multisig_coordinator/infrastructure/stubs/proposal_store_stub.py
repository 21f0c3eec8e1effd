"""Proposal store stub implementation.

In-memory implementation of ProposalStoreProtocol for development,
the local demo flow and tests. Every mutating operation runs under one
asyncio.Lock, the in-memory equivalent of a row lock, so concurrent
confirmations and submission claims within one event loop are atomic.
"""

from __future__ import annotations

import asyncio

from structlog import get_logger

from multisig_coordinator.application.ports.proposal_store import (
    ProposalStoreProtocol,
)
from multisig_coordinator.domain.errors import (
    ConcurrentModificationError,
    ProposalNotFoundError,
)
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.proposal import (
    COLLECTING_STATUSES,
    Proposal,
    ProposalStatus,
)
from multisig_coordinator.domain.models.receipt import Receipt

logger = get_logger(__name__)


class ProposalStoreStub(ProposalStoreProtocol):
    """In-memory stub implementation of ProposalStoreProtocol.

    NOT suitable for production use: state is lost with the process and
    is not shared between processes.

    Attributes:
        _proposals: Dictionary mapping proposal_id to Proposal.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._proposals: dict[str, Proposal] = {}
        self._lock = asyncio.Lock()

    async def put(self, proposal: Proposal) -> Proposal:
        """Insert a proposal unless its id is already present.

        Returns:
            The stored proposal (the existing one if already present).
        """
        async with self._lock:
            existing = self._proposals.get(proposal.proposal_id)
            if existing is not None:
                return existing
            self._proposals[proposal.proposal_id] = proposal
            logger.debug("stub_proposal_stored", proposal_id=proposal.proposal_id)
            return proposal

    async def get(self, proposal_id: str) -> Proposal | None:
        """Retrieve a proposal by id."""
        return self._proposals.get(proposal_id)

    async def list_pending(self, account_address: str) -> list[Proposal]:
        """List OPEN and THRESHOLD_MET proposals, oldest first."""
        pending = [
            p
            for p in self._proposals.values()
            if p.account.address == account_address
            and p.status in COLLECTING_STATUSES
        ]
        pending.sort(key=lambda p: p.created_at)
        return pending

    async def add_confirmation(
        self,
        proposal_id: str,
        confirmation: Confirmation,
    ) -> Proposal:
        """Atomically upsert a signer's confirmation.

        Raises:
            ProposalNotFoundError: No proposal under this id.
            ProposalClosedError: Proposal no longer accepts confirmations.
            UnauthorizedSignerError: Signer is not part of the account.
        """
        async with self._lock:
            proposal = self._proposals.get(proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(proposal_id)
            updated = proposal.with_confirmation(confirmation)
            self._proposals[proposal_id] = updated
            return updated

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

        Raises:
            ProposalNotFoundError: No proposal under this id.
            ConcurrentModificationError: Current status is not ``expected``.
            ValueError: ``new`` is not a valid transition from ``expected``.
        """
        async with self._lock:
            proposal = self._proposals.get(proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(proposal_id)

            if proposal.status != expected:
                raise ConcurrentModificationError(
                    proposal_id, expected, proposal.status
                )

            updated = proposal.with_status(
                new,
                operation_id=operation_id,
                receipt=receipt,
                failure_reason=failure_reason,
            )
            self._proposals[proposal_id] = updated
            logger.debug(
                "stub_status_transitioned",
                proposal_id=proposal_id,
                from_status=expected.value,
                to_status=new.value,
            )
            return updated

    # Test helpers

    def clear(self) -> None:
        """Clear all stored proposals."""
        self._proposals.clear()

    def count(self) -> int:
        """Number of stored proposals."""
        return len(self._proposals)
