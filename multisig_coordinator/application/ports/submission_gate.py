"""Submission gate protocol.

Enforces at-most-once submission of a fully-authorized proposal.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol

from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.receipt import Receipt


@dataclass(frozen=True)
class SubmissionResult:
    """Result of the single winning submission.

    Attributes:
        proposal_id: The submitted proposal (hex signing hash).
        operation_id: Identifier returned by the submission service.
        receipt: Inclusion receipt (success is always True here).
        credential: The composite credential that was submitted.
    """

    proposal_id: str
    operation_id: str
    receipt: Receipt
    credential: CompositeCredential


class SubmissionGateProtocol(Protocol):
    """Protocol for at-most-once submission."""

    @abstractmethod
    async def try_submit(self, proposal_id: str) -> SubmissionResult:
        """Submit a THRESHOLD_MET proposal exactly once.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            NotReadyError: Proposal is still OPEN.
            AlreadySubmittedError: Another caller won the race.
            ProposalClosedError: Proposal already FAILED.
            SubmissionFailedError: The collaborator failed; proposal FAILED.
        """
        ...
