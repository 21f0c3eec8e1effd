"""Submission errors.

NotReadyError is a precondition failure (retry after more confirmations),
AlreadySubmittedError means the submission race was lost, and the two
terminal failures move the proposal to FAILED.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from multisig_coordinator.domain.errors.base import (
    PreconditionError,
    ProposalStateError,
    TerminalFailureError,
)

if TYPE_CHECKING:
    from multisig_coordinator.domain.models.proposal import ProposalStatus
    from multisig_coordinator.domain.models.receipt import Receipt


class NotReadyError(PreconditionError):
    """Raised when submission is attempted before the threshold is met.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        confirmations: Confirmations collected so far.
        threshold: Confirmations required.
    """

    def __init__(self, proposal_id: str, confirmations: int, threshold: int) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            confirmations: Confirmations collected so far.
            threshold: Confirmations required.
        """
        self.proposal_id = proposal_id
        self.confirmations = confirmations
        self.threshold = threshold
        super().__init__(
            f"Proposal {proposal_id} is not ready for submission: "
            f"{confirmations} of {threshold} confirmations"
        )


class AlreadySubmittedError(ProposalStateError):
    """Raised when another caller already won the submission race.

    Callers should treat this as success-by-another-party and read the
    receipt from the proposal once it is SUBMITTED.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        status: SUBMITTING or SUBMITTED.
        receipt: The existing receipt, if submission already completed.
    """

    def __init__(
        self,
        proposal_id: str,
        status: ProposalStatus,
        receipt: Receipt | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            status: SUBMITTING or SUBMITTED.
            receipt: The existing receipt, if available.
        """
        self.proposal_id = proposal_id
        self.status = status
        self.receipt = receipt
        super().__init__(
            f"Proposal {proposal_id} already submitted (status: {status.value})"
        )


class SponsorshipRejectedError(TerminalFailureError):
    """Raised when the sponsorship service refuses to sponsor a payload.

    Attributes:
        reason: The rejection reason reported by the service, verbatim.
        code: Service-specific error code, if any.
    """

    def __init__(self, reason: str, code: int | None = None) -> None:
        """Initialize the error.

        Args:
            reason: The rejection reason reported by the service.
            code: Service-specific error code, if any.
        """
        self.reason = reason
        self.code = code
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"Sponsorship rejected{suffix}: {reason}")


class SubmissionFailedError(TerminalFailureError):
    """Raised when the external submission or its execution failed.

    The proposal is FAILED when this is raised. The collaborator's own
    exception (if any) is chained as ``__cause__``.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        reason: Failure description, verbatim from the collaborator.
        receipt: The inclusion receipt when execution itself reverted.
    """

    def __init__(
        self,
        proposal_id: str,
        reason: str,
        receipt: Receipt | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            reason: Failure description.
            receipt: The inclusion receipt when execution reverted.
        """
        self.proposal_id = proposal_id
        self.reason = reason
        self.receipt = receipt
        super().__init__(f"Submission of proposal {proposal_id} failed: {reason}")
