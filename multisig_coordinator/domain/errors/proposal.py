"""Proposal lifecycle errors.

These errors signal that the proposal's current status forbids the
requested operation. They never modify the proposal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from multisig_coordinator.domain.errors.base import ProposalStateError

if TYPE_CHECKING:
    from multisig_coordinator.domain.models.proposal import ProposalStatus


class DuplicateProposalError(ProposalStateError):
    """Raised when a different payload is registered under an existing hash.

    Re-registering the identical payload is a no-op and never raises.

    Attributes:
        proposal_id: The signing hash (hex) already registered.
        status: Status of the existing proposal.
    """

    def __init__(self, proposal_id: str, status: ProposalStatus) -> None:
        """Initialize the error.

        Args:
            proposal_id: The signing hash (hex) already registered.
            status: Status of the existing proposal.
        """
        self.proposal_id = proposal_id
        self.status = status
        super().__init__(
            f"Proposal {proposal_id} already exists with a different payload "
            f"(status: {status.value})"
        )


class ProposalNotFoundError(ProposalStateError):
    """Raised when no proposal is registered under the given id.

    Attributes:
        proposal_id: The signing hash (hex) that was looked up.
    """

    def __init__(self, proposal_id: str) -> None:
        """Initialize the error.

        Args:
            proposal_id: The signing hash (hex) that was looked up.
        """
        self.proposal_id = proposal_id
        super().__init__(f"Proposal not found: {proposal_id}")


class ProposalClosedError(ProposalStateError):
    """Raised when an operation targets a proposal past collection.

    Confirmations are only accepted while OPEN or THRESHOLD_MET, and a
    FAILED proposal cannot be submitted again. The recorded failure reason
    is carried verbatim so the caller sees the original cause.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        status: The proposal's current status.
        failure_reason: Recorded failure cause when status is FAILED.
    """

    def __init__(
        self,
        proposal_id: str,
        status: ProposalStatus,
        failure_reason: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            status: The proposal's current status.
            failure_reason: Recorded failure cause when status is FAILED.
        """
        self.proposal_id = proposal_id
        self.status = status
        self.failure_reason = failure_reason
        message = f"Proposal {proposal_id} is closed (status: {status.value})"
        if failure_reason:
            message = f"{message}: {failure_reason}"
        super().__init__(message)


class ConcurrentModificationError(ProposalStateError):
    """Raised when a compare-and-swap on proposal status fails.

    The expected status no longer matches the stored status because
    another party changed the proposal first. Callers re-read the
    proposal and decide how to proceed.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        expected_status: The status the CAS expected.
        actual_status: The status actually stored.
    """

    def __init__(
        self,
        proposal_id: str,
        expected_status: ProposalStatus,
        actual_status: ProposalStatus,
    ) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            expected_status: The status the CAS expected.
            actual_status: The status actually stored.
        """
        self.proposal_id = proposal_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Concurrent modification detected for proposal {proposal_id}. "
            f"Expected status: {expected_status.value}, "
            f"actual: {actual_status.value}"
        )


class AccountMismatchError(ProposalStateError):
    """Raised when a stored proposal belongs to another account configuration.

    A proposal snapshots the signer set and threshold at registration.
    A collector only registers or confirms proposals whose snapshot
    matches its own configuration.

    Attributes:
        proposal_id: The proposal's signing hash (hex).
        account_address: Address of the collector's account.
    """

    def __init__(self, proposal_id: str, account_address: str) -> None:
        """Initialize the error.

        Args:
            proposal_id: The proposal's signing hash (hex).
            account_address: Address of the collector's account.
        """
        self.proposal_id = proposal_id
        self.account_address = account_address
        super().__init__(
            f"Proposal {proposal_id} was registered under a different "
            f"configuration of account {account_address}"
        )
