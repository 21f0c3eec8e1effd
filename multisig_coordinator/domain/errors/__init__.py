"""Domain errors for the multisig coordinator.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from CoordinatorError.
"""

from multisig_coordinator.domain.errors.aggregation import (
    DuplicateSignerError,
    InsufficientSignaturesError,
)
from multisig_coordinator.domain.errors.base import (
    CollaboratorError,
    PreconditionError,
    ProposalStateError,
    TerminalFailureError,
    ValidationError,
)
from multisig_coordinator.domain.errors.collaborator import (
    CollaboratorRejectedError,
    CollaboratorUnavailableError,
    InclusionTimeoutError,
    MalformedResponseError,
)
from multisig_coordinator.domain.errors.confirmation import (
    InvalidSignatureError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.errors.operation import (
    InvalidActionError,
    SigningHashMismatchError,
)
from multisig_coordinator.domain.errors.proposal import (
    AccountMismatchError,
    ConcurrentModificationError,
    DuplicateProposalError,
    ProposalClosedError,
    ProposalNotFoundError,
)
from multisig_coordinator.domain.errors.submission import (
    AlreadySubmittedError,
    NotReadyError,
    SponsorshipRejectedError,
    SubmissionFailedError,
)

__all__: list[str] = [
    # Categories
    "CollaboratorError",
    "PreconditionError",
    "ProposalStateError",
    "TerminalFailureError",
    "ValidationError",
    # Operation
    "InvalidActionError",
    "SigningHashMismatchError",
    # Confirmation
    "InvalidSignatureError",
    "UnauthorizedSignerError",
    # Aggregation
    "DuplicateSignerError",
    "InsufficientSignaturesError",
    # Proposal
    "AccountMismatchError",
    "ConcurrentModificationError",
    "DuplicateProposalError",
    "ProposalClosedError",
    "ProposalNotFoundError",
    # Submission
    "AlreadySubmittedError",
    "NotReadyError",
    "SponsorshipRejectedError",
    "SubmissionFailedError",
    # Collaborator
    "CollaboratorRejectedError",
    "CollaboratorUnavailableError",
    "InclusionTimeoutError",
    "MalformedResponseError",
]
