"""Error categories for the multisig coordinator.

Every concrete error belongs to exactly one category, which tells the
caller how to react:

- ValidationError: the single offending call is rejected, state unaffected.
- PreconditionError: not yet possible, retry after more confirmations.
- ProposalStateError: the proposal's lifecycle forbids the operation.
- TerminalFailureError: the proposal moved to FAILED, never auto-retried.
- CollaboratorError: an external collaborator was unreachable or returned
  a response that failed boundary validation.
"""

from multisig_coordinator.domain.exceptions import CoordinatorError


class ValidationError(CoordinatorError):
    """Raised when a single call carries invalid input.

    The proposal (if any) is never modified by a call that raises
    a ValidationError.
    """

    pass


class PreconditionError(CoordinatorError):
    """Raised when an operation is not possible yet.

    These are recoverable outcomes: the caller should retry later,
    typically after more confirmations have arrived.
    """

    pass


class ProposalStateError(CoordinatorError):
    """Raised when the proposal lifecycle forbids the requested operation."""

    pass


class TerminalFailureError(CoordinatorError):
    """Raised when a proposal reached the FAILED state.

    Terminal failures are never retried automatically; retry policy
    belongs to the caller.
    """

    pass


class CollaboratorError(CoordinatorError):
    """Raised when an external collaborator fails or misbehaves."""

    pass
