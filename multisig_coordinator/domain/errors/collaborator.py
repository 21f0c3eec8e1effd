"""External collaborator errors.

Raised by adapters at the collaborator boundary. Responses that fail
validation are rejected here, never merged into domain types.
"""

from __future__ import annotations

from multisig_coordinator.domain.errors.base import CollaboratorError


class CollaboratorUnavailableError(CollaboratorError):
    """Raised when a collaborator cannot be reached or returns a server error.

    Attributes:
        service: Name of the collaborator (e.g. "proposal_store").
        reason: Transport or status detail.
    """

    def __init__(self, service: str, reason: str) -> None:
        """Initialize the error.

        Args:
            service: Name of the collaborator.
            reason: Transport or status detail.
        """
        self.service = service
        self.reason = reason
        super().__init__(f"{service} unavailable: {reason}")


class MalformedResponseError(CollaboratorError):
    """Raised when a collaborator response fails boundary validation.

    Attributes:
        service: Name of the collaborator.
        reason: Validation detail.
    """

    def __init__(self, service: str, reason: str) -> None:
        """Initialize the error.

        Args:
            service: Name of the collaborator.
            reason: Validation detail.
        """
        self.service = service
        self.reason = reason
        super().__init__(f"Malformed response from {service}: {reason}")


class InclusionTimeoutError(CollaboratorError):
    """Raised when a submitted operation is not included within the timeout.

    Attributes:
        operation_id: The identifier returned by the submission service.
        timeout_seconds: How long inclusion was awaited.
    """

    def __init__(self, operation_id: str, timeout_seconds: float) -> None:
        """Initialize the error.

        Args:
            operation_id: The identifier returned by the submission service.
            timeout_seconds: How long inclusion was awaited.
        """
        self.operation_id = operation_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Operation {operation_id} not included after {timeout_seconds}s"
        )


class CollaboratorRejectedError(CollaboratorError):
    """Raised when a reachable collaborator refuses a well-formed request.

    Attributes:
        service: Name of the collaborator.
        reason: Rejection message, verbatim.
        code: Service-specific error code, if any.
    """

    def __init__(self, service: str, reason: str, code: int | None = None) -> None:
        """Initialize the error.

        Args:
            service: Name of the collaborator.
            reason: Rejection message, verbatim.
            code: Service-specific error code, if any.
        """
        self.service = service
        self.reason = reason
        self.code = code
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"{service} rejected request{suffix}: {reason}")
