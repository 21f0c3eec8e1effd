"""Operation construction errors.

Raised by the operation builder and by proposal registration when the
payload or its signing hash cannot be trusted.
"""

from __future__ import annotations

from multisig_coordinator.domain.errors.base import ValidationError


class InvalidActionError(ValidationError):
    """Raised when a batched action references a malformed target or value.

    Attributes:
        index: Position of the offending action in the batch (None if the
            batch itself is invalid, e.g. empty).
        reason: What is wrong with the action.
    """

    def __init__(self, reason: str, index: int | None = None) -> None:
        """Initialize the error.

        Args:
            reason: What is wrong with the action.
            index: Position of the offending action in the batch.
        """
        self.index = index
        self.reason = reason
        location = f"action[{index}]" if index is not None else "actions"
        super().__init__(f"Invalid {location}: {reason}")


class SigningHashMismatchError(ValidationError):
    """Raised when a supplied signing hash does not match the payload.

    Attributes:
        expected: Hash recomputed from the payload and configured domain (hex).
        supplied: Hash supplied by the caller (hex).
    """

    def __init__(self, expected: str, supplied: str) -> None:
        """Initialize the error.

        Args:
            expected: Hash recomputed from the payload (hex).
            supplied: Hash supplied by the caller (hex).
        """
        self.expected = expected
        self.supplied = supplied
        super().__init__(
            f"Signing hash mismatch: payload hashes to {expected}, "
            f"caller supplied {supplied}"
        )
