"""Signature aggregation errors."""

from __future__ import annotations

from multisig_coordinator.domain.errors.base import PreconditionError, ValidationError


class DuplicateSignerError(ValidationError):
    """Raised when two confirmations claim the same signer identity.

    Attributes:
        signer: The duplicated signer identity.
    """

    def __init__(self, signer: str) -> None:
        """Initialize the error.

        Args:
            signer: The duplicated signer identity.
        """
        self.signer = signer
        super().__init__(f"Duplicate confirmation for signer {signer}")


class InsufficientSignaturesError(PreconditionError):
    """Raised when fewer confirmations than the threshold are available.

    Attributes:
        collected: Number of distinct valid confirmations supplied.
        threshold: Number required by the account.
    """

    def __init__(self, collected: int, threshold: int) -> None:
        """Initialize the error.

        Args:
            collected: Number of distinct valid confirmations supplied.
            threshold: Number required by the account.
        """
        self.collected = collected
        self.threshold = threshold
        super().__init__(
            f"Insufficient signatures: {collected} of {threshold} required"
        )
