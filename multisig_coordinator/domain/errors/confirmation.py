"""Confirmation errors.

Both errors reject a single confirmation; the stored confirmation set
is never touched.
"""

from __future__ import annotations

from multisig_coordinator.domain.errors.base import ValidationError


class UnauthorizedSignerError(ValidationError):
    """Raised when a signer is not one of the account's configured signers.

    Attributes:
        signer: The identity that attempted to confirm.
        account_address: The account the confirmation was meant for.
    """

    def __init__(self, signer: str, account_address: str) -> None:
        """Initialize the error.

        Args:
            signer: The identity that attempted to confirm.
            account_address: The account the confirmation was meant for.
        """
        self.signer = signer
        self.account_address = account_address
        super().__init__(
            f"Signer {signer} is not authorized for account {account_address}"
        )


class InvalidSignatureError(ValidationError):
    """Raised when signature bytes do not verify against the signing hash.

    Attributes:
        signer: The identity the signature claims to come from.
        proposal_id: The proposal whose signing hash was checked (if known).
        reason: Optional detail (e.g. wrong length).
    """

    def __init__(
        self,
        signer: str,
        proposal_id: str | None = None,
        reason: str = "signature does not verify",
    ) -> None:
        """Initialize the error.

        Args:
            signer: The identity the signature claims to come from.
            proposal_id: The proposal whose signing hash was checked.
            reason: Optional detail about the failure.
        """
        self.signer = signer
        self.proposal_id = proposal_id
        self.reason = reason
        target = f" for proposal {proposal_id}" if proposal_id else ""
        super().__init__(f"Invalid signature from {signer}{target}: {reason}")
