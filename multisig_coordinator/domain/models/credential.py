"""Composite credential domain model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class CompositeCredential:
    """Combined, canonically ordered encoding of threshold confirmations.

    Attributes:
        signers: Signer identities in encoding order (ascending).
        encoded: Bytes accepted by the account's on-chain verifier.
        valid_after: Validity window start encoded in the prefix.
        valid_until: Validity window end encoded in the prefix.
    """

    signers: tuple[str, ...]
    encoded: bytes
    valid_after: int = 0
    valid_until: int = 0

    def hex(self) -> str:
        """Return the encoded credential as 0x-prefixed hex."""
        return "0x" + self.encoded.hex()
