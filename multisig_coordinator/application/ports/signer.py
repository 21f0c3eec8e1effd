"""Hash signing and signature verification ports.

The coordinator never implements a signature scheme itself; it treats
"sign a hash" and "verify a signature" as external primitives.

Developer Golden Rules:
1. FAIL LOUD - Never accept invalid signatures
2. verify() returns False for bad signatures, it does not raise
"""

from __future__ import annotations

from typing import Protocol


class HashSignerProtocol(Protocol):
    """Protocol for a key holder able to sign signing hashes.

    One instance wraps one private key; the key never leaves it.
    """

    @property
    def identity(self) -> str:
        """Canonical identity (hex public key) of this signer."""
        ...

    async def sign(self, signing_hash: bytes) -> bytes:
        """Sign a 32-byte signing hash.

        Args:
            signing_hash: The proposal's signing hash.

        Returns:
            Signature bytes.
        """
        ...


class SignatureVerifierProtocol(Protocol):
    """Protocol for verifying a signature against a signer identity."""

    async def verify(
        self,
        signing_hash: bytes,
        signature: bytes,
        signer: str,
    ) -> bool:
        """Verify a signature over a signing hash.

        Args:
            signing_hash: The bytes that were signed.
            signature: Signature bytes.
            signer: Canonical identity (hex public key) of the claimed signer.

        Returns:
            True if signature is valid, False otherwise.

        Note:
            This method does NOT raise on invalid signatures or malformed
            keys. It returns False to allow the caller to decide on error
            handling.
        """
        ...

    def get_algorithm(self) -> str:
        """Get the signature algorithm name."""
        ...
