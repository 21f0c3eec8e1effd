"""Ed25519 hash signer and signature verifier.

A signer's identity is the hex encoding of its raw 32-byte Ed25519
public key. Signatures are the raw 64-byte Ed25519 signatures over the
32-byte signing hash.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from multisig_coordinator.domain.models.account import normalize_identity

ALGORITHM = "Ed25519"


def public_key_identity(public_key: Ed25519PublicKey) -> str:
    """Canonical identity (lowercase hex raw public key) of a key."""
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return raw.hex()


class Ed25519HashSigner:
    """Holds one Ed25519 private key and signs signing hashes.

    Example:
        >>> signer = Ed25519HashSigner.generate()
        >>> signature = await signer.sign(signing_hash)
    """

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        """Initialize the signer.

        Args:
            private_key: The signer's private key.
        """
        self._private_key = private_key
        self._identity = public_key_identity(private_key.public_key())

    @classmethod
    def generate(cls) -> Ed25519HashSigner:
        """Create a signer with a freshly generated key."""
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_seed_hex(cls, seed_hex: str) -> Ed25519HashSigner:
        """Create a signer from a hex-encoded 32-byte private seed.

        Raises:
            ValueError: If the seed is not 32 bytes of hex.
        """
        seed = bytes.fromhex(seed_hex.removeprefix("0x"))
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @property
    def identity(self) -> str:
        """Hex-encoded raw public key."""
        return self._identity

    async def sign(self, signing_hash: bytes) -> bytes:
        """Sign a signing hash, returning the 64-byte signature."""
        return self._private_key.sign(signing_hash)


class Ed25519SignatureVerifier:
    """Verifies Ed25519 signatures against hex public-key identities."""

    async def verify(
        self,
        signing_hash: bytes,
        signature: bytes,
        signer: str,
    ) -> bool:
        """Verify a signature over a signing hash.

        Returns:
            True if the signature is valid, False for bad signatures or
            malformed identities.
        """
        try:
            key = Ed25519PublicKey.from_public_bytes(
                bytes.fromhex(normalize_identity(signer))
            )
            key.verify(signature, signing_hash)
            return True
        except (InvalidSignature, ValueError):
            return False

    def get_algorithm(self) -> str:
        """Get the signature algorithm name."""
        return ALGORITHM
