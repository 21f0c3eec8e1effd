"""Signature scheme adapters."""

from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519HashSigner,
    Ed25519SignatureVerifier,
    public_key_identity,
)

__all__: list[str] = [
    "Ed25519HashSigner",
    "Ed25519SignatureVerifier",
    "public_key_identity",
]
