"""Account configuration domain models.

- Signer: an authorized key holder, identified by its public key
- AccountConfig: the account's signer set and approval threshold

An AccountConfig is immutable once the account exists.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from multisig_coordinator.domain.models.operation import normalize_address


def normalize_identity(value: str) -> str:
    """Return the canonical form of a signer identity.

    Identities are hex-encoded public keys. The canonical form is
    lowercase without a 0x prefix, so the same key always compares equal.

    Args:
        value: Hex-encoded public key, optionally 0x-prefixed.

    Returns:
        Lowercase hex without prefix.

    Raises:
        ValueError: If the value is empty or not hex.
    """
    text = value[2:] if value.startswith(("0x", "0X")) else value
    if not text:
        raise ValueError("signer identity must not be empty")
    try:
        bytes.fromhex(text)
    except ValueError as e:
        raise ValueError(f"signer identity is not hex: {value!r}") from e
    return text.lower()


@dataclass(frozen=True, eq=True)
class Signer:
    """An authorized key holder of an account.

    Signers carry no mutable state; producing a signature is an external
    capability (see application.ports.signer).

    Attributes:
        identity: Canonical hex-encoded public key.
    """

    identity: str

    def __post_init__(self) -> None:
        """Validate the identity is in canonical form.

        Raises:
            ValueError: If identity is not canonical lowercase hex.
        """
        if normalize_identity(self.identity) != self.identity:
            raise ValueError(
                f"identity must be canonical lowercase hex: {self.identity!r}"
            )


@dataclass(frozen=True, eq=True)
class AccountConfig:
    """Signer set and threshold of a smart account.

    Signer order is the registration order; it drives the ordering of
    confirmations returned by the collector. Membership has set semantics:
    duplicates are forbidden.

    Attributes:
        address: The account's address (lowercase).
        signers: Authorized signers, in registration order.
        threshold: Distinct confirmations required (1 <= T <= N).
    """

    address: str
    signers: tuple[Signer, ...]
    threshold: int

    def __post_init__(self) -> None:
        """Validate account invariants.

        Raises:
            ValueError: If signers are duplicated, empty, or the threshold
                is outside 1..len(signers).
        """
        if normalize_address(self.address) != self.address:
            raise ValueError(f"address must be lowercase: {self.address!r}")
        if not self.signers:
            raise ValueError("account must have at least one signer")
        identities = [s.identity for s in self.signers]
        if len(set(identities)) != len(identities):
            raise ValueError("duplicate signer in account configuration")
        if not 1 <= self.threshold <= len(self.signers):
            raise ValueError(
                f"threshold must be between 1 and {len(self.signers)}, "
                f"got {self.threshold}"
            )

    @classmethod
    def create(
        cls, address: str, signers: Iterable[str], threshold: int
    ) -> AccountConfig:
        """Create a config from raw address and identity strings.

        Args:
            address: Account address, any letter case.
            signers: Hex-encoded public keys in registration order.
            threshold: Distinct confirmations required.

        Returns:
            A validated AccountConfig with canonical identities.
        """
        return cls(
            address=normalize_address(address),
            signers=tuple(Signer(normalize_identity(s)) for s in signers),
            threshold=threshold,
        )

    @property
    def signer_ids(self) -> tuple[str, ...]:
        """Canonical identities in registration order."""
        return tuple(s.identity for s in self.signers)

    def is_authorized(self, identity: str) -> bool:
        """Check whether an identity is one of the account's signers."""
        return identity in self.signer_ids

    def to_dict(self) -> dict:
        """Serialize to dictionary for transport."""
        return {
            "address": self.address,
            "signers": list(self.signer_ids),
            "threshold": self.threshold,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AccountConfig:
        """Deserialize from dictionary."""
        return cls.create(data["address"], data["signers"], int(data["threshold"]))
