"""Confirmation domain model.

A Confirmation asserts that a signer produced a signature over a
specific signing hash. Confirmations are only constructed after the
signature has been verified; invalid confirmations are never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from multisig_coordinator.domain.models.operation import hex_bytes, parse_hex_bytes


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Confirmation:
    """One signer's signature over a proposal's signing hash.

    Equality ignores ``confirmed_at``: re-submitting the same signature
    later is the same confirmation.

    Attributes:
        signer: Canonical signer identity.
        signature: Signature bytes over the signing hash.
        confirmed_at: When the confirmation was accepted (UTC).
    """

    signer: str
    signature: bytes
    confirmed_at: datetime = field(default_factory=_utc_now, compare=False)

    def __post_init__(self) -> None:
        """Validate confirmation fields.

        Raises:
            ValueError: If the signature is empty or the timestamp is naive.
        """
        if not self.signature:
            raise ValueError("signature must not be empty")
        if self.confirmed_at.tzinfo is None:
            raise ValueError("confirmed_at must be timezone-aware (UTC)")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for transport."""
        return {
            "signer": self.signer,
            "signature": hex_bytes(self.signature),
            "confirmed_at": self.confirmed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Confirmation:
        """Deserialize from dictionary."""
        return cls(
            signer=data["signer"],
            signature=parse_hex_bytes(data["signature"]),
            confirmed_at=datetime.fromisoformat(data["confirmed_at"]),
        )
