"""Submission receipt domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, eq=True)
class Receipt:
    """Outcome of an included operation.

    Attributes:
        success: Whether the operation executed successfully on-chain.
        operation_id: Identifier returned by the submission service.
        transaction_hash: Hash of the bundle transaction, when known.
        details: Collaborator-specific extra fields (not compared).
    """

    success: bool
    operation_id: str
    transaction_hash: str | None = None
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for transport."""
        return {
            "success": self.success,
            "operation_id": self.operation_id,
            "transaction_hash": self.transaction_hash,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Receipt:
        """Deserialize from dictionary."""
        return cls(
            success=bool(data["success"]),
            operation_id=data["operation_id"],
            transaction_hash=data.get("transaction_hash"),
            details=dict(data.get("details") or {}),
        )
