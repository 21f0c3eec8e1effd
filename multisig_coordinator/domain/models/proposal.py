"""Proposal domain model - the aggregate root of signature coordination.

A Proposal tracks one operation from registration to submission:

    OPEN -> THRESHOLD_MET (enough distinct confirmations collected)
    THRESHOLD_MET -> SUBMITTING (single winner of the submission race)
    SUBMITTING -> SUBMITTED (receipt recorded)
    SUBMITTING -> FAILED (collaborator error recorded)

SUBMITTED and FAILED are terminal. Proposals are identified by their
signing hash and are replaced on every write, never merged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from multisig_coordinator.domain.errors.confirmation import UnauthorizedSignerError
from multisig_coordinator.domain.errors.proposal import ProposalClosedError
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.operation import (
    OperationPayload,
    hex_bytes,
    parse_hex_bytes,
)
from multisig_coordinator.domain.models.receipt import Receipt


class ProposalStatus(Enum):
    """Status in the proposal lifecycle.

    States:
        OPEN: Collecting confirmations, threshold not reached.
        THRESHOLD_MET: At least T distinct confirmations collected.
        SUBMITTING: One caller is performing the external submission.
        SUBMITTED: Submission completed with a successful receipt (terminal).
        FAILED: Submission failed; cause recorded (terminal).
    """

    OPEN = "OPEN"
    THRESHOLD_MET = "THRESHOLD_MET"
    SUBMITTING = "SUBMITTING"
    SUBMITTED = "SUBMITTED"
    FAILED = "FAILED"

    def is_terminal(self) -> bool:
        """Check if no further transitions are permitted."""
        return self in TERMINAL_STATUSES

    def accepts_confirmations(self) -> bool:
        """Check if confirmations may still be added in this status."""
        return self in COLLECTING_STATUSES

    def valid_transitions(self) -> frozenset[ProposalStatus]:
        """Get valid transitions from this status.

        Returns:
            Frozenset of statuses this status can transition to.
            Empty set for terminal statuses.
        """
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


TERMINAL_STATUSES: frozenset[ProposalStatus] = frozenset(
    {ProposalStatus.SUBMITTED, ProposalStatus.FAILED}
)

# Statuses in which a proposal is still pending (listed by list_pending)
COLLECTING_STATUSES: frozenset[ProposalStatus] = frozenset(
    {ProposalStatus.OPEN, ProposalStatus.THRESHOLD_MET}
)

STATUS_TRANSITION_MATRIX: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.OPEN: frozenset({ProposalStatus.THRESHOLD_MET}),
    ProposalStatus.THRESHOLD_MET: frozenset({ProposalStatus.SUBMITTING}),
    ProposalStatus.SUBMITTING: frozenset(
        {ProposalStatus.SUBMITTED, ProposalStatus.FAILED}
    ),
    ProposalStatus.SUBMITTED: frozenset(),
    ProposalStatus.FAILED: frozenset(),
}


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Proposal:
    """A proposed operation and the confirmations collected for it.

    Attributes:
        proposal_id: Hex-encoded signing hash (identifies the proposal).
        account: Configuration of the account the operation belongs to.
        payload: The sponsored operation payload that signers sign.
        signing_hash: Domain-separated digest of the payload.
        confirmations: At most one per signer, in account registration order.
        status: Current lifecycle status.
        created_at: When the proposal was registered (UTC).
        updated_at: When the proposal was last modified (UTC).
        operation_id: Identifier returned by the submission service.
        receipt: Inclusion receipt once SUBMITTED (or FAILED on revert).
        failure_reason: Verbatim failure cause once FAILED.
    """

    proposal_id: str
    account: AccountConfig
    payload: OperationPayload
    signing_hash: bytes
    confirmations: tuple[Confirmation, ...] = ()
    status: ProposalStatus = ProposalStatus.OPEN
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    operation_id: str | None = None
    receipt: Receipt | None = None
    failure_reason: str | None = None

    def __post_init__(self) -> None:
        """Validate proposal fields.

        Raises:
            ValueError: If the id does not match the hash or the hash is
                not 32 bytes.
        """
        if len(self.signing_hash) != 32:
            raise ValueError(
                f"signing_hash must be 32 bytes, got {len(self.signing_hash)}"
            )
        if self.proposal_id != self.signing_hash.hex():
            raise ValueError("proposal_id must be the hex signing hash")

    @classmethod
    def open(
        cls,
        account: AccountConfig,
        payload: OperationPayload,
        signing_hash: bytes,
    ) -> Proposal:
        """Create a new OPEN proposal with no confirmations."""
        now = _utc_now()
        return cls(
            proposal_id=signing_hash.hex(),
            account=account,
            payload=payload,
            signing_hash=signing_hash,
            created_at=now,
            updated_at=now,
        )

    @property
    def threshold(self) -> int:
        """Confirmations required by the account."""
        return self.account.threshold

    @property
    def confirmation_count(self) -> int:
        """Number of distinct signers that confirmed."""
        return len(self.confirmations)

    @property
    def is_threshold_met(self) -> bool:
        """Whether enough distinct confirmations were collected."""
        return self.confirmation_count >= self.threshold

    def confirmation_for(self, signer: str) -> Confirmation | None:
        """Return the stored confirmation of a signer, if any."""
        for confirmation in self.confirmations:
            if confirmation.signer == signer:
                return confirmation
        return None

    def with_confirmation(self, confirmation: Confirmation) -> Proposal:
        """Return a copy with the signer's confirmation stored.

        The signer's slot is overwritten (last write wins). Storing an
        identical confirmation returns this instance unchanged. The status
        moves from OPEN to THRESHOLD_MET once the threshold is reached.

        Args:
            confirmation: A verified confirmation.

        Returns:
            The updated proposal (or self if nothing changed).

        Raises:
            ProposalClosedError: Proposal no longer accepts confirmations.
            UnauthorizedSignerError: Signer is not part of the account.
        """
        if not self.status.accepts_confirmations():
            raise ProposalClosedError(
                self.proposal_id, self.status, self.failure_reason
            )
        if not self.account.is_authorized(confirmation.signer):
            raise UnauthorizedSignerError(confirmation.signer, self.account.address)

        existing = self.confirmation_for(confirmation.signer)
        if existing is not None and existing == confirmation:
            return self

        slots = {c.signer: c for c in self.confirmations}
        slots[confirmation.signer] = confirmation
        ordered = tuple(
            slots[signer] for signer in self.account.signer_ids if signer in slots
        )

        status = self.status
        if status == ProposalStatus.OPEN and len(ordered) >= self.threshold:
            status = ProposalStatus.THRESHOLD_MET

        return replace(
            self,
            confirmations=ordered,
            status=status,
            updated_at=_utc_now(),
        )

    def with_status(
        self,
        new_status: ProposalStatus,
        *,
        operation_id: str | None = None,
        receipt: Receipt | None = None,
        failure_reason: str | None = None,
    ) -> Proposal:
        """Return a copy moved to a new status.

        Args:
            new_status: Target status; must be a valid transition.
            operation_id: Submission identifier to record, if any.
            receipt: Receipt to record, if any.
            failure_reason: Failure cause to record, if any.

        Returns:
            The updated proposal.

        Raises:
            ValueError: If the transition is not in the transition matrix.
        """
        if new_status not in self.status.valid_transitions():
            raise ValueError(
                f"invalid status transition {self.status.value} -> {new_status.value}"
            )
        return replace(
            self,
            status=new_status,
            updated_at=_utc_now(),
            operation_id=operation_id if operation_id is not None else self.operation_id,
            receipt=receipt if receipt is not None else self.receipt,
            failure_reason=(
                failure_reason if failure_reason is not None else self.failure_reason
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for transport."""
        return {
            "proposal_id": self.proposal_id,
            "account": self.account.to_dict(),
            "payload": self.payload.to_dict(),
            "signing_hash": hex_bytes(self.signing_hash),
            "confirmations": [c.to_dict() for c in self.confirmations],
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "operation_id": self.operation_id,
            "receipt": self.receipt.to_dict() if self.receipt else None,
            "failure_reason": self.failure_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proposal:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            proposal_id=data["proposal_id"],
            account=AccountConfig.from_dict(data["account"]),
            payload=OperationPayload.from_dict(data["payload"]),
            signing_hash=parse_hex_bytes(data["signing_hash"]),
            confirmations=tuple(
                Confirmation.from_dict(c) for c in data.get("confirmations", [])
            ),
            status=ProposalStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            operation_id=data.get("operation_id"),
            receipt=Receipt.from_dict(data["receipt"]) if data.get("receipt") else None,
            failure_reason=data.get("failure_reason"),
        )
