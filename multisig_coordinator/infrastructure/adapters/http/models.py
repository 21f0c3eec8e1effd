"""Wire models of the proposal coordination service.

Responses are validated with these pydantic models before they are
converted into domain types; anything that fails validation is
rejected at the boundary.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus


class AccountModel(BaseModel):
    """Account configuration snapshot stored with a proposal."""

    address: str
    signers: list[str] = Field(..., min_length=1)
    threshold: int = Field(..., ge=1)


class ConfirmationModel(BaseModel):
    """A stored confirmation."""

    signer: str
    signature: str = Field(..., pattern=r"^0x[0-9a-fA-F]+$")
    confirmed_at: datetime


class ReceiptModel(BaseModel):
    """A recorded inclusion receipt."""

    success: bool
    operation_id: str
    transaction_hash: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class ProposalModel(BaseModel):
    """A proposal as returned by the coordination service."""

    proposal_id: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    account: AccountModel
    payload: dict[str, Any]
    signing_hash: str
    confirmations: list[ConfirmationModel] = Field(default_factory=list)
    status: ProposalStatus
    created_at: datetime
    updated_at: datetime
    operation_id: str | None = None
    receipt: ReceiptModel | None = None
    failure_reason: str | None = None

    def to_domain(self) -> Proposal:
        """Convert to the domain Proposal.

        Raises:
            KeyError: If the payload misses required fields.
            ValueError: If any field fails domain validation.
        """
        return Proposal.from_dict(self.model_dump(mode="json"))


class ProposalListModel(BaseModel):
    """Response of the pending-proposals listing."""

    results: list[ProposalModel]


class ConflictModel(BaseModel):
    """Body of a 409 response.

    ``reason`` is ``"closed"`` when the proposal no longer accepts
    confirmations and ``"status_mismatch"`` when a CAS failed.
    """

    reason: str
    status: ProposalStatus
    failure_reason: str | None = None
