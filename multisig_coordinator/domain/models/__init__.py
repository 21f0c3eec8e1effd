"""Domain models for the multisig coordinator."""

from multisig_coordinator.domain.models.account import (
    AccountConfig,
    Signer,
    normalize_identity,
)
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.operation import (
    Action,
    CallOperation,
    GasParams,
    OperationPayload,
    SigningDomain,
    normalize_address,
)
from multisig_coordinator.domain.models.proposal import (
    COLLECTING_STATUSES,
    TERMINAL_STATUSES,
    Proposal,
    ProposalStatus,
)
from multisig_coordinator.domain.models.receipt import Receipt

__all__: list[str] = [
    "AccountConfig",
    "Action",
    "COLLECTING_STATUSES",
    "CallOperation",
    "CompositeCredential",
    "Confirmation",
    "GasParams",
    "OperationPayload",
    "Proposal",
    "ProposalStatus",
    "Receipt",
    "Signer",
    "SigningDomain",
    "TERMINAL_STATUSES",
    "normalize_address",
    "normalize_identity",
]
