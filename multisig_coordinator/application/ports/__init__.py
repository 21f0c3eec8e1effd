"""Application ports (collaborator contracts).

Ports are Protocols; adapters in infrastructure implement them.
"""

from multisig_coordinator.application.ports.proposal_store import (
    ProposalStoreProtocol,
)
from multisig_coordinator.application.ports.signature_collector import (
    ConfirmationResult,
    SignatureCollectorProtocol,
)
from multisig_coordinator.application.ports.signer import (
    HashSignerProtocol,
    SignatureVerifierProtocol,
)
from multisig_coordinator.application.ports.sponsorship import (
    SponsorshipServiceProtocol,
)
from multisig_coordinator.application.ports.submission import (
    SubmissionServiceProtocol,
)
from multisig_coordinator.application.ports.submission_gate import (
    SubmissionGateProtocol,
    SubmissionResult,
)

__all__: list[str] = [
    "ConfirmationResult",
    "HashSignerProtocol",
    "ProposalStoreProtocol",
    "SignatureCollectorProtocol",
    "SignatureVerifierProtocol",
    "SponsorshipServiceProtocol",
    "SubmissionGateProtocol",
    "SubmissionResult",
    "SubmissionServiceProtocol",
]
