"""In-memory stubs of the collaborator ports."""

from multisig_coordinator.infrastructure.stubs.proposal_store_stub import (
    ProposalStoreStub,
)
from multisig_coordinator.infrastructure.stubs.sponsorship_service_stub import (
    SponsorshipServiceStub,
)
from multisig_coordinator.infrastructure.stubs.submission_service_stub import (
    SubmissionServiceStub,
    SubmittedOperation,
)

__all__: list[str] = [
    "ProposalStoreStub",
    "SponsorshipServiceStub",
    "SubmissionServiceStub",
    "SubmittedOperation",
]
