"""HTTP adapters: coordination service, paymaster and bundler."""

from multisig_coordinator.infrastructure.adapters.http.bundler_client import (
    BundlerSubmissionClient,
)
from multisig_coordinator.infrastructure.adapters.http.proposal_store_client import (
    HttpProposalStore,
)
from multisig_coordinator.infrastructure.adapters.http.sponsorship_client import (
    PaymasterSponsorshipClient,
)

__all__: list[str] = [
    "BundlerSubmissionClient",
    "HttpProposalStore",
    "PaymasterSponsorshipClient",
]
