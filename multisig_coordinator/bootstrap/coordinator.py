"""Bootstrap wiring for coordinator dependencies.

Collaborators are process-wide singletons defaulting to the in-memory
stubs. ``use_live_collaborators`` swaps in the HTTP adapters; tests use
the ``set_*`` functions and ``reset_coordinator_dependencies``.
"""

from __future__ import annotations

from multisig_coordinator.application.ports.proposal_store import (
    ProposalStoreProtocol,
)
from multisig_coordinator.application.ports.signer import SignatureVerifierProtocol
from multisig_coordinator.application.ports.sponsorship import (
    SponsorshipServiceProtocol,
)
from multisig_coordinator.application.ports.submission import (
    SubmissionServiceProtocol,
)
from multisig_coordinator.application.services.operation_coordinator_service import (
    OperationCoordinatorService,
)
from multisig_coordinator.application.services.signature_collector_service import (
    SignatureCollectorService,
)
from multisig_coordinator.application.services.submission_gate_service import (
    SubmissionGateService,
)
from multisig_coordinator.config.coordinator_config import CoordinatorConfig
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519SignatureVerifier,
)
from multisig_coordinator.infrastructure.adapters.http.bundler_client import (
    BundlerSubmissionClient,
)
from multisig_coordinator.infrastructure.adapters.http.proposal_store_client import (
    HttpProposalStore,
)
from multisig_coordinator.infrastructure.adapters.http.sponsorship_client import (
    PaymasterSponsorshipClient,
)
from multisig_coordinator.infrastructure.stubs.proposal_store_stub import (
    ProposalStoreStub,
)
from multisig_coordinator.infrastructure.stubs.sponsorship_service_stub import (
    SponsorshipServiceStub,
)
from multisig_coordinator.infrastructure.stubs.submission_service_stub import (
    SubmissionServiceStub,
)

_proposal_store: ProposalStoreProtocol | None = None
_sponsorship_service: SponsorshipServiceProtocol | None = None
_submission_service: SubmissionServiceProtocol | None = None
_signature_verifier: SignatureVerifierProtocol | None = None


def get_proposal_store() -> ProposalStoreProtocol:
    """Get proposal store instance."""
    global _proposal_store
    if _proposal_store is None:
        _proposal_store = ProposalStoreStub()
    return _proposal_store


def get_sponsorship_service() -> SponsorshipServiceProtocol:
    """Get sponsorship service instance."""
    global _sponsorship_service
    if _sponsorship_service is None:
        _sponsorship_service = SponsorshipServiceStub()
    return _sponsorship_service


def get_submission_service() -> SubmissionServiceProtocol:
    """Get submission service instance."""
    global _submission_service
    if _submission_service is None:
        _submission_service = SubmissionServiceStub()
    return _submission_service


def get_signature_verifier() -> SignatureVerifierProtocol:
    """Get signature verifier instance."""
    global _signature_verifier
    if _signature_verifier is None:
        _signature_verifier = Ed25519SignatureVerifier()
    return _signature_verifier


def set_proposal_store(store: ProposalStoreProtocol) -> None:
    """Set custom proposal store."""
    global _proposal_store
    _proposal_store = store


def set_sponsorship_service(service: SponsorshipServiceProtocol) -> None:
    """Set custom sponsorship service."""
    global _sponsorship_service
    _sponsorship_service = service


def set_submission_service(service: SubmissionServiceProtocol) -> None:
    """Set custom submission service."""
    global _submission_service
    _submission_service = service


def use_live_collaborators(config: CoordinatorConfig) -> None:
    """Replace the stubs with HTTP adapters configured from ``config``.

    Raises:
        ValueError: If an endpoint required for live mode is not configured.
    """
    missing = config.missing_live_settings()
    if missing:
        raise ValueError(f"live mode requires: {', '.join(missing)}")
    assert config.tx_service_url and config.paymaster_url and config.bundler_url

    set_proposal_store(
        HttpProposalStore(
            config.tx_service_url,
            api_key=config.tx_service_api_key,
            timeout_seconds=config.http_timeout_seconds,
        )
    )
    set_sponsorship_service(
        PaymasterSponsorshipClient(
            config.paymaster_url,
            entry_point=config.entry_point_address,
            policy_id=config.sponsorship_policy_id,
            timeout_seconds=config.http_timeout_seconds,
        )
    )
    set_submission_service(
        BundlerSubmissionClient(
            config.bundler_url,
            entry_point=config.entry_point_address,
            timeout_seconds=config.http_timeout_seconds,
            poll_interval_seconds=config.inclusion_poll_interval_seconds,
            inclusion_timeout_seconds=config.inclusion_timeout_seconds,
        )
    )


def create_coordinator(
    account: AccountConfig,
    config: CoordinatorConfig,
) -> OperationCoordinatorService:
    """Wire an OperationCoordinatorService for one account.

    Args:
        account: The account whose operations are coordinated.
        config: Chain and collaborator configuration.

    Returns:
        A coordinator sharing this process's collaborator instances.
    """
    domain = config.signing_domain()
    store = get_proposal_store()
    collector = SignatureCollectorService(
        store=store,
        verifier=get_signature_verifier(),
        account=account,
        domain=domain,
    )
    gate = SubmissionGateService(store=store, submission=get_submission_service())
    return OperationCoordinatorService(
        account=account,
        domain=domain,
        sponsorship=get_sponsorship_service(),
        collector=collector,
        gate=gate,
        entry_point=config.entry_point_address,
    )


def reset_coordinator_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _proposal_store
    global _sponsorship_service
    global _submission_service
    global _signature_verifier

    _proposal_store = None
    _sponsorship_service = None
    _submission_service = None
    _signature_verifier = None
