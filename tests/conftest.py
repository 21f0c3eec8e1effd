"""
Pytest configuration and shared fixtures for multisig coordinator tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Signers use fixed Ed25519 seeds so identities are stable across runs
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

import pytest

from multisig_coordinator.application.services.operation_coordinator_service import (
    OperationCoordinatorService,
)
from multisig_coordinator.application.services.signature_collector_service import (
    SignatureCollectorService,
)
from multisig_coordinator.application.services.submission_gate_service import (
    SubmissionGateService,
)
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.operation import Action, SigningDomain
from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519HashSigner,
    Ed25519SignatureVerifier,
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

ACCOUNT_ADDRESS = "0x" + "5a" * 20
MODULE_ADDRESS = "0xa581c4a4db7175302464ff3c06380bc3270b4037"
NFT_CONTRACT = "0x9a7af758ae5d7b6aae84fe4c5ba67c041dfe5336"


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def owner1() -> Ed25519HashSigner:
    """First owner (fixed seed)."""
    return Ed25519HashSigner.from_seed_hex("01" * 32)


@pytest.fixture
def owner2() -> Ed25519HashSigner:
    """Second owner (fixed seed)."""
    return Ed25519HashSigner.from_seed_hex("02" * 32)


@pytest.fixture
def outsider() -> Ed25519HashSigner:
    """A key holder that is not a signer of the account."""
    return Ed25519HashSigner.from_seed_hex("0f" * 32)


@pytest.fixture
def account(owner1: Ed25519HashSigner, owner2: Ed25519HashSigner) -> AccountConfig:
    """2-of-2 account."""
    return AccountConfig.create(
        ACCOUNT_ADDRESS, [owner1.identity, owner2.identity], threshold=2
    )


@pytest.fixture
def domain() -> SigningDomain:
    """Signing domain on a local test chain."""
    return SigningDomain(chain_id=31337, verifying_contract=MODULE_ADDRESS)


@pytest.fixture
def mint_actions() -> list[Action]:
    """Two mint(account) calls, as in the demo flow."""
    data = bytes.fromhex("6a627842") + bytes(12) + bytes.fromhex(ACCOUNT_ADDRESS[2:])
    return [Action(to=NFT_CONTRACT, data=data), Action(to=NFT_CONTRACT, data=data)]


@pytest.fixture
def store() -> ProposalStoreStub:
    """Fresh in-memory proposal store."""
    return ProposalStoreStub()


@pytest.fixture
def sponsor() -> SponsorshipServiceStub:
    """Sponsorship stub with a fixed policy id."""
    return SponsorshipServiceStub(policy_id="test-policy")


@pytest.fixture
def submission() -> SubmissionServiceStub:
    """Submission stub recording every call."""
    return SubmissionServiceStub()


@pytest.fixture
def verifier() -> Ed25519SignatureVerifier:
    """Real Ed25519 verifier."""
    return Ed25519SignatureVerifier()


@pytest.fixture
def collector(
    store: ProposalStoreStub,
    verifier: Ed25519SignatureVerifier,
    account: AccountConfig,
    domain: SigningDomain,
) -> SignatureCollectorService:
    """Collector for the 2-of-2 account."""
    return SignatureCollectorService(
        store=store, verifier=verifier, account=account, domain=domain
    )


@pytest.fixture
def gate(
    store: ProposalStoreStub, submission: SubmissionServiceStub
) -> SubmissionGateService:
    """Submission gate over the stubs."""
    return SubmissionGateService(store=store, submission=submission)


@pytest.fixture
def coordinator(
    account: AccountConfig,
    domain: SigningDomain,
    sponsor: SponsorshipServiceStub,
    collector: SignatureCollectorService,
    gate: SubmissionGateService,
) -> OperationCoordinatorService:
    """Coordinator wired over the stubs."""
    return OperationCoordinatorService(
        account=account,
        domain=domain,
        sponsorship=sponsor,
        collector=collector,
        gate=gate,
    )
