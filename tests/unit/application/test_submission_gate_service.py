"""Unit tests for SubmissionGateService."""

from __future__ import annotations

import asyncio

import pytest

from multisig_coordinator.application.services.signature_collector_service import (
    SignatureCollectorService,
)
from multisig_coordinator.application.services.submission_gate_service import (
    SubmissionGateService,
)
from multisig_coordinator.domain.errors import (
    AlreadySubmittedError,
    CollaboratorUnavailableError,
    InclusionTimeoutError,
    InvalidSignatureError,
    NotReadyError,
    ProposalClosedError,
    ProposalNotFoundError,
    SubmissionFailedError,
)
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.operation import (
    Action,
    GasParams,
    SigningDomain,
)
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.services.operation_builder import (
    build_canonical_payload,
    compute_signing_hash,
)
from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519HashSigner,
)
from multisig_coordinator.infrastructure.stubs.proposal_store_stub import (
    ProposalStoreStub,
)
from multisig_coordinator.infrastructure.stubs.submission_service_stub import (
    SubmissionServiceStub,
)


async def _register(
    collector: SignatureCollectorService,
    account: AccountConfig,
    domain: SigningDomain,
    actions: list[Action],
    signers: list[Ed25519HashSigner],
) -> str:
    payload = build_canonical_payload(actions, account, 0, GasParams())
    signing_hash = compute_signing_hash(payload, domain)
    proposal_id = await collector.register_proposal(payload, signing_hash)
    for signer in signers:
        await collector.submit_confirmation(
            proposal_id, signer.identity, await signer.sign(signing_hash)
        )
    return proposal_id


class _FailureRecordingDownStore(ProposalStoreStub):
    """Store that cannot record a FAILED transition."""

    async def transition_status(
        self,
        proposal_id: str,
        expected: ProposalStatus,
        new: ProposalStatus,
        **kwargs,
    ) -> Proposal:
        if new == ProposalStatus.FAILED:
            raise CollaboratorUnavailableError("proposal_store", "write timed out")
        return await super().transition_status(proposal_id, expected, new, **kwargs)


@pytest.fixture
async def ready_proposal_id(
    collector: SignatureCollectorService,
    account: AccountConfig,
    domain: SigningDomain,
    mint_actions: list[Action],
    owner1: Ed25519HashSigner,
    owner2: Ed25519HashSigner,
) -> str:
    """A THRESHOLD_MET proposal (both owners confirmed)."""
    return await _register(collector, account, domain, mint_actions, [owner1, owner2])


class TestTrySubmit:
    """Tests for try_submit."""

    @pytest.mark.asyncio
    async def test_happy_path(
        self,
        gate: SubmissionGateService,
        store: ProposalStoreStub,
        submission: SubmissionServiceStub,
        owner1: Ed25519HashSigner,
        owner2: Ed25519HashSigner,
        ready_proposal_id: str,
    ) -> None:
        """Submits once and records the receipt."""
        result = await gate.try_submit(ready_proposal_id)

        assert result.receipt.success
        assert submission.submit_count == 1
        assert result.credential.signers == tuple(
            sorted([owner1.identity, owner2.identity])
        )
        assert submission.submitted[0].credential == result.credential

        proposal = await store.get(ready_proposal_id)
        assert proposal is not None
        assert proposal.status == ProposalStatus.SUBMITTED
        assert proposal.receipt == result.receipt
        assert proposal.operation_id == result.operation_id

    @pytest.mark.asyncio
    async def test_not_ready(
        self,
        gate: SubmissionGateService,
        collector: SignatureCollectorService,
        submission: SubmissionServiceStub,
        account: AccountConfig,
        domain: SigningDomain,
        mint_actions: list[Action],
        owner1: Ed25519HashSigner,
    ) -> None:
        """1 of 2 confirmations raises NotReadyError and submits nothing."""
        proposal_id = await _register(
            collector, account, domain, mint_actions, [owner1]
        )

        with pytest.raises(NotReadyError) as exc_info:
            await gate.try_submit(proposal_id)

        assert exc_info.value.confirmations == 1
        assert exc_info.value.threshold == 2
        assert submission.submit_count == 0

    @pytest.mark.asyncio
    async def test_unknown_proposal(self, gate: SubmissionGateService) -> None:
        with pytest.raises(ProposalNotFoundError):
            await gate.try_submit("cd" * 32)

    @pytest.mark.asyncio
    async def test_second_submit_reports_receipt(
        self,
        gate: SubmissionGateService,
        submission: SubmissionServiceStub,
        ready_proposal_id: str,
    ) -> None:
        """A later caller learns the earlier outcome."""
        result = await gate.try_submit(ready_proposal_id)

        with pytest.raises(AlreadySubmittedError) as exc_info:
            await gate.try_submit(ready_proposal_id)

        assert exc_info.value.status == ProposalStatus.SUBMITTED
        assert exc_info.value.receipt == result.receipt
        assert submission.submit_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_submissions_single_winner(
        self,
        store: ProposalStoreStub,
        ready_proposal_id: str,
    ) -> None:
        """Ten racing callers produce exactly one external submission."""
        slow = SubmissionServiceStub(latency_seconds=0.01)
        gate = SubmissionGateService(store=store, submission=slow)

        outcomes = await asyncio.gather(
            *[gate.try_submit(ready_proposal_id) for _ in range(10)],
            return_exceptions=True,
        )

        winners = [o for o in outcomes if not isinstance(o, BaseException)]
        losers = [o for o in outcomes if isinstance(o, AlreadySubmittedError)]
        assert len(winners) == 1
        assert len(losers) == 9
        assert slow.submit_count == 1

    @pytest.mark.asyncio
    async def test_submit_failure_marks_failed(
        self,
        gate: SubmissionGateService,
        store: ProposalStoreStub,
        submission: SubmissionServiceStub,
        ready_proposal_id: str,
    ) -> None:
        """A collaborator error moves the proposal to FAILED, cause chained."""
        cause = CollaboratorUnavailableError("bundler", "connection refused")
        submission.set_submit_error(cause)

        with pytest.raises(SubmissionFailedError) as exc_info:
            await gate.try_submit(ready_proposal_id)

        assert exc_info.value.__cause__ is cause
        assert "connection refused" in exc_info.value.reason

        proposal = await store.get(ready_proposal_id)
        assert proposal is not None
        assert proposal.status == ProposalStatus.FAILED
        assert "connection refused" in (proposal.failure_reason or "")

    @pytest.mark.asyncio
    async def test_submit_failure_survives_store_error(
        self,
        verifier,
        account: AccountConfig,
        domain: SigningDomain,
        mint_actions: list[Action],
        submission: SubmissionServiceStub,
        owner1: Ed25519HashSigner,
        owner2: Ed25519HashSigner,
    ) -> None:
        """The submission failure is raised even if FAILED cannot be recorded."""
        store = _FailureRecordingDownStore()
        collector = SignatureCollectorService(store, verifier, account, domain)
        gate = SubmissionGateService(store=store, submission=submission)
        proposal_id = await _register(
            collector, account, domain, mint_actions, [owner1, owner2]
        )
        cause = RuntimeError("bundler down")
        submission.set_submit_error(cause)

        with pytest.raises(SubmissionFailedError) as exc_info:
            await gate.try_submit(proposal_id)

        assert exc_info.value.__cause__ is cause
        assert "bundler down" in exc_info.value.reason

        proposal = await store.get(proposal_id)
        assert proposal is not None
        assert proposal.status == ProposalStatus.SUBMITTING

    @pytest.mark.asyncio
    async def test_failed_proposal_is_closed(
        self,
        gate: SubmissionGateService,
        submission: SubmissionServiceStub,
        ready_proposal_id: str,
    ) -> None:
        """FAILED is terminal; the gate does not retry."""
        submission.set_submit_error(RuntimeError("nonce too low"))
        with pytest.raises(SubmissionFailedError):
            await gate.try_submit(ready_proposal_id)
        submission.set_submit_error(None)

        with pytest.raises(ProposalClosedError) as exc_info:
            await gate.try_submit(ready_proposal_id)

        assert "nonce too low" in (exc_info.value.failure_reason or "")
        assert submission.submit_count == 0

    @pytest.mark.asyncio
    async def test_inclusion_timeout_marks_failed(
        self,
        gate: SubmissionGateService,
        store: ProposalStoreStub,
        submission: SubmissionServiceStub,
        ready_proposal_id: str,
    ) -> None:
        """An inclusion failure records the operation id it was waiting for."""
        submission.set_inclusion_error(InclusionTimeoutError("0xabc", 1.0))

        with pytest.raises(SubmissionFailedError) as exc_info:
            await gate.try_submit(ready_proposal_id)

        assert isinstance(exc_info.value.__cause__, InclusionTimeoutError)
        proposal = await store.get(ready_proposal_id)
        assert proposal is not None
        assert proposal.status == ProposalStatus.FAILED
        assert proposal.operation_id == submission.submitted[0].operation_id

    @pytest.mark.asyncio
    async def test_reverted_execution_marks_failed(
        self,
        gate: SubmissionGateService,
        store: ProposalStoreStub,
        submission: SubmissionServiceStub,
        ready_proposal_id: str,
    ) -> None:
        """A receipt with success False is a failure carrying the receipt."""
        submission.set_revert()

        with pytest.raises(SubmissionFailedError) as exc_info:
            await gate.try_submit(ready_proposal_id)

        assert exc_info.value.receipt is not None
        assert not exc_info.value.receipt.success
        proposal = await store.get(ready_proposal_id)
        assert proposal is not None
        assert proposal.status == ProposalStatus.FAILED
        assert proposal.receipt == exc_info.value.receipt

    @pytest.mark.asyncio
    async def test_aggregation_failure_changes_nothing(
        self,
        gate: SubmissionGateService,
        store: ProposalStoreStub,
        submission: SubmissionServiceStub,
        account: AccountConfig,
        domain: SigningDomain,
        mint_actions: list[Action],
        owner1: Ed25519HashSigner,
        owner2: Ed25519HashSigner,
    ) -> None:
        """A confirmation set that cannot be encoded leaves THRESHOLD_MET."""
        payload = build_canonical_payload(mint_actions, account, 0, GasParams())
        signing_hash = compute_signing_hash(payload, domain)
        broken = Proposal(
            proposal_id=signing_hash.hex(),
            account=account,
            payload=payload,
            signing_hash=signing_hash,
            confirmations=(
                Confirmation(signer=owner1.identity, signature=b"\x01" * 10),
                Confirmation(signer=owner2.identity, signature=b"\x02" * 64),
            ),
            status=ProposalStatus.THRESHOLD_MET,
        )
        await store.put(broken)

        with pytest.raises(InvalidSignatureError):
            await gate.try_submit(broken.proposal_id)

        stored = await store.get(broken.proposal_id)
        assert stored is not None
        assert stored.status == ProposalStatus.THRESHOLD_MET
        assert submission.submit_count == 0
