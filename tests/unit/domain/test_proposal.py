"""Unit tests for the Proposal aggregate and its status machine."""

from __future__ import annotations

import pytest

from multisig_coordinator.domain.errors import (
    ProposalClosedError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.operation import (
    Action,
    OperationPayload,
)
from multisig_coordinator.domain.models.proposal import (
    STATUS_TRANSITION_MATRIX,
    TERMINAL_STATUSES,
    Proposal,
    ProposalStatus,
)
from multisig_coordinator.domain.models.receipt import Receipt

SIGNER_IDS = ["cc" * 32, "aa" * 32, "bb" * 32]
ACCOUNT = AccountConfig.create("0x" + "33" * 20, SIGNER_IDS, threshold=2)
SIGNING_HASH = bytes(range(32))


def _payload() -> OperationPayload:
    action = Action(to="0x" + "11" * 20, value=1)
    return OperationPayload(
        sender=ACCOUNT.address,
        nonce=0,
        entry_point="0x" + "22" * 20,
        actions=(action,),
        call_data=b"\x00",
    )


def _open() -> Proposal:
    return Proposal.open(ACCOUNT, _payload(), SIGNING_HASH)


def _confirm(signer: str, fill: int = 1) -> Confirmation:
    return Confirmation(signer=signer, signature=bytes([fill]) * 64)


class TestProposalStatus:
    """Tests for the status machine."""

    def test_terminal_statuses(self) -> None:
        """SUBMITTED and FAILED are terminal with no transitions."""
        assert TERMINAL_STATUSES == {ProposalStatus.SUBMITTED, ProposalStatus.FAILED}
        for status in TERMINAL_STATUSES:
            assert status.is_terminal()
            assert status.valid_transitions() == frozenset()

    def test_matrix_covers_all_statuses(self) -> None:
        """Every status has an entry in the transition matrix."""
        assert set(STATUS_TRANSITION_MATRIX) == set(ProposalStatus)

    def test_only_collecting_statuses_accept_confirmations(self) -> None:
        """OPEN and THRESHOLD_MET accept confirmations; the rest do not."""
        accepting = {s for s in ProposalStatus if s.accepts_confirmations()}

        assert accepting == {ProposalStatus.OPEN, ProposalStatus.THRESHOLD_MET}


class TestProposal:
    """Tests for Proposal."""

    def test_open_proposal(self) -> None:
        """A new proposal is OPEN, empty and keyed by its hash."""
        proposal = _open()

        assert proposal.proposal_id == SIGNING_HASH.hex()
        assert proposal.status == ProposalStatus.OPEN
        assert proposal.confirmation_count == 0
        assert proposal.threshold == 2

    def test_id_must_match_hash(self) -> None:
        """proposal_id is always the hex signing hash."""
        with pytest.raises(ValueError):
            Proposal(
                proposal_id="00" * 32,
                account=ACCOUNT,
                payload=_payload(),
                signing_hash=SIGNING_HASH,
            )

    def test_hash_must_be_32_bytes(self) -> None:
        """Signing hashes are 32 bytes."""
        with pytest.raises(ValueError):
            Proposal.open(ACCOUNT, _payload(), b"\x01" * 31)

    def test_threshold_promotes_status(self) -> None:
        """Reaching T distinct confirmations moves OPEN to THRESHOLD_MET."""
        one = _open().with_confirmation(_confirm("aa" * 32))
        two = one.with_confirmation(_confirm("bb" * 32))

        assert one.status == ProposalStatus.OPEN
        assert two.status == ProposalStatus.THRESHOLD_MET
        assert two.is_threshold_met

    def test_confirmations_ordered_by_registration(self) -> None:
        """Order follows the account's signer order, not arrival order."""
        proposal = (
            _open()
            .with_confirmation(_confirm("bb" * 32))
            .with_confirmation(_confirm("aa" * 32))
            .with_confirmation(_confirm("cc" * 32))
        )

        assert [c.signer for c in proposal.confirmations] == SIGNER_IDS

    def test_same_confirmation_is_noop(self) -> None:
        """Re-adding an identical confirmation returns the same instance."""
        proposal = _open().with_confirmation(_confirm("aa" * 32))

        assert proposal.with_confirmation(_confirm("aa" * 32)) is proposal

    def test_new_signature_replaces_slot(self) -> None:
        """A signer's new signature overwrites, never duplicates."""
        proposal = (
            _open()
            .with_confirmation(_confirm("aa" * 32, fill=1))
            .with_confirmation(_confirm("aa" * 32, fill=2))
        )

        assert proposal.confirmation_count == 1
        assert proposal.confirmations[0].signature == bytes([2]) * 64

    def test_unauthorized_signer(self) -> None:
        """Confirmations from outside the account are rejected."""
        with pytest.raises(UnauthorizedSignerError):
            _open().with_confirmation(_confirm("dd" * 32))

    @pytest.mark.parametrize(
        "status",
        [ProposalStatus.SUBMITTING, ProposalStatus.SUBMITTED, ProposalStatus.FAILED],
    )
    def test_closed_proposal_rejects_confirmations(
        self, status: ProposalStatus
    ) -> None:
        """Confirmations after submission started are rejected."""
        proposal = Proposal(
            proposal_id=SIGNING_HASH.hex(),
            account=ACCOUNT,
            payload=_payload(),
            signing_hash=SIGNING_HASH,
            status=status,
        )

        with pytest.raises(ProposalClosedError) as exc_info:
            proposal.with_confirmation(_confirm("aa" * 32))

        assert exc_info.value.status == status

    def test_invalid_transition(self) -> None:
        """OPEN cannot jump to SUBMITTING."""
        with pytest.raises(ValueError):
            _open().with_status(ProposalStatus.SUBMITTING)

    def test_with_status_records_outcome(self) -> None:
        """Receipt and operation id are recorded on transition."""
        receipt = Receipt(success=True, operation_id="0x01", transaction_hash="0x02")
        proposal = (
            _open()
            .with_confirmation(_confirm("aa" * 32))
            .with_confirmation(_confirm("bb" * 32))
            .with_status(ProposalStatus.SUBMITTING)
            .with_status(
                ProposalStatus.SUBMITTED, operation_id="0x01", receipt=receipt
            )
        )

        assert proposal.status == ProposalStatus.SUBMITTED
        assert proposal.operation_id == "0x01"
        assert proposal.receipt == receipt

    def test_dict_round_trip(self) -> None:
        """to_dict and from_dict preserve the aggregate."""
        proposal = _open().with_confirmation(_confirm("aa" * 32))

        restored = Proposal.from_dict(proposal.to_dict())

        assert restored == proposal
        assert restored.confirmations[0].confirmed_at == (
            proposal.confirmations[0].confirmed_at
        )
