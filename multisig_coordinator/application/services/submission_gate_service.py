"""Submission gate service implementation.

This module implements the SubmissionGateProtocol: exactly one caller
performs the external submission of a fully-authorized proposal, no
matter how many signers race to submit it.

Guarantees:
- The THRESHOLD_MET -> SUBMITTING claim is a store compare-and-swap
- The credential is aggregated before the claim, so a bad confirmation
  set never changes state
- Once SUBMITTING, the proposal ends SUBMITTED or FAILED, never reverts
- Collaborator failures are recorded verbatim and re-raised chained
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from structlog import get_logger

from multisig_coordinator.application.ports.submission_gate import SubmissionResult
from multisig_coordinator.domain.errors import (
    AlreadySubmittedError,
    ConcurrentModificationError,
    NotReadyError,
    ProposalClosedError,
    ProposalNotFoundError,
    SubmissionFailedError,
)
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.services.signature_aggregator import (
    ED25519_SIGNATURE_LENGTH,
    SignatureAggregator,
)

if TYPE_CHECKING:
    from multisig_coordinator.application.ports.proposal_store import (
        ProposalStoreProtocol,
    )
    from multisig_coordinator.application.ports.submission import (
        SubmissionServiceProtocol,
    )
    from multisig_coordinator.domain.models.receipt import Receipt

logger = get_logger(__name__)


class SubmissionGateService:
    """Service for at-most-once submission of threshold-met proposals.

    The submission flow ensures:
    1. Proposal exists and is THRESHOLD_MET
    2. Composite credential aggregates cleanly
    3. Caller wins the THRESHOLD_MET -> SUBMITTING compare-and-swap
    4. Submission and inclusion are awaited by the winner only
    5. Outcome is recorded as SUBMITTED or FAILED

    Example:
        >>> gate = SubmissionGateService(store=store, submission=bundler)
        >>> result = await gate.try_submit(proposal_id)
        >>> result.receipt.success
        True
    """

    def __init__(
        self,
        store: ProposalStoreProtocol,
        submission: SubmissionServiceProtocol,
        signature_length: int = ED25519_SIGNATURE_LENGTH,
    ) -> None:
        """Initialize the submission gate.

        Args:
            store: Durable proposal store shared by all signers.
            submission: External submission service (bundler).
            signature_length: Fixed signature length for aggregation.
        """
        self._store = store
        self._submission = submission
        self._signature_length = signature_length

    async def try_submit(self, proposal_id: str) -> SubmissionResult:
        """Submit a THRESHOLD_MET proposal exactly once.

        Args:
            proposal_id: The proposal to submit (hex signing hash).

        Returns:
            SubmissionResult of the winning submission.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            NotReadyError: Proposal is still OPEN.
            AlreadySubmittedError: Another caller won the race.
            ProposalClosedError: Proposal already FAILED.
            SubmissionFailedError: The collaborator failed; proposal FAILED.
        """
        log = logger.bind(proposal_id=proposal_id)
        log.info("submission_requested")

        proposal = await self._store.get(proposal_id)
        if proposal is None:
            log.warning("submission_rejected_unknown_proposal")
            raise ProposalNotFoundError(proposal_id)

        if proposal.status != ProposalStatus.THRESHOLD_MET:
            log.info("submission_rejected", status=proposal.status.value)
            self._raise_for_status(proposal)

        aggregator = SignatureAggregator(proposal.account, self._signature_length)
        credential = aggregator.aggregate(
            proposal.confirmations,
            valid_after=proposal.payload.valid_after,
            valid_until=proposal.payload.valid_until,
        )

        # Single winner: everyone else sees a ConcurrentModificationError
        try:
            await self._store.transition_status(
                proposal_id,
                ProposalStatus.THRESHOLD_MET,
                ProposalStatus.SUBMITTING,
            )
        except ConcurrentModificationError as e:
            log.info("submission_race_lost", actual_status=e.actual_status.value)
            current = await self._store.get(proposal_id)
            if current is None:
                raise ProposalNotFoundError(proposal_id) from e
            self._raise_for_status(current)

        log.info(
            "submission_claimed",
            confirmation_count=proposal.confirmation_count,
            signers=list(credential.signers),
        )

        try:
            operation_id = await self._submission.submit(proposal.payload, credential)
        except Exception as e:
            reason = self._describe(e)
            log.error("submission_failed", reason=reason)
            await self._mark_failed(proposal_id, reason)
            raise SubmissionFailedError(proposal_id, reason) from e

        log = log.bind(operation_id=operation_id)
        log.info("submission_sent")

        try:
            receipt = await self._submission.await_inclusion(operation_id)
        except Exception as e:
            reason = self._describe(e)
            log.error("inclusion_failed", reason=reason)
            await self._mark_failed(proposal_id, reason, operation_id=operation_id)
            raise SubmissionFailedError(proposal_id, reason) from e

        if not receipt.success:
            reason = f"operation {operation_id} reverted on execution"
            log.error("execution_reverted", transaction_hash=receipt.transaction_hash)
            await self._mark_failed(
                proposal_id, reason, operation_id=operation_id, receipt=receipt
            )
            raise SubmissionFailedError(proposal_id, reason, receipt=receipt)

        await self._store.transition_status(
            proposal_id,
            ProposalStatus.SUBMITTING,
            ProposalStatus.SUBMITTED,
            operation_id=operation_id,
            receipt=receipt,
        )

        log.info("submission_completed", transaction_hash=receipt.transaction_hash)

        return SubmissionResult(
            proposal_id=proposal_id,
            operation_id=operation_id,
            receipt=receipt,
            credential=credential,
        )

    async def _mark_failed(
        self,
        proposal_id: str,
        reason: str,
        *,
        operation_id: str | None = None,
        receipt: Receipt | None = None,
    ) -> None:
        """Move a SUBMITTING proposal to FAILED with its cause.

        A store error here is logged and not raised, so the caller still
        receives the SubmissionFailedError for the original failure. The
        proposal then stays SUBMITTING for an operator to resolve.
        """
        try:
            await self._store.transition_status(
                proposal_id,
                ProposalStatus.SUBMITTING,
                ProposalStatus.FAILED,
                operation_id=operation_id,
                receipt=receipt,
                failure_reason=reason,
            )
        except Exception as e:
            logger.error(
                "failure_record_failed",
                proposal_id=proposal_id,
                reason=reason,
                error=self._describe(e),
                exc_info=True,
            )

    @staticmethod
    def _describe(error: Exception) -> str:
        """Render a collaborator error for the failure record."""
        message = str(error)
        name = type(error).__name__
        return f"{name}: {message}" if message else name

    @staticmethod
    def _raise_for_status(proposal: Proposal) -> NoReturn:
        """Raise the error matching a proposal that is not THRESHOLD_MET."""
        if proposal.status == ProposalStatus.OPEN:
            raise NotReadyError(
                proposal.proposal_id,
                proposal.confirmation_count,
                proposal.threshold,
            )
        if proposal.status == ProposalStatus.FAILED:
            raise ProposalClosedError(
                proposal.proposal_id, proposal.status, proposal.failure_reason
            )
        raise AlreadySubmittedError(
            proposal.proposal_id, proposal.status, proposal.receipt
        )
