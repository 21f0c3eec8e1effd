"""Operation coordinator service.

Drives the end-to-end threshold flow for one account:

    propose  -> build, sponsor, hash, register, proposer confirms
    confirm  -> another signer signs the proposal's hash by id
    execute  -> submission gate (at most one submission)

Any signer may call execute once the threshold is met; racing callers
are arbitrated by the gate.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from structlog import get_logger

from multisig_coordinator.domain.errors import UnauthorizedSignerError
from multisig_coordinator.domain.models.operation import GasParams
from multisig_coordinator.domain.services.operation_builder import (
    DEFAULT_ENTRY_POINT,
    ActionLike,
    build_canonical_payload,
    compute_signing_hash,
)

if TYPE_CHECKING:
    from multisig_coordinator.application.ports.signature_collector import (
        ConfirmationResult,
        SignatureCollectorProtocol,
    )
    from multisig_coordinator.application.ports.signer import HashSignerProtocol
    from multisig_coordinator.application.ports.sponsorship import (
        SponsorshipServiceProtocol,
    )
    from multisig_coordinator.application.ports.submission_gate import (
        SubmissionGateProtocol,
        SubmissionResult,
    )
    from multisig_coordinator.domain.models.account import AccountConfig
    from multisig_coordinator.domain.models.operation import SigningDomain
    from multisig_coordinator.domain.models.proposal import Proposal

logger = get_logger(__name__)


class OperationCoordinatorService:
    """Coordinates proposal, confirmation and execution of operations.

    Example:
        >>> coordinator = OperationCoordinatorService(
        ...     account=account,
        ...     domain=domain,
        ...     sponsorship=sponsor,
        ...     collector=collector,
        ...     gate=gate,
        ... )
        >>> proposal_id = await coordinator.propose(actions, nonce=0, proposer=owner1)
        >>> await coordinator.confirm(proposal_id, owner2)
        >>> result = await coordinator.execute(proposal_id)
    """

    def __init__(
        self,
        account: AccountConfig,
        domain: SigningDomain,
        sponsorship: SponsorshipServiceProtocol,
        collector: SignatureCollectorProtocol,
        gate: SubmissionGateProtocol,
        entry_point: str = DEFAULT_ENTRY_POINT,
    ) -> None:
        """Initialize the coordinator.

        Args:
            account: Account operations are proposed for.
            domain: Signing domain (chain id, verifying module).
            sponsorship: Gas sponsorship collaborator.
            collector: Signature collector for this account.
            gate: Submission gate.
            entry_point: Entry point contract address for payloads.
        """
        self._account = account
        self._domain = domain
        self._sponsorship = sponsorship
        self._collector = collector
        self._gate = gate
        self._entry_point = entry_point

    async def propose(
        self,
        actions: Iterable[ActionLike],
        nonce: int,
        *,
        proposer: HashSignerProtocol,
        gas: GasParams | None = None,
        valid_after: int = 0,
        valid_until: int = 0,
    ) -> str:
        """Build, sponsor and register an operation, then confirm it.

        Nothing is registered if building or sponsorship fails.

        Args:
            actions: Batched calls to execute.
            nonce: Account nonce to consume.
            proposer: Signer proposing (and confirming) the operation.
            gas: Gas limits and fee caps; sponsorship may re-estimate them.
            valid_after: Validity window start (uint48).
            valid_until: Validity window end (uint48).

        Returns:
            The proposal id (hex signing hash).

        Raises:
            UnauthorizedSignerError: Proposer is not one of the signers.
            InvalidActionError: The batch is empty or malformed.
            SponsorshipRejectedError: The sponsor refused the payload.
        """
        log = logger.bind(account=self._account.address, proposer=proposer.identity)

        if not self._account.is_authorized(proposer.identity):
            log.warning("proposal_rejected_unauthorized_proposer")
            raise UnauthorizedSignerError(proposer.identity, self._account.address)

        payload = build_canonical_payload(
            actions,
            self._account,
            nonce,
            gas or GasParams(),
            entry_point=self._entry_point,
            valid_after=valid_after,
            valid_until=valid_until,
        )
        log.info("operation_built", action_count=len(payload.actions), nonce=nonce)

        sponsored = await self._sponsorship.sponsor(payload)
        log.info("operation_sponsored")

        signing_hash = compute_signing_hash(sponsored, self._domain)
        proposal_id = await self._collector.register_proposal(sponsored, signing_hash)

        result = await self.confirm(proposal_id, proposer)
        log.info(
            "operation_proposed",
            proposal_id=proposal_id,
            confirmation_count=result.confirmation_count,
            threshold=result.threshold,
        )
        return proposal_id

    async def confirm(
        self,
        proposal_id: str,
        signer: HashSignerProtocol,
    ) -> ConfirmationResult:
        """Sign a proposal's signing hash and submit the confirmation.

        Args:
            proposal_id: The proposal to confirm.
            signer: Key holder confirming the proposal.

        Returns:
            ConfirmationResult from the collector.
        """
        proposal = await self._collector.get_proposal(proposal_id)
        signature = await signer.sign(proposal.signing_hash)
        return await self._collector.submit_confirmation(
            proposal_id, signer.identity, signature
        )

    async def execute(self, proposal_id: str) -> SubmissionResult:
        """Submit a threshold-met proposal through the gate."""
        return await self._gate.try_submit(proposal_id)

    async def list_pending(self) -> list[Proposal]:
        """List the account's pending proposals, oldest first."""
        return await self._collector.list_pending()
