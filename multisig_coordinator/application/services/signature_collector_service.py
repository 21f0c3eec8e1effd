"""Signature collector service implementation.

This module implements the SignatureCollectorProtocol: it registers
proposed operations and accepts confirmations from independent signers,
possibly running in different processes, against a shared proposal store.

Guarantees:
- Proposals are identified by signing hash, never by list position
- Re-registering the identical payload is a no-op
- Only verified confirmations from configured signers are stored
- Confirmations are idempotent; a signer may refresh, never duplicate
- The confirmation set is updated through the store's atomic upsert
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from structlog import get_logger

from multisig_coordinator.application.ports.signature_collector import (
    ConfirmationResult,
)
from multisig_coordinator.domain.errors import (
    AccountMismatchError,
    DuplicateProposalError,
    InvalidActionError,
    InvalidSignatureError,
    ProposalClosedError,
    ProposalNotFoundError,
    SigningHashMismatchError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.models.account import normalize_identity
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.services.operation_builder import (
    canonical_bytes,
    compute_signing_hash,
)

if TYPE_CHECKING:
    from multisig_coordinator.application.ports.proposal_store import (
        ProposalStoreProtocol,
    )
    from multisig_coordinator.application.ports.signer import (
        SignatureVerifierProtocol,
    )
    from multisig_coordinator.domain.models.account import AccountConfig
    from multisig_coordinator.domain.models.operation import (
        OperationPayload,
        SigningDomain,
    )

logger = get_logger(__name__)


class SignatureCollectorService:
    """Service for collecting signer confirmations on proposals.

    One collector serves one account. The account configuration and
    signing domain are fixed at construction.

    The confirmation flow ensures:
    1. Proposal exists under this account configuration
    2. Signer is one of the account's signers
    3. Proposal still accepts confirmations
    4. Signature verifies against the proposal's signing hash
    5. Confirmation is stored through the store's atomic upsert
    6. Threshold is re-evaluated in the same atomic step

    Example:
        >>> collector = SignatureCollectorService(
        ...     store=store,
        ...     verifier=verifier,
        ...     account=account,
        ...     domain=domain,
        ... )
        >>> proposal_id = await collector.register_proposal(payload, signing_hash)
        >>> result = await collector.submit_confirmation(
        ...     proposal_id, signer_id, signature
        ... )
    """

    def __init__(
        self,
        store: ProposalStoreProtocol,
        verifier: SignatureVerifierProtocol,
        account: AccountConfig,
        domain: SigningDomain,
    ) -> None:
        """Initialize the signature collector.

        Args:
            store: Durable proposal store shared by all signers.
            verifier: Signature verification primitive.
            account: Configuration of the account served.
            domain: Signing domain used to recompute signing hashes.
        """
        self._store = store
        self._verifier = verifier
        self._account = account
        self._domain = domain

    @property
    def account(self) -> AccountConfig:
        """The account this collector serves."""
        return self._account

    async def register_proposal(
        self,
        payload: OperationPayload,
        signing_hash: bytes,
    ) -> str:
        """Register a proposed operation.

        Registering the identical payload again is a no-op returning the
        existing id, whatever the existing proposal's status.

        Args:
            payload: The sponsored payload to be signed.
            signing_hash: Signing hash computed by the proposer.

        Returns:
            The proposal id (hex signing hash).

        Raises:
            InvalidActionError: Payload sender is not this account.
            SigningHashMismatchError: Hash does not match payload and domain.
            DuplicateProposalError: A different payload owns this hash.
            AccountMismatchError: The stored proposal snapshots another
                configuration of this account.
        """
        proposal_id = signing_hash.hex()
        log = logger.bind(proposal_id=proposal_id, account=self._account.address)
        log.info("registering_proposal")

        if payload.sender != self._account.address:
            log.warning("proposal_rejected_wrong_sender", sender=payload.sender)
            raise InvalidActionError(
                f"payload sender {payload.sender} is not account "
                f"{self._account.address}"
            )

        expected = compute_signing_hash(payload, self._domain)
        if expected != signing_hash:
            log.warning("proposal_rejected_hash_mismatch", expected=expected.hex())
            raise SigningHashMismatchError(expected.hex(), proposal_id)

        candidate = Proposal.open(self._account, payload, signing_hash)
        stored = await self._store.put(candidate)

        if canonical_bytes(stored.payload) != canonical_bytes(payload):
            log.warning(
                "duplicate_proposal_rejected",
                existing_status=stored.status.value,
            )
            raise DuplicateProposalError(proposal_id, stored.status)

        if stored.account != self._account:
            log.warning(
                "proposal_rejected_account_mismatch", threshold=stored.threshold
            )
            raise AccountMismatchError(proposal_id, self._account.address)

        if stored is not candidate:
            log.info(
                "proposal_already_registered",
                status=stored.status.value,
                confirmation_count=stored.confirmation_count,
            )
        else:
            log.info("proposal_registered", threshold=self._account.threshold)

        return stored.proposal_id

    async def submit_confirmation(
        self,
        proposal_id: str,
        signer: str,
        signature: bytes,
    ) -> ConfirmationResult:
        """Verify and store a signer's confirmation.

        Re-submitting the same valid signature is harmless; a different
        valid signature from the same signer replaces the earlier one.

        Args:
            proposal_id: The proposal to confirm (hex signing hash).
            signer: Identity (hex public key) of the confirming signer.
            signature: Signature over the proposal's signing hash.

        Returns:
            ConfirmationResult with the updated count and status.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            AccountMismatchError: Proposal registered under another
                configuration of this account.
            UnauthorizedSignerError: Signer not part of the account.
            ProposalClosedError: Proposal no longer accepts confirmations.
            InvalidSignatureError: Signature does not verify.
        """
        log = logger.bind(proposal_id=proposal_id, signer=signer)
        log.info("confirmation_received")

        proposal = await self._store.get(proposal_id)
        if proposal is None:
            log.warning("confirmation_rejected_unknown_proposal")
            raise ProposalNotFoundError(proposal_id)

        if proposal.account != self._account:
            log.warning(
                "confirmation_rejected_account_mismatch", threshold=proposal.threshold
            )
            raise AccountMismatchError(proposal_id, self._account.address)

        try:
            identity = normalize_identity(signer)
        except ValueError as e:
            log.warning("confirmation_rejected_malformed_identity")
            raise UnauthorizedSignerError(signer, proposal.account.address) from e

        if not proposal.account.is_authorized(identity):
            log.warning("confirmation_rejected_unauthorized")
            raise UnauthorizedSignerError(identity, proposal.account.address)

        if not proposal.status.accepts_confirmations():
            log.warning(
                "confirmation_rejected_closed", status=proposal.status.value
            )
            raise ProposalClosedError(
                proposal_id, proposal.status, proposal.failure_reason
            )

        if not signature or not await self._verifier.verify(
            proposal.signing_hash, signature, identity
        ):
            log.warning("confirmation_rejected_invalid_signature")
            raise InvalidSignatureError(identity, proposal_id)

        previous = proposal.confirmation_for(identity)
        updated = await self._store.add_confirmation(
            proposal_id, Confirmation(signer=identity, signature=signature)
        )

        unchanged = previous is not None and previous.signature == signature
        replaced = previous is not None and not unchanged

        if (
            proposal.status == ProposalStatus.OPEN
            and updated.status == ProposalStatus.THRESHOLD_MET
        ):
            log.info(
                "threshold_reached",
                confirmation_count=updated.confirmation_count,
                threshold=updated.threshold,
            )
        else:
            log.info(
                "confirmation_stored",
                confirmation_count=updated.confirmation_count,
                threshold=updated.threshold,
                replaced=replaced,
                unchanged=unchanged,
            )

        return ConfirmationResult(
            proposal_id=proposal_id,
            signer=identity,
            confirmation_count=updated.confirmation_count,
            threshold=updated.threshold,
            status=updated.status,
            replaced=replaced,
            unchanged=unchanged,
        )

    async def get_confirmations(self, proposal_id: str) -> list[Confirmation]:
        """Get confirmations ordered by signer registration order.

        The order never depends on arrival time, so aggregation over the
        returned list is deterministic.

        Args:
            proposal_id: The proposal to query.

        Returns:
            Confirmations in account signer order.

        Raises:
            ProposalNotFoundError: Unknown proposal.
        """
        proposal = await self.get_proposal(proposal_id)
        return list(proposal.confirmations)

    async def get_proposal(self, proposal_id: str) -> Proposal:
        """Get the current state of a proposal.

        Raises:
            ProposalNotFoundError: Unknown proposal.
        """
        proposal = await self._store.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(proposal_id)
        return proposal

    async def list_pending(self) -> list[Proposal]:
        """List OPEN and THRESHOLD_MET proposals of the account, oldest first.

        Several proposals may be pending at once; pick one by its id.
        """
        return await self._store.list_pending(self._account.address)
