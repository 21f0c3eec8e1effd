"""Signature aggregator - combines confirmations into a composite credential.

Encoding (Safe 4337 module layout):

    valid_after (uint48, 6 bytes) || valid_until (uint48, 6 bytes)
    || signature_1 || ... || signature_n

Signatures are ordered by signer identity ascending, the canonical order
the verifying contract requires, so the same confirmation set always
encodes to the same bytes regardless of arrival order.
"""

from __future__ import annotations

from collections.abc import Iterable

from structlog import get_logger

from multisig_coordinator.domain.errors.aggregation import (
    DuplicateSignerError,
    InsufficientSignaturesError,
)
from multisig_coordinator.domain.errors.confirmation import (
    InvalidSignatureError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.credential import CompositeCredential
from multisig_coordinator.domain.models.operation import UINT48_MAX

ED25519_SIGNATURE_LENGTH = 64

logger = get_logger(__name__)


class SignatureAggregator:
    """Combines confirmations into the account's composite credential.

    The collector already prevents duplicate and unauthorized
    confirmations; the aggregator re-checks both before encoding.

    Example:
        >>> aggregator = SignatureAggregator(account)
        >>> credential = aggregator.aggregate(proposal.confirmations)
        >>> credential.hex()
    """

    def __init__(
        self,
        account: AccountConfig,
        signature_length: int = ED25519_SIGNATURE_LENGTH,
    ) -> None:
        """Initialize the aggregator.

        Args:
            account: Account whose signers and threshold apply.
            signature_length: Fixed length of every signature in bytes.
        """
        self._account = account
        self._signature_length = signature_length

    def aggregate(
        self,
        confirmations: Iterable[Confirmation],
        valid_after: int = 0,
        valid_until: int = 0,
    ) -> CompositeCredential:
        """Encode a confirmation set as a composite credential.

        Args:
            confirmations: Verified confirmations, in any order.
            valid_after: Validity window start (uint48).
            valid_until: Validity window end (uint48).

        Returns:
            The deterministic CompositeCredential.

        Raises:
            DuplicateSignerError: Two confirmations share a signer identity.
            UnauthorizedSignerError: A signer is not part of the account.
            InvalidSignatureError: A signature has the wrong length.
            InsufficientSignaturesError: Fewer than threshold confirmations.
            ValueError: If the validity window does not fit in uint48.
        """
        by_signer: dict[str, Confirmation] = {}
        for confirmation in confirmations:
            if confirmation.signer in by_signer:
                raise DuplicateSignerError(confirmation.signer)
            if not self._account.is_authorized(confirmation.signer):
                raise UnauthorizedSignerError(
                    confirmation.signer, self._account.address
                )
            if len(confirmation.signature) != self._signature_length:
                raise InvalidSignatureError(
                    confirmation.signer,
                    reason=(
                        f"expected {self._signature_length} bytes, "
                        f"got {len(confirmation.signature)}"
                    ),
                )
            by_signer[confirmation.signer] = confirmation

        if len(by_signer) < self._account.threshold:
            raise InsufficientSignaturesError(
                collected=len(by_signer), threshold=self._account.threshold
            )

        for name, bound in (("valid_after", valid_after), ("valid_until", valid_until)):
            if bound < 0 or bound > UINT48_MAX:
                raise ValueError(f"{name} must fit in uint48, got {bound}")

        signers = tuple(sorted(by_signer))
        encoded = (
            valid_after.to_bytes(6, "big")
            + valid_until.to_bytes(6, "big")
            + b"".join(by_signer[signer].signature for signer in signers)
        )

        logger.debug(
            "signatures_aggregated",
            account=self._account.address,
            signer_count=len(signers),
            threshold=self._account.threshold,
        )

        return CompositeCredential(
            signers=signers,
            encoded=encoded,
            valid_after=valid_after,
            valid_until=valid_until,
        )
