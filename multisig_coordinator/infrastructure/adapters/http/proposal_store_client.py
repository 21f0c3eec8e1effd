"""HTTP proposal store client.

Implements ProposalStoreProtocol against the coordination service that
every signer process shares:

    PUT  /v1/proposals/{id}                        insert if absent
    GET  /v1/proposals/{id}                        fetch (404 = unknown)
    GET  /v1/accounts/{address}/proposals?pending=true
    POST /v1/proposals/{id}/confirmations          atomic upsert
    POST /v1/proposals/{id}/status                 compare-and-swap

The service performs the atomic steps; a 409 reports a closed proposal
or a lost compare-and-swap.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from structlog import get_logger

from multisig_coordinator.domain.errors import (
    CollaboratorUnavailableError,
    ConcurrentModificationError,
    MalformedResponseError,
    ProposalClosedError,
    ProposalNotFoundError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.models.receipt import Receipt
from multisig_coordinator.infrastructure.adapters.http.models import (
    ConflictModel,
    ProposalListModel,
    ProposalModel,
)
from multisig_coordinator.infrastructure.observability.correlation import (
    correlation_headers,
)

logger = get_logger(__name__)

SERVICE_NAME = "proposal_store"


class HttpProposalStore:
    """ProposalStoreProtocol implementation over the coordination service.

    Example:
        >>> store = HttpProposalStore(config.tx_service_url, config.tx_service_api_key)
        >>> proposal = await store.get(proposal_id)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Coordination service root URL.
            api_key: Bearer token, if the service requires one.
            timeout_seconds: Per-request timeout.
            transport: Optional transport (tests use httpx.MockTransport).
        """
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def put(self, proposal: Proposal) -> Proposal:
        """Insert a proposal unless its id is already present."""
        response = await self._request(
            "PUT", f"/v1/proposals/{proposal.proposal_id}", json=proposal.to_dict()
        )
        self._raise_for_status(response)
        return self._parse_proposal(response)

    async def get(self, proposal_id: str) -> Proposal | None:
        """Retrieve a proposal by id (None if unknown)."""
        response = await self._request("GET", f"/v1/proposals/{proposal_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return self._parse_proposal(response)

    async def list_pending(self, account_address: str) -> list[Proposal]:
        """List OPEN and THRESHOLD_MET proposals, oldest first."""
        response = await self._request(
            "GET",
            f"/v1/accounts/{account_address}/proposals",
            params={"pending": "true"},
        )
        self._raise_for_status(response)
        listing = self._parse(ProposalListModel, response)
        try:
            proposals = [item.to_domain() for item in listing.results]
        except (KeyError, ValueError) as e:
            raise MalformedResponseError(SERVICE_NAME, str(e)) from e
        proposals.sort(key=lambda p: p.created_at)
        return proposals

    async def add_confirmation(
        self,
        proposal_id: str,
        confirmation: Confirmation,
    ) -> Proposal:
        """Atomically upsert a signer's confirmation.

        Raises:
            ProposalNotFoundError: 404 from the service.
            UnauthorizedSignerError: 403 from the service.
            ProposalClosedError: 409 from the service.
        """
        response = await self._request(
            "POST",
            f"/v1/proposals/{proposal_id}/confirmations",
            json=confirmation.to_dict(),
        )
        if response.status_code == 404:
            raise ProposalNotFoundError(proposal_id)
        if response.status_code == 403:
            raise UnauthorizedSignerError(confirmation.signer, "unknown")
        if response.status_code == 409:
            conflict = self._parse(ConflictModel, response)
            raise ProposalClosedError(
                proposal_id, conflict.status, conflict.failure_reason
            )
        self._raise_for_status(response)
        return self._parse_proposal(response)

    async def transition_status(
        self,
        proposal_id: str,
        expected: ProposalStatus,
        new: ProposalStatus,
        *,
        operation_id: str | None = None,
        receipt: Receipt | None = None,
        failure_reason: str | None = None,
    ) -> Proposal:
        """Compare-and-swap the proposal status.

        Raises:
            ProposalNotFoundError: 404 from the service.
            ConcurrentModificationError: 409 from the service.
        """
        body: dict[str, Any] = {
            "expected": expected.value,
            "new": new.value,
            "operation_id": operation_id,
            "receipt": receipt.to_dict() if receipt else None,
            "failure_reason": failure_reason,
        }
        response = await self._request(
            "POST", f"/v1/proposals/{proposal_id}/status", json=body
        )
        if response.status_code == 404:
            raise ProposalNotFoundError(proposal_id)
        if response.status_code == 409:
            conflict = self._parse(ConflictModel, response)
            raise ConcurrentModificationError(proposal_id, expected, conflict.status)
        self._raise_for_status(response)
        return self._parse_proposal(response)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method, url, headers=correlation_headers(), **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning("proposal_store_transport_error", method=method, url=url)
            raise CollaboratorUnavailableError(SERVICE_NAME, str(e)) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Map unexpected statuses to collaborator errors."""
        if response.status_code >= 500:
            raise CollaboratorUnavailableError(
                SERVICE_NAME, f"HTTP {response.status_code}"
            )
        if response.status_code >= 300:
            raise MalformedResponseError(
                SERVICE_NAME, f"unexpected HTTP {response.status_code}"
            )

    @staticmethod
    def _parse(model: type[BaseModel], response: httpx.Response) -> Any:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponseError(SERVICE_NAME, str(e)) from e

    def _parse_proposal(self, response: httpx.Response) -> Proposal:
        parsed: ProposalModel = self._parse(ProposalModel, response)
        try:
            return parsed.to_domain()
        except (KeyError, ValueError) as e:
            raise MalformedResponseError(SERVICE_NAME, str(e)) from e
