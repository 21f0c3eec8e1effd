"""Unit tests for HttpProposalStore over httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from multisig_coordinator.domain.errors import (
    CollaboratorUnavailableError,
    ConcurrentModificationError,
    MalformedResponseError,
    ProposalClosedError,
    ProposalNotFoundError,
    UnauthorizedSignerError,
)
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.confirmation import Confirmation
from multisig_coordinator.domain.models.operation import (
    Action,
    GasParams,
    SigningDomain,
)
from multisig_coordinator.domain.models.proposal import Proposal, ProposalStatus
from multisig_coordinator.domain.models.receipt import Receipt
from multisig_coordinator.domain.services.operation_builder import (
    build_canonical_payload,
    compute_signing_hash,
)
from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519HashSigner,
)
from multisig_coordinator.infrastructure.adapters.http.proposal_store_client import (
    HttpProposalStore,
)
from multisig_coordinator.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    set_correlation_id,
)

BASE_URL = "https://tx-service.test"

Handler = Callable[[httpx.Request], httpx.Response]


def _store(handler: Handler, api_key: str | None = "secret") -> HttpProposalStore:
    return HttpProposalStore(
        BASE_URL, api_key=api_key, transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def proposal(
    account: AccountConfig, domain: SigningDomain, mint_actions: list[Action]
) -> Proposal:
    payload = build_canonical_payload(mint_actions, account, 0, GasParams())
    return Proposal.open(account, payload, compute_signing_hash(payload, domain))


@pytest.fixture(autouse=True)
def clear_correlation_id() -> None:
    set_correlation_id("")


class TestReads:
    @pytest.mark.asyncio
    async def test_get_parses_proposal(self, proposal: Proposal) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=proposal.to_dict())

        set_correlation_id("flow-1")
        fetched = await _store(handler).get(proposal.proposal_id)

        assert fetched == proposal
        assert seen[0].url.path == f"/v1/proposals/{proposal.proposal_id}"
        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].headers[CORRELATION_HEADER] == "flow-1"

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self, proposal: Proposal) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=proposal.to_dict())

        await _store(handler, api_key=None).get(proposal.proposal_id)

        assert "Authorization" not in seen[0].headers
        assert CORRELATION_HEADER not in seen[0].headers

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self) -> None:
        store = _store(lambda request: httpx.Response(404))
        assert await store.get("ab" * 32) is None

    @pytest.mark.asyncio
    async def test_malformed_body(self, proposal: Proposal) -> None:
        body = proposal.to_dict()
        body["proposal_id"] = "not-a-hash"
        store = _store(lambda request: httpx.Response(200, json=body))

        with pytest.raises(MalformedResponseError):
            await store.get(proposal.proposal_id)

    @pytest.mark.asyncio
    async def test_mismatched_id_is_malformed(self, proposal: Proposal) -> None:
        """A body that fails domain validation is rejected at the boundary."""
        body = proposal.to_dict()
        body["proposal_id"] = "00" * 32
        store = _store(lambda request: httpx.Response(200, json=body))

        with pytest.raises(MalformedResponseError):
            await store.get(proposal.proposal_id)

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        store = _store(lambda request: httpx.Response(503))

        with pytest.raises(CollaboratorUnavailableError):
            await store.get("ab" * 32)

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CollaboratorUnavailableError) as exc_info:
            await _store(handler).get("ab" * 32)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_list_pending(self, proposal: Proposal, account: AccountConfig) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [proposal.to_dict()]})

        pending = await _store(handler).list_pending(account.address)

        assert pending == [proposal]
        assert seen[0].url.path == f"/v1/accounts/{account.address}/proposals"
        assert seen[0].url.params["pending"] == "true"


class TestWrites:
    @pytest.mark.asyncio
    async def test_put(self, proposal: Proposal) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=request.content)

        stored = await _store(handler).put(proposal)

        assert stored == proposal
        assert seen[0].method == "PUT"
        assert json.loads(seen[0].content)["proposal_id"] == proposal.proposal_id

    @pytest.mark.asyncio
    async def test_add_confirmation(
        self, proposal: Proposal, owner1: Ed25519HashSigner
    ) -> None:
        confirmation = Confirmation(
            owner1.identity, await owner1.sign(proposal.signing_hash)
        )
        confirmed = proposal.with_confirmation(confirmation)

        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["signer"] == owner1.identity
            return httpx.Response(200, json=confirmed.to_dict())

        result = await _store(handler).add_confirmation(
            proposal.proposal_id, confirmation
        )

        assert result.confirmation_for(owner1.identity) == confirmation

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "body", "error"),
        [
            (404, None, ProposalNotFoundError),
            (403, None, UnauthorizedSignerError),
            (409, {"reason": "closed", "status": "FAILED"}, ProposalClosedError),
        ],
    )
    async def test_add_confirmation_errors(
        self,
        proposal: Proposal,
        owner1: Ed25519HashSigner,
        status_code: int,
        body: dict | None,
        error: type[Exception],
    ) -> None:
        store = _store(lambda request: httpx.Response(status_code, json=body))

        with pytest.raises(error):
            await store.add_confirmation(
                proposal.proposal_id, Confirmation(owner1.identity, b"\x01" * 64)
            )

    @pytest.mark.asyncio
    async def test_transition_status_body(self, proposal: Proposal) -> None:
        receipt = Receipt(success=True, operation_id="0x01", transaction_hash="0x02")
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=proposal.to_dict())

        await _store(handler).transition_status(
            proposal.proposal_id,
            ProposalStatus.SUBMITTING,
            ProposalStatus.SUBMITTED,
            operation_id="0x01",
            receipt=receipt,
        )

        assert seen[0]["expected"] == "SUBMITTING"
        assert seen[0]["new"] == "SUBMITTED"
        assert seen[0]["operation_id"] == "0x01"
        assert seen[0]["receipt"]["transaction_hash"] == "0x02"
        assert seen[0]["failure_reason"] is None

    @pytest.mark.asyncio
    async def test_transition_conflict(self, proposal: Proposal) -> None:
        body = {"reason": "status_mismatch", "status": "SUBMITTING"}
        store = _store(lambda request: httpx.Response(409, json=body))

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await store.transition_status(
                proposal.proposal_id,
                ProposalStatus.THRESHOLD_MET,
                ProposalStatus.SUBMITTING,
            )

        assert exc_info.value.expected_status == ProposalStatus.THRESHOLD_MET
        assert exc_info.value.actual_status == ProposalStatus.SUBMITTING
