"""Minimal JSON-RPC 2.0 transport shared by the paymaster and bundler.

Also converts an OperationPayload to the wire form of an ERC-4337
(v0.6) user operation: addresses and bytes as 0x hex, integers as hex
quantities.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from structlog import get_logger

from multisig_coordinator.domain.errors import (
    CollaboratorUnavailableError,
    MalformedResponseError,
)
from multisig_coordinator.domain.models.operation import OperationPayload, hex_bytes
from multisig_coordinator.infrastructure.observability.correlation import (
    correlation_headers,
)

logger = get_logger(__name__)


class JsonRpcErrorModel(BaseModel):
    """The ``error`` member of a JSON-RPC response."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response envelope."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcErrorModel | None = None


def to_hex_quantity(value: int) -> str:
    """Encode an integer as a JSON-RPC hex quantity."""
    return hex(value)


def parse_hex_quantity(value: str) -> int:
    """Decode a JSON-RPC hex quantity.

    Raises:
        ValueError: If the value is not 0x-prefixed hex.
    """
    if not value.startswith("0x"):
        raise ValueError(f"not a hex quantity: {value!r}")
    return int(value, 16)


def to_user_operation(payload: OperationPayload, signature: bytes = b"") -> dict[str, str]:
    """Render a payload as an ERC-4337 user operation.

    Args:
        payload: The operation payload.
        signature: Composite credential bytes (empty before signing).

    Returns:
        The user operation in JSON-RPC wire form.
    """
    gas = payload.gas
    return {
        "sender": payload.sender,
        "nonce": to_hex_quantity(payload.nonce),
        "initCode": "0x",
        "callData": hex_bytes(payload.call_data),
        "callGasLimit": to_hex_quantity(gas.call_gas_limit),
        "verificationGasLimit": to_hex_quantity(gas.verification_gas_limit),
        "preVerificationGas": to_hex_quantity(gas.pre_verification_gas),
        "maxFeePerGas": to_hex_quantity(gas.max_fee_per_gas),
        "maxPriorityFeePerGas": to_hex_quantity(gas.max_priority_fee_per_gas),
        "paymasterAndData": hex_bytes(payload.paymaster_and_data),
        "signature": hex_bytes(signature),
    }


class JsonRpcClient:
    """JSON-RPC 2.0 client over httpx.AsyncClient.

    Transport failures and non-2xx statuses raise
    CollaboratorUnavailableError; undecodable envelopes raise
    MalformedResponseError. RPC-level errors are returned to the caller,
    which maps them to its own domain error.
    """

    def __init__(
        self,
        url: str,
        service: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: JSON-RPC endpoint.
            service: Collaborator name used in errors and logs.
            timeout_seconds: Per-request timeout.
            transport: Optional transport (tests use httpx.MockTransport).
        """
        self._url = url
        self._service = service
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)
        self._ids = itertools.count(1)

    @property
    def service(self) -> str:
        """Collaborator name."""
        return self._service

    async def call(self, method: str, params: list[Any]) -> JsonRpcResponse:
        """Invoke a JSON-RPC method.

        Args:
            method: RPC method name.
            params: Positional parameters.

        Returns:
            The decoded response envelope (result or error).

        Raises:
            CollaboratorUnavailableError: Transport failure or HTTP error status.
            MalformedResponseError: Response is not a JSON-RPC envelope.
        """
        request_id = next(self._ids)
        body = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}

        try:
            response = await self._client.post(
                self._url, json=body, headers=correlation_headers()
            )
        except httpx.HTTPError as e:
            logger.warning("rpc_transport_error", service=self._service, method=method)
            raise CollaboratorUnavailableError(self._service, str(e)) from e

        if response.status_code >= 300:
            logger.warning(
                "rpc_http_error",
                service=self._service,
                method=method,
                status_code=response.status_code,
            )
            raise CollaboratorUnavailableError(
                self._service, f"HTTP {response.status_code}"
            )

        try:
            envelope = JsonRpcResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponseError(self._service, str(e)) from e

        if envelope.error is not None:
            logger.info(
                "rpc_error_returned",
                service=self._service,
                method=method,
                code=envelope.error.code,
            )
        return envelope

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
