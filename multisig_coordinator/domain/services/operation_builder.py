"""Operation builder - canonical payload construction and signing hash.

Pure data transformation, no side effects:
- build_canonical_payload: validate batched actions and assemble the payload
- encode_batch_call_data: packed batch encoding of the actions
- canonical_bytes: the payload's canonical serialization
- compute_signing_hash: domain-separated digest signers actually sign

Signing hash layout (BLAKE3, 32 bytes):

    H(0x19 0x01 || H(domain) || H(canonical_bytes(payload)))

The domain includes the chain id and the verifying module, so the same
payload on two networks yields two different hashes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any, Union

import blake3

from multisig_coordinator.domain.errors.operation import InvalidActionError
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.operation import (
    UINT256_MAX,
    Action,
    CallOperation,
    GasParams,
    OperationPayload,
    SigningDomain,
    is_address,
    normalize_address,
    parse_hex_bytes,
)

# EIP-191 style prefix for structured data hashes
SIGNING_HASH_PREFIX = b"\x19\x01"

# Entry point the 0.2.0 Safe 4337 module is deployed against
DEFAULT_ENTRY_POINT = "0x5ff137d4b0fdcd49dca30c7cf57e578a026d2789"

ActionLike = Union[Action, Mapping[str, Any]]


def _canonical_json(data: Mapping[str, Any]) -> bytes:
    """Serialize a mapping as sorted-key compact UTF-8 JSON."""
    return json.dumps(
        data, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _coerce_action(index: int, raw: ActionLike) -> Action:
    """Validate one raw action and return its canonical form.

    Raises:
        InvalidActionError: If the target, value, data or operation is malformed.
    """
    if isinstance(raw, Action):
        to, value, data, operation = raw.to, raw.value, raw.data, raw.operation
    elif isinstance(raw, Mapping):
        if "to" not in raw:
            raise InvalidActionError("missing target address", index)
        to = raw["to"]
        value = raw.get("value", 0)
        data = raw.get("data", b"")
        operation = raw.get("operation", CallOperation.CALL)
    else:
        raise InvalidActionError(f"unsupported action type {type(raw).__name__}", index)

    if not is_address(to):
        raise InvalidActionError(f"malformed target address {to!r}", index)

    # bool is an int subclass but never a meaningful value
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidActionError(f"value must be an integer, got {value!r}", index)
    if value < 0 or value > UINT256_MAX:
        raise InvalidActionError(f"value out of uint256 range: {value}", index)

    if isinstance(data, str):
        try:
            data = parse_hex_bytes(data)
        except ValueError as e:
            raise InvalidActionError(f"data is not hex: {data!r}", index) from e
    elif isinstance(data, (bytes, bytearray)):
        data = bytes(data)
    else:
        raise InvalidActionError(f"data must be bytes or hex, got {data!r}", index)

    try:
        operation = CallOperation(operation)
    except ValueError as e:
        raise InvalidActionError(f"unknown operation {operation!r}", index) from e

    return Action(to=to.lower(), value=value, data=data, operation=operation)


def encode_batch_call_data(actions: Iterable[Action]) -> bytes:
    """Pack actions into the MultiSend transaction encoding.

    Each action is encoded as
    ``operation (1) || to (20) || value (32) || len(data) (32) || data``.

    Args:
        actions: Validated actions in execution order.

    Returns:
        The concatenated packed encoding.
    """
    parts: list[bytes] = []
    for action in actions:
        parts.append(int(action.operation).to_bytes(1, "big"))
        parts.append(bytes.fromhex(action.to[2:]))
        parts.append(action.value.to_bytes(32, "big"))
        parts.append(len(action.data).to_bytes(32, "big"))
        parts.append(action.data)
    return b"".join(parts)


def build_canonical_payload(
    actions: Iterable[ActionLike],
    account: AccountConfig,
    nonce: int,
    gas: GasParams,
    *,
    entry_point: str = DEFAULT_ENTRY_POINT,
    valid_after: int = 0,
    valid_until: int = 0,
) -> OperationPayload:
    """Assemble the canonical payload of a batched operation.

    Deterministic: the same inputs always produce an equal payload.
    Addresses are normalized to lowercase so letter case never changes
    the signing hash.

    Args:
        actions: Batched calls (Action instances or mappings with
            ``to``, ``value``, ``data``, ``operation``).
        account: The account executing the operation.
        nonce: Account nonce to consume.
        gas: Gas limits and fee caps.
        entry_point: Entry point contract address.
        valid_after: Validity window start (uint48, 0 = unbounded).
        valid_until: Validity window end (uint48, 0 = unbounded).

    Returns:
        The canonical, unsponsored OperationPayload.

    Raises:
        InvalidActionError: If the batch is empty or any action is malformed.
        ValueError: If nonce, entry point or validity window are invalid.
    """
    canonical_actions = tuple(
        _coerce_action(index, raw) for index, raw in enumerate(actions)
    )
    if not canonical_actions:
        raise InvalidActionError("batch must contain at least one action")

    if isinstance(nonce, bool) or not isinstance(nonce, int):
        raise ValueError(f"nonce must be an integer, got {nonce!r}")

    return OperationPayload(
        sender=account.address,
        nonce=nonce,
        entry_point=normalize_address(entry_point),
        actions=canonical_actions,
        call_data=encode_batch_call_data(canonical_actions),
        gas=gas,
        valid_after=valid_after,
        valid_until=valid_until,
    )


def canonical_bytes(payload: OperationPayload) -> bytes:
    """Return the canonical serialization of a payload.

    Two payloads are the same operation iff these bytes are equal.
    """
    return _canonical_json(payload.to_dict())


def domain_separator(domain: SigningDomain) -> bytes:
    """Compute the 32-byte digest of a signing domain."""
    return blake3.blake3(_canonical_json(domain.to_dict())).digest()


def compute_signing_hash(payload: OperationPayload, domain: SigningDomain) -> bytes:
    """Compute the domain-separated signing hash of a payload.

    Pure and deterministic. Changing any payload field, the chain id or
    the verifying module changes the result.

    Args:
        payload: The (sponsored) payload signers will sign.
        domain: Chain and verifying-module identifiers.

    Returns:
        32-byte signing hash.
    """
    struct_hash = blake3.blake3(canonical_bytes(payload)).digest()
    return blake3.blake3(
        SIGNING_HASH_PREFIX + domain_separator(domain) + struct_hash
    ).digest()
