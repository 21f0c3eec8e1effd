"""Operation payload domain models.

This module defines the canonical representation of a batched account
operation - the thing signers actually sign:
- Action: one call inside the batch
- GasParams: execution gas limits and fee caps
- OperationPayload: the full operation plus execution metadata
- SigningDomain: chain and verifying-module identifiers mixed into the hash

All models are frozen. A payload is only ever changed by producing a new
instance (e.g. OperationPayload.with_sponsorship), so a signing hash
computed from an instance stays valid for that instance.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any

# Schema version of the canonical payload dictionary. Part of the hashed
# content, so bumping it changes every signing hash.
PAYLOAD_SCHEMA_VERSION = 1

UINT48_MAX = 2**48 - 1
UINT256_MAX = 2**256 - 1

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: object) -> bool:
    """Check whether a value is a 0x-prefixed 20-byte hex address."""
    return isinstance(value, str) and _ADDRESS_RE.match(value) is not None


def normalize_address(value: str) -> str:
    """Return the canonical (lowercase) form of an address.

    Args:
        value: 0x-prefixed 20-byte hex address, any letter case.

    Returns:
        The lowercase address.

    Raises:
        ValueError: If the value is not a valid address.
    """
    if not is_address(value):
        raise ValueError(f"not a 20-byte hex address: {value!r}")
    return value.lower()


def hex_bytes(value: bytes) -> str:
    """Encode bytes as lowercase 0x-prefixed hex."""
    return "0x" + value.hex()


def parse_hex_bytes(value: str) -> bytes:
    """Decode 0x-prefixed (or bare) hex into bytes.

    Raises:
        ValueError: If the string is not valid hex.
    """
    text = value[2:] if value.startswith(("0x", "0X")) else value
    return bytes.fromhex(text)


class CallOperation(IntEnum):
    """How the account executes a batched call.

    Values:
        CALL: Regular message call.
        DELEGATECALL: Execute target code in the account's context.
    """

    CALL = 0
    DELEGATECALL = 1


@dataclass(frozen=True, eq=True)
class Action:
    """One call inside a batched operation.

    Attributes:
        to: Target address (lowercase, 0x-prefixed).
        value: Native value to transfer with the call (wei).
        data: Call data.
        operation: CALL or DELEGATECALL.
    """

    to: str
    value: int = 0
    data: bytes = b""
    operation: CallOperation = CallOperation.CALL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical dictionary form.

        Returns:
            Dictionary with integers as decimal strings and bytes as hex.
        """
        return {
            "to": self.to,
            "value": str(self.value),
            "data": hex_bytes(self.data),
            "operation": int(self.operation),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """Deserialize from the canonical dictionary form."""
        return cls(
            to=data["to"],
            value=int(data["value"]),
            data=parse_hex_bytes(data["data"]),
            operation=CallOperation(int(data.get("operation", 0))),
        )


@dataclass(frozen=True, eq=True)
class GasParams:
    """Execution gas limits and fee caps of an operation.

    Attributes:
        call_gas_limit: Gas for the batched execution call.
        verification_gas_limit: Gas for signature verification.
        pre_verification_gas: Gas paid for bundle overhead.
        max_fee_per_gas: Fee cap per unit of gas.
        max_priority_fee_per_gas: Priority fee cap per unit of gas.
    """

    call_gas_limit: int = 0
    verification_gas_limit: int = 0
    pre_verification_gas: int = 0
    max_fee_per_gas: int = 0
    max_priority_fee_per_gas: int = 0

    def __post_init__(self) -> None:
        """Validate gas fields.

        Raises:
            ValueError: If any field is negative or not an integer.
        """
        for name, value in self.to_dict().items():
            number = int(value)
            if number < 0 or number > UINT256_MAX:
                raise ValueError(f"{name} out of range: {number}")

    def to_dict(self) -> dict[str, str]:
        """Serialize to the canonical dictionary form (decimal strings)."""
        return {
            "call_gas_limit": str(self.call_gas_limit),
            "verification_gas_limit": str(self.verification_gas_limit),
            "pre_verification_gas": str(self.pre_verification_gas),
            "max_fee_per_gas": str(self.max_fee_per_gas),
            "max_priority_fee_per_gas": str(self.max_priority_fee_per_gas),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GasParams:
        """Deserialize from the canonical dictionary form."""
        return cls(
            call_gas_limit=int(data["call_gas_limit"]),
            verification_gas_limit=int(data["verification_gas_limit"]),
            pre_verification_gas=int(data["pre_verification_gas"]),
            max_fee_per_gas=int(data["max_fee_per_gas"]),
            max_priority_fee_per_gas=int(data["max_priority_fee_per_gas"]),
        )


@dataclass(frozen=True, eq=True)
class OperationPayload:
    """Canonical, hashable description of a batched account operation.

    Two payloads are the same operation iff their canonical serializations
    are equal (see operation_builder.canonical_bytes).

    Attributes:
        sender: The smart account executing the operation.
        nonce: Account nonce consumed by the operation.
        entry_point: Entry point contract the operation is submitted to.
        actions: The batched calls, in execution order.
        call_data: Packed batch encoding of ``actions``.
        gas: Gas limits and fee caps.
        paymaster_and_data: Sponsorship data (empty until sponsored).
        valid_after: Earliest validity timestamp (uint48, 0 = unbounded).
        valid_until: Latest validity timestamp (uint48, 0 = unbounded).
    """

    sender: str
    nonce: int
    entry_point: str
    actions: tuple[Action, ...]
    call_data: bytes
    gas: GasParams = field(default_factory=GasParams)
    paymaster_and_data: bytes = b""
    valid_after: int = 0
    valid_until: int = 0

    def __post_init__(self) -> None:
        """Validate payload fields.

        Raises:
            ValueError: If any field validation fails.
        """
        if self.nonce < 0 or self.nonce > UINT256_MAX:
            raise ValueError(f"nonce out of range: {self.nonce}")
        for name in ("valid_after", "valid_until"):
            bound = getattr(self, name)
            if bound < 0 or bound > UINT48_MAX:
                raise ValueError(f"{name} must fit in uint48, got {bound}")

    @property
    def is_sponsored(self) -> bool:
        """Whether sponsorship data has been attached."""
        return len(self.paymaster_and_data) > 0

    def with_sponsorship(
        self,
        paymaster_and_data: bytes,
        gas: GasParams | None = None,
    ) -> OperationPayload:
        """Return a copy augmented with sponsorship fields.

        Args:
            paymaster_and_data: Sponsorship data returned by the sponsor.
            gas: Gas parameters re-estimated by the sponsor, if any.

        Returns:
            New OperationPayload; this instance is unchanged.
        """
        return replace(
            self,
            paymaster_and_data=paymaster_and_data,
            gas=gas if gas is not None else self.gas,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical dictionary form.

        WARNING: Never use asdict() - bytes and enums need explicit encoding.

        Returns:
            Dictionary suitable for canonical hashing and transport.
        """
        return {
            "sender": self.sender,
            "nonce": str(self.nonce),
            "entry_point": self.entry_point,
            "actions": [action.to_dict() for action in self.actions],
            "call_data": hex_bytes(self.call_data),
            "gas": self.gas.to_dict(),
            "paymaster_and_data": hex_bytes(self.paymaster_and_data),
            "valid_after": str(self.valid_after),
            "valid_until": str(self.valid_until),
            "schema_version": PAYLOAD_SCHEMA_VERSION,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationPayload:
        """Deserialize from the canonical dictionary form.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            sender=normalize_address(data["sender"]),
            nonce=int(data["nonce"]),
            entry_point=normalize_address(data["entry_point"]),
            actions=tuple(Action.from_dict(a) for a in data["actions"]),
            call_data=parse_hex_bytes(data["call_data"]),
            gas=GasParams.from_dict(data["gas"]),
            paymaster_and_data=parse_hex_bytes(data.get("paymaster_and_data", "0x")),
            valid_after=int(data.get("valid_after", 0)),
            valid_until=int(data.get("valid_until", 0)),
        )


@dataclass(frozen=True, eq=True)
class SigningDomain:
    """Domain mixed into every signing hash.

    The same payload on two chains, or for two verifying modules, yields
    two different signing hashes.

    Attributes:
        chain_id: Network chain identifier.
        verifying_contract: Address of the module that verifies signatures.
        name: Domain name.
        version: Domain version.
    """

    chain_id: int
    verifying_contract: str
    name: str = "Safe4337Module"
    version: str = "0.2.0"

    def __post_init__(self) -> None:
        """Validate domain fields.

        Raises:
            ValueError: If chain_id is negative or the contract is malformed.
        """
        if self.chain_id < 0:
            raise ValueError(f"chain_id must be non-negative, got {self.chain_id}")
        if not is_address(self.verifying_contract):
            raise ValueError(
                f"verifying_contract is not an address: {self.verifying_contract!r}"
            )

    def to_dict(self) -> dict[str, str]:
        """Serialize to the canonical dictionary form."""
        return {
            "chain_id": str(self.chain_id),
            "verifying_contract": self.verifying_contract.lower(),
            "name": self.name,
            "version": self.version,
        }
