"""Pure domain services: payload construction and signature aggregation."""

from multisig_coordinator.domain.services.operation_builder import (
    DEFAULT_ENTRY_POINT,
    build_canonical_payload,
    canonical_bytes,
    compute_signing_hash,
    encode_batch_call_data,
)
from multisig_coordinator.domain.services.signature_aggregator import (
    ED25519_SIGNATURE_LENGTH,
    SignatureAggregator,
)

__all__: list[str] = [
    "DEFAULT_ENTRY_POINT",
    "ED25519_SIGNATURE_LENGTH",
    "SignatureAggregator",
    "build_canonical_payload",
    "canonical_bytes",
    "compute_signing_hash",
    "encode_batch_call_data",
]
