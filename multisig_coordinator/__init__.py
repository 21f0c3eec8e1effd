"""
Multisig Coordinator - threshold signature coordination for smart accounts

Coordinates a batched account operation that needs T-of-N signer approval:
canonical payload construction, durable confirmation collection,
deterministic signature aggregation and at-most-once submission.

Core guarantees:
- Identical payload and domain always yield the identical signing hash
- Confirmations are idempotent and independent of arrival order
- A proposal is submitted at most once
- Failures surface verbatim, never silently dropped
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
