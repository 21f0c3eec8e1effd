"""Bootstrap wiring for the multisig coordinator."""
