"""Application services for the multisig coordinator."""

from multisig_coordinator.application.services.operation_coordinator_service import (
    OperationCoordinatorService,
)
from multisig_coordinator.application.services.signature_collector_service import (
    SignatureCollectorService,
)
from multisig_coordinator.application.services.submission_gate_service import (
    SubmissionGateService,
)

__all__: list[str] = [
    "OperationCoordinatorService",
    "SignatureCollectorService",
    "SubmissionGateService",
]
