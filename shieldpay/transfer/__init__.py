from .link_adapter import LinkTransferAdapter
from .orchestrator import TransferOrchestrator
from .types import (
    OutcomeStatus,
    OverallStatus,
    TransferOutcome,
    TransferRequest,
    TransferResult,
    TransferState,
    calculate_even_split,
)

__all__ = [
    "LinkTransferAdapter",
    "OutcomeStatus",
    "OverallStatus",
    "TransferOrchestrator",
    "TransferOutcome",
    "TransferRequest",
    "TransferResult",
    "TransferState",
    "calculate_even_split",
]
