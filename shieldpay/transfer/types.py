"""Types for shielded transfers."""

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from ..constants import MAX_RECIPIENTS, MIN_RECIPIENTS
from ..exceptions import (
    DepositFailed,
    InvalidAmount,
    InvalidRecipient,
    InvalidRecipientCount,
    WithdrawFailed,
)
from ..pool import SettlementReference
from ..tokens import parse_amount
from ..utils import validate_svm_address


class TransferState(str, Enum):
    """Lifecycle of one transfer attempt."""

    IDLE = "idle"
    VALIDATING = "validating"
    DEPOSITING = "depositing"
    WITHDRAWING = "withdrawing"
    COMPLETED = "completed"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"
    ABORTED = "aborted"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class OverallStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass
class TransferRequest:
    """A request to pay ``total_amount`` of ``token``, split evenly across recipients.

    Attributes:
        token: Asset symbol (e.g. "SOL", "USDC").
        total_amount: Human-readable decimal amount (e.g. "10" or "0.5").
        recipients: Ordered, distinct recipient addresses (1-5).
    """

    token: str
    total_amount: str | Decimal
    recipients: list[str] = field(default_factory=list)

    def validate(self, is_valid_address: Callable[[str], bool] = validate_svm_address) -> None:
        """Validate the request shape.

        Raises:
            InvalidRecipientCount: If there are not 1-5 recipients.
            InvalidRecipient: If an address is invalid or repeated.
            InvalidAmount: If the amount is not a positive number.
        """
        count = len(self.recipients)
        if count < MIN_RECIPIENTS or count > MAX_RECIPIENTS:
            raise InvalidRecipientCount(
                f"Recipient count must be {MIN_RECIPIENTS}-{MAX_RECIPIENTS}, got {count}"
            )

        seen: set[str] = set()
        for index, address in enumerate(self.recipients):
            if not address or not is_valid_address(address):
                raise InvalidRecipient(index, address)
            if address in seen:
                raise InvalidRecipient(index, address, "duplicate recipient")
            seen.add(address)

        if parse_amount(self.total_amount) <= 0:
            raise InvalidAmount(f"Amount must be greater than zero, got {self.total_amount}")


def calculate_even_split(
    total_amount: int,
    recipients: list[str],
) -> list[tuple[str, int]]:
    """Split ``total_amount`` base units evenly across recipients.

    Each recipient gets floor(total / count). The remainder
    (total mod count) is not paid to anyone.

    Args:
        total_amount: Total amount in base units (e.g. 10 USDC = 10_000_000).
        recipients: Recipient addresses, in payment order.

    Returns:
        List of (address, amount) tuples in the same order.
    """
    if not recipients:
        return []
    share = total_amount // len(recipients)
    return [(address, share) for address in recipients]


@dataclass
class TransferOutcome:
    """Result of the withdrawal to one recipient."""

    recipient: str
    status: OutcomeStatus
    amount_base_units: int
    settlement_reference: SettlementReference | None = None
    error_detail: str | None = None
    error: WithdrawFailed | None = field(default=None, repr=False, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "recipient": self.recipient,
            "status": self.status.value,
            "amount": str(self.amount_base_units),
        }
        if self.settlement_reference is not None:
            d["settlementReference"] = str(self.settlement_reference)
        if self.error_detail:
            d["errorDetail"] = self.error_detail
        return d


def overall_status_for(outcomes: list[TransferOutcome]) -> OverallStatus:
    succeeded = sum(1 for o in outcomes if o.succeeded)
    if outcomes and succeeded == len(outcomes):
        return OverallStatus.COMPLETED
    if succeeded:
        return OverallStatus.PARTIAL
    return OverallStatus.FAILED


@dataclass
class TransferResult:
    """Aggregate result of a transfer attempt.

    ``deposit_reference`` is set if and only if the deposit succeeded.
    ``per_recipient`` holds one outcome per recipient reached after that,
    in request order.
    """

    attempt_id: str
    token: str
    recipients: list[str]
    total_base_units: int
    split_base_units: int
    overall_status: OverallStatus
    deposit_reference: SettlementReference | None = None
    per_recipient: list[TransferOutcome] = field(default_factory=list)
    error: DepositFailed | None = field(default=None, repr=False, compare=False)

    @property
    def undistributed_base_units(self) -> int:
        """Base units lost to the integer split (total mod recipient count)."""
        return self.total_base_units - self.split_base_units * len(self.recipients)

    @property
    def failed_recipients(self) -> list[str]:
        return [o.recipient for o in self.per_recipient if not o.succeeded]

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "attemptId": self.attempt_id,
            "token": self.token,
            "overallStatus": self.overall_status.value,
            "totalAmount": str(self.total_base_units),
            "splitAmount": str(self.split_base_units),
            "depositReference": (
                str(self.deposit_reference) if self.deposit_reference else None
            ),
            "perRecipient": [o.to_dict() for o in self.per_recipient],
        }
        if self.error is not None:
            d["error"] = str(self.error)
        return d
