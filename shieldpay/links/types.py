"""Types for payment links."""

from dataclasses import dataclass
from typing import Any

from ..constants import LINK_MAX_LABEL_LENGTH
from ..exceptions import InvalidAmount, InvalidArgument
from ..tokens import parse_amount


@dataclass(frozen=True)
class PaymentTerms:
    """What a payer is asked to pay.

    Attributes:
        recipient: Payee address. Never placed in the shareable URL.
        token: Asset symbol (e.g. "SOL", "USDC").
        amount: Optional fixed amount as a decimal string. None lets the payer choose.
        label: Optional free-text description.
    """

    recipient: str
    token: str
    amount: str | None = None
    label: str | None = None

    def __post_init__(self) -> None:
        # Blank optional fields mean absent, so terms compare equal after a store round trip
        if self.amount is not None and not str(self.amount).strip():
            object.__setattr__(self, "amount", None)
        if self.label is not None and not self.label.strip():
            object.__setattr__(self, "label", None)

    def validate(self) -> None:
        if not self.recipient or not self.recipient.strip():
            raise InvalidArgument("Missing required field: recipient")
        if not self.token or not self.token.strip():
            raise InvalidArgument("Missing required field: token")
        if self.amount is not None and parse_amount(self.amount) <= 0:
            raise InvalidAmount(f"Amount must be greater than zero, got {self.amount}")
        if self.label is not None and len(self.label) > LINK_MAX_LABEL_LENGTH:
            raise InvalidArgument(
                f"Label must be at most {LINK_MAX_LABEL_LENGTH} characters"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient": self.recipient,
            "token": self.token,
            "amount": self.amount,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaymentTerms":
        amount = data.get("amount")
        return cls(
            recipient=data.get("recipient") or "",
            token=data.get("token") or "",
            # Blank optional fields are stored as absent
            amount=str(amount) if amount not in (None, "") else None,
            label=data.get("label") or None,
        )


@dataclass(frozen=True)
class PaymentLink:
    """A stored payment link record."""

    id: str
    terms: PaymentTerms
    created_at: int  # epoch milliseconds

    def to_record(self) -> dict[str, Any]:
        return {**self.terms.to_dict(), "createdAt": self.created_at}

    @classmethod
    def from_record(cls, link_id: str, record: dict[str, Any]) -> "PaymentLink":
        return cls(
            id=link_id,
            terms=PaymentTerms.from_dict(record),
            created_at=int(record.get("createdAt", 0)),
        )
