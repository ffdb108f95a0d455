"""Request and response models for the payment-link HTTP surface."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import LINK_MAX_LABEL_LENGTH
from .types import PaymentTerms


class CreateLinkRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    recipient: str = Field(..., min_length=1, description="Payee address, kept server-side.")
    token: str = Field(..., min_length=1, description="Asset symbol, e.g. SOL or USDC.")
    amount: str | None = Field(None, description="Optional fixed amount (decimal string).")
    label: str | None = Field(None, max_length=LINK_MAX_LABEL_LENGTH)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_str(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("label", mode="before")
    @classmethod
    def _blank_label(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_terms(self) -> PaymentTerms:
        return PaymentTerms(
            recipient=self.recipient,
            token=self.token,
            amount=self.amount,
            label=self.label,
        )


class CreateLinkResponse(BaseModel):
    id: str
    url: str | None = None


class PaymentTermsResponse(BaseModel):
    recipient: str
    token: str
    amount: str | None = None
    label: str | None = None

    @classmethod
    def from_terms(cls, terms: PaymentTerms) -> "PaymentTermsResponse":
        return cls(**terms.to_dict())


def describe_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic ValidationError into one readable line."""
    missing = [
        ".".join(str(part) for part in err["loc"])
        for err in exc.errors()
        if err["type"] == "missing"
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
