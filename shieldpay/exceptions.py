"""Error taxonomy for shieldpay."""


class ShieldPayError(Exception):
    """Base class for shieldpay errors."""


class InvalidArgument(ShieldPayError, ValueError):
    """Raised for caller errors. Never retried."""


class InvalidLinkId(InvalidArgument):
    """Raised when a link identifier is empty or malformed."""


class InvalidRecipient(InvalidArgument):
    """Raised when a recipient address fails validation."""

    def __init__(self, index: int, address: str, reason: str = "invalid address"):
        self.index = index
        self.address = address
        super().__init__(f"Invalid recipient #{index + 1} ({address!r}): {reason}")


class InvalidRecipientCount(InvalidArgument):
    """Raised when the recipient list is empty or too long."""


class InvalidAmount(InvalidArgument):
    """Raised when an amount is missing, not a number, or not positive."""


class UnknownToken(InvalidArgument):
    """Raised when a token symbol is not in the registry."""


class EncryptionNotInitialized(ShieldPayError):
    """Raised when a transfer is attempted without a key session."""


class UserRejected(ShieldPayError):
    """Raised when the user declines an interactive signing request."""


class SigningFailed(ShieldPayError):
    """Raised when the wallet signing capability fails."""


class MalformedSignature(ShieldPayError):
    """Raised when a wallet returns something that is not a 64-byte signature."""


class StorageError(ShieldPayError):
    """Raised when the link store backend is unavailable."""


class LinkNotFound(ShieldPayError):
    """Raised when a payment link is unknown or expired."""


class SettlementError(ShieldPayError):
    """Raised when the shielded pool fails to settle an operation."""


class DepositFailed(SettlementError):
    """Raised when the deposit into the shielded pool fails."""


class WithdrawFailed(SettlementError):
    """Raised when a withdrawal to a recipient fails."""

    def __init__(self, recipient: str, message: str):
        self.recipient = recipient
        super().__init__(message)
