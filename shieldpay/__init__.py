"""shieldpay: private split payments through a shielded pool on Solana.

A payer deposits a total into the pool once and the pool pays each recipient
an even share through separate withdrawals. Payees can publish their terms
as short-lived payment links.
"""

from shieldpay.exceptions import (
    DepositFailed,
    EncryptionNotInitialized,
    InvalidAmount,
    InvalidArgument,
    InvalidLinkId,
    InvalidRecipient,
    InvalidRecipientCount,
    LinkNotFound,
    MalformedSignature,
    SettlementError,
    ShieldPayError,
    SigningFailed,
    StorageError,
    UnknownToken,
    UserRejected,
    WithdrawFailed,
)
from shieldpay.pool import SettlementReference, ShieldedPoolClient, normalize_reference
from shieldpay.session import KeySession, KeySessionManager
from shieldpay.tokens import SUPPORTED_TOKENS, Token, get_token_by_symbol
from shieldpay.transfer import (
    LinkTransferAdapter,
    OverallStatus,
    TransferOrchestrator,
    TransferOutcome,
    TransferRequest,
    TransferResult,
    TransferState,
)
from shieldpay.wallet import KeypairWallet, WalletSigner

__version__ = "0.1.0"

__all__ = [
    # Tokens
    "SUPPORTED_TOKENS",
    "Token",
    "get_token_by_symbol",
    # Session and wallet
    "KeySession",
    "KeySessionManager",
    "KeypairWallet",
    "WalletSigner",
    # Pool boundary
    "SettlementReference",
    "ShieldedPoolClient",
    "normalize_reference",
    # Transfers
    "LinkTransferAdapter",
    "OverallStatus",
    "TransferOrchestrator",
    "TransferOutcome",
    "TransferRequest",
    "TransferResult",
    "TransferState",
    # Errors
    "ShieldPayError",
    "InvalidArgument",
    "InvalidLinkId",
    "InvalidRecipient",
    "InvalidRecipientCount",
    "InvalidAmount",
    "UnknownToken",
    "EncryptionNotInitialized",
    "UserRejected",
    "SigningFailed",
    "MalformedSignature",
    "StorageError",
    "LinkNotFound",
    "SettlementError",
    "DepositFailed",
    "WithdrawFailed",
]
