"""Boundary to the shielded pool.

The pool owns all cryptography (commitments, proofs, note encryption). This
module only fixes the narrow capability surface the orchestrator calls and
normalizes what the pool hands back into one reference type.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from solders.signature import Signature  # type: ignore

from .constants import SIGNATURE_LENGTH
from .wallet import WalletSigner

EncryptionKey = Any


@dataclass(frozen=True)
class SettlementReference:
    """Opaque identifier confirming a deposit or withdrawal (a transaction signature)."""

    value: str

    def __str__(self) -> str:
        return self.value


def normalize_reference(raw: Any) -> SettlementReference:
    """Normalize whatever the pool returned into a SettlementReference.

    Accepts a string, a list/tuple of references (the first one wins), a
    solders Signature, or raw 64-byte signature bytes.

    Raises:
        ValueError: If no reference can be extracted.
    """
    if isinstance(raw, SettlementReference):
        return raw
    if isinstance(raw, (list, tuple)):
        if not raw:
            raise ValueError("Pool returned an empty reference list")
        return normalize_reference(raw[0])
    if isinstance(raw, (bytes, bytearray)):
        if len(raw) != SIGNATURE_LENGTH:
            raise ValueError(f"Expected {SIGNATURE_LENGTH}-byte signature, got {len(raw)}")
        return SettlementReference(str(Signature.from_bytes(bytes(raw))))
    if raw is None:
        raise ValueError("Pool returned no reference")

    value = str(raw).strip()
    if not value:
        raise ValueError("Pool returned an empty reference")
    return SettlementReference(value)


class KeyDeriver(Protocol):
    def derive_key(self, signature: bytes) -> EncryptionKey:
        """Derive the note-encryption key from a sign-in signature."""
        ...


class ShieldedPoolClient(KeyDeriver, Protocol):
    """Protocol for the shielded-pool client.

    Every method may return a string, a list of strings, or a structured
    handle. Callers pass results through ``normalize_reference``.
    """

    async def deposit(
        self,
        amount_base_units: int,
        *,
        payer: str,
        signer: WalletSigner,
        encryption_key: EncryptionKey,
    ) -> Any:
        """Deposit native SOL (lamports) into the pool."""
        ...

    async def withdraw(
        self,
        amount_base_units: int,
        recipient: str,
        *,
        payer: str,
        signer: WalletSigner,
        encryption_key: EncryptionKey,
    ) -> Any:
        """Withdraw native SOL (lamports) from the pool to ``recipient``."""
        ...

    async def deposit_token(
        self,
        mint: str,
        amount_base_units: int,
        *,
        payer: str,
        signer: WalletSigner,
        encryption_key: EncryptionKey,
    ) -> Any:
        """Deposit an SPL token into the pool."""
        ...

    async def withdraw_token(
        self,
        mint: str,
        amount_base_units: int,
        recipient: str,
        *,
        payer: str,
        signer: WalletSigner,
        encryption_key: EncryptionKey,
    ) -> Any:
        """Withdraw an SPL token from the pool to ``recipient``."""
        ...
