"""Wallet signing capability."""

from typing import Any, Protocol

from solders.keypair import Keypair  # type: ignore
from solders.transaction import Transaction, VersionedTransaction  # type: ignore


class WalletSigner(Protocol):
    """Protocol for a payer's wallet.

    ``sign_message`` may block on human interaction for an unbounded time.
    """

    @property
    def address(self) -> str:
        """The wallet's public key (base58)."""
        ...

    async def sign_message(self, message: bytes) -> bytes:
        """Sign an arbitrary message.

        Args:
            message: Raw message bytes.

        Returns:
            The 64-byte ed25519 signature.
        """
        ...

    async def sign_transaction(self, tx: Any) -> Any:
        """Sign a transaction and return the signed transaction."""
        ...


class KeypairWallet:
    """WalletSigner backed by an in-memory solders Keypair."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> "KeypairWallet":
        return cls(Keypair.from_base58_string(secret))

    @classmethod
    def from_bytes(cls, secret: bytes) -> "KeypairWallet":
        return cls(Keypair.from_bytes(secret))

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    async def sign_message(self, message: bytes) -> bytes:
        return bytes(self._keypair.sign_message(message))

    async def sign_transaction(self, tx: Any) -> Any:
        if isinstance(tx, VersionedTransaction):
            return VersionedTransaction(tx.message, [self._keypair])
        if isinstance(tx, Transaction):
            tx.sign([self._keypair], tx.message.recent_blockhash)
            return tx
        raise TypeError(f"Unsupported transaction type: {type(tx).__name__}")
