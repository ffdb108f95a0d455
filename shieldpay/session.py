"""Signature-derived key sessions.

The wallet signs one constant sign-in message. The pool's key derivation
turns that signature into the encryption key for the payer's shielded
notes, so the same wallet reproduces the same key in every session and
nothing secret is ever persisted.

The manager is owned by the caller and passed around explicitly; each
transfer takes a ``KeySession`` argument.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from solders.signature import Signature  # type: ignore

from .constants import SIGN_IN_MESSAGE, SIGNATURE_LENGTH
from .exceptions import InvalidArgument, MalformedSignature, SigningFailed, UserRejected
from .pool import EncryptionKey, KeyDeriver
from .utils import validate_svm_address

logger = logging.getLogger(__name__)

SignFn = Callable[[bytes], Awaitable[Any] | Any]


@dataclass(frozen=True)
class KeySession:
    """Per-identity encryption session. Read-only once established."""

    address: str
    encryption_key: EncryptionKey = field(repr=False)


def _is_user_rejection(exc: BaseException) -> bool:
    if isinstance(exc, UserRejected):
        return True
    return "user rejected" in str(exc).lower()


def normalize_signature(raw: Any) -> bytes:
    """Coerce a wallet's signMessage result into 64 signature bytes.

    Some wallets return ``{"signature": ...}`` or an object with a
    ``signature`` attribute instead of the bytes themselves.

    Raises:
        MalformedSignature: If the result is not a 64-byte signature.
    """
    if isinstance(raw, dict) and "signature" in raw:
        raw = raw["signature"]
    elif not isinstance(raw, (bytes, bytearray, Signature)) and hasattr(raw, "signature"):
        raw = raw.signature

    if isinstance(raw, Signature):
        raw = bytes(raw)
    if not isinstance(raw, (bytes, bytearray)):
        raise MalformedSignature(f"Signature is not a byte sequence: {type(raw).__name__}")
    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    return bytes(raw)


class KeySessionManager:
    """Creates and caches KeySessions, one per wallet address."""

    def __init__(self, key_deriver: KeyDeriver, message: bytes = SIGN_IN_MESSAGE):
        self._key_deriver = key_deriver
        self._message = message
        self._sessions: dict[str, KeySession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, address: str) -> KeySession | None:
        return self._sessions.get(address)

    async def initialize(self, address: str, sign_fn: SignFn) -> KeySession:
        """Return the session for ``address``, prompting the wallet only once.

        Args:
            address: Wallet public key (base58).
            sign_fn: Signing capability, sync or async. Called with the
                constant sign-in message.

        Raises:
            InvalidArgument: If ``address`` is not a valid address.
            UserRejected: If the user declined the signature request.
            SigningFailed: If the signing capability raised.
            MalformedSignature: If the wallet returned a bad signature.
        """
        if not validate_svm_address(address):
            raise InvalidArgument(f"Invalid wallet address: {address!r}")

        session = self._sessions.get(address)
        if session is not None:
            return session

        lock = self._locks.setdefault(address, asyncio.Lock())
        async with lock:
            # A concurrent caller may have finished while we waited
            session = self._sessions.get(address)
            if session is not None:
                return session

            signature = await self._request_signature(sign_fn)
            encryption_key = self._key_deriver.derive_key(signature)
            session = KeySession(address=address, encryption_key=encryption_key)
            self._sessions[address] = session

        logger.info("Initialized key session address=%s", address)
        return session

    async def _request_signature(self, sign_fn: SignFn) -> bytes:
        try:
            result = sign_fn(self._message)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            if _is_user_rejection(exc):
                raise UserRejected("User rejected the signature request") from exc
            raise SigningFailed(f"Failed to sign message: {exc}") from exc
        return normalize_signature(result)

    def end(self, address: str) -> None:
        """Drop the session for ``address``."""
        if self._sessions.pop(address, None) is not None:
            logger.info("Ended key session address=%s", address)
        self._locks.pop(address, None)

    def clear(self) -> None:
        self._sessions.clear()
        self._locks.clear()
