"""Shared fakes for shieldpay tests."""

import pytest
import redis
from solders.keypair import Keypair

from shieldpay.links.store import LinkStore
from shieldpay.session import KeySession


class FakeRedis:
    """In-memory stand-in for the subset of redis.Redis the link store uses."""

    def __init__(self):
        self.now = 0.0
        self.data: dict[str, tuple[str, float | None]] = {}
        self.set_calls: list[dict] = []
        self.fail_with: Exception | None = None

    def _live(self, key):
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.now >= expires_at:
            del self.data[key]
            return None
        return value

    def set(self, key, value, ex=None, nx=False):
        if self.fail_with is not None:
            raise self.fail_with
        self.set_calls.append({"key": key, "value": value, "ex": ex, "nx": nx})
        if nx and self._live(key) is not None:
            return None
        self.data[key] = (value, self.now + ex if ex is not None else None)
        return True

    def get(self, key):
        if self.fail_with is not None:
            raise self.fail_with
        return self._live(key)

    def ttl(self, key):
        entry = self.data.get(key)
        if entry is None or entry[1] is None:
            return -1
        return int(entry[1] - self.now)


class FakePool:
    """Shielded pool double that records every call in order."""

    def __init__(self, deposit_error=None, withdraw_errors=None, references=None):
        self.deposit_error = deposit_error
        self.withdraw_errors = withdraw_errors or {}
        self.references = references
        self.calls: list[tuple] = []
        self.derived: list[bytes] = []

    def derive_key(self, signature):
        self.derived.append(signature)
        return ("key", bytes(signature))

    def _reference(self, kind, n):
        if self.references is not None:
            return self.references(kind, n)
        return f"{kind}-sig-{n}"

    async def deposit(self, amount_base_units, *, payer, signer, encryption_key):
        self.calls.append(("deposit", None, amount_base_units, None))
        if self.deposit_error is not None:
            raise self.deposit_error
        return self._reference("deposit", len(self.calls))

    async def deposit_token(self, mint, amount_base_units, *, payer, signer, encryption_key):
        self.calls.append(("deposit_token", mint, amount_base_units, None))
        if self.deposit_error is not None:
            raise self.deposit_error
        return self._reference("deposit", len(self.calls))

    async def withdraw(self, amount_base_units, recipient, *, payer, signer, encryption_key):
        self.calls.append(("withdraw", None, amount_base_units, recipient))
        if recipient in self.withdraw_errors:
            raise self.withdraw_errors[recipient]
        return self._reference("withdraw", len(self.calls))

    async def withdraw_token(
        self, mint, amount_base_units, recipient, *, payer, signer, encryption_key
    ):
        self.calls.append(("withdraw_token", mint, amount_base_units, recipient))
        if recipient in self.withdraw_errors:
            raise self.withdraw_errors[recipient]
        return self._reference("withdraw", len(self.calls))

    @property
    def withdrawals(self):
        return [c for c in self.calls if c[0].startswith("withdraw")]


class FakeWallet:
    def __init__(self, address=None):
        self.address = address or str(Keypair().pubkey())

    async def sign_message(self, message):
        return bytes(64)

    async def sign_transaction(self, tx):
        return tx


class FakeSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def link_store(fake_redis):
    return LinkStore(fake_redis, clock=lambda: 1_700_000_000.0)


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def session(wallet):
    return KeySession(address=wallet.address, encryption_key=("key", b"\x00" * 64))


@pytest.fixture
def redis_down():
    return redis.ConnectionError("Connection refused")
