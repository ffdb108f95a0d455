"""Tests for the balance poller and Solana balance fetcher."""

import asyncio
from decimal import Decimal
from types import SimpleNamespace

from solders.keypair import Keypair

from shieldpay.balance import BalancePoller, SolanaBalanceFetcher
from shieldpay.tokens import SUPPORTED_TOKENS


class FakeRpc:
    def __init__(self, lamports=0, token_accounts=None):
        self.lamports = lamports
        self.token_accounts = token_accounts or []
        self.calls = []

    async def get_balance(self, pubkey):
        self.calls.append(("get_balance", pubkey))
        return SimpleNamespace(value=self.lamports)

    async def get_token_accounts_by_owner_json_parsed(self, owner, opts):
        self.calls.append(("get_token_accounts", owner, opts))
        return SimpleNamespace(value=self.token_accounts)


def _token_account(ui_amount_string):
    parsed = {"info": {"tokenAmount": {"uiAmount": float(ui_amount_string),
                                       "uiAmountString": ui_amount_string}}}
    return SimpleNamespace(account=SimpleNamespace(data=SimpleNamespace(parsed=parsed)))


class TestSolanaBalanceFetcher:
    """Test balance reads."""

    def test_sol_balance_from_lamports(self):
        """SOL balance is lamports / 10^9."""
        owner = str(Keypair().pubkey())
        rpc = FakeRpc(lamports=1_500_000_000)

        balance = asyncio.run(SolanaBalanceFetcher(rpc, owner, SUPPORTED_TOKENS["SOL"])())

        assert balance == Decimal("1.5")
        assert str(rpc.calls[0][1]) == owner

    def test_spl_balance_from_first_account(self):
        """SPL balance comes from the first token account for the mint."""
        rpc = FakeRpc(token_accounts=[_token_account("12.34"), _token_account("99")])

        balance = asyncio.run(
            SolanaBalanceFetcher(rpc, str(Keypair().pubkey()), SUPPORTED_TOKENS["USDC"])()
        )

        assert balance == Decimal("12.34")

    def test_spl_balance_without_account_is_zero(self):
        """No token account means a zero balance."""
        rpc = FakeRpc()

        balance = asyncio.run(
            SolanaBalanceFetcher(rpc, str(Keypair().pubkey()), SUPPORTED_TOKENS["USDT"])()
        )

        assert balance == Decimal(0)


class TestBalancePoller:
    """Test the periodic poller."""

    def test_polls_and_notifies(self):
        """Each poll updates latest and calls on_update."""
        values = iter([Decimal("1"), Decimal("2"), Decimal("3")])
        seen = []

        async def fetch():
            return next(values)

        async def run():
            poller = BalancePoller(fetch, interval=0, on_update=seen.append)
            async with poller:
                while len(seen) < 3:
                    await asyncio.sleep(0)
            return poller

        poller = asyncio.run(run())

        assert seen == [Decimal("1"), Decimal("2"), Decimal("3")]
        assert poller.latest == Decimal("3")
        assert not poller.running

    def test_fetch_errors_do_not_stop_polling(self):
        """A failing fetch keeps the last value and polling continues."""
        results = [Decimal("5"), RuntimeError("rpc timeout"), Decimal("6")]
        seen = []

        async def fetch():
            item = results.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        async def run():
            poller = BalancePoller(fetch, interval=0, on_update=seen.append)
            poller.start()
            while len(seen) < 2:
                await asyncio.sleep(0)
            await poller.stop()
            return poller

        poller = asyncio.run(run())

        assert seen == [Decimal("5"), Decimal("6")]
        assert poller.latest == Decimal("6")

    def test_refresh_returns_none_on_error(self):
        """A single refresh that fails returns None and leaves latest unchanged."""

        async def fetch():
            raise ConnectionError("down")

        poller = BalancePoller(fetch)
        assert asyncio.run(poller.refresh()) is None
        assert poller.latest is None

    def test_stop_without_start(self):
        """Stopping an idle poller is a no-op."""

        async def fetch():
            return Decimal(0)

        asyncio.run(BalancePoller(fetch).stop())
