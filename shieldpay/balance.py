"""Periodic wallet balance refresh.

Runs as a background asyncio task next to the transfer flow, never inside it.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

from solana.rpc.async_api import AsyncClient  # type: ignore
from solana.rpc.models import TokenAccountOpts  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from .config import Settings
from .constants import DEFAULT_BALANCE_POLL_SECONDS
from .tokens import Token, from_base_units

logger = logging.getLogger(__name__)

BalanceFetch = Callable[[], Awaitable[Decimal]]
BalanceListener = Callable[[Decimal], Any]


class SolanaBalanceFetcher:
    """Reads one wallet's balance of one token over Solana JSON-RPC.

    Args:
        client: solana-py async RPC client.
        owner: Wallet address (base58).
        token: Token to read. SOL reads the lamport balance, SPL tokens read
            the first token account for the mint.
    """

    def __init__(self, client: AsyncClient, owner: str, token: Token):
        self._client = client
        self._owner = Pubkey.from_string(owner)
        self._token = token

    @classmethod
    def from_settings(cls, settings: Settings, owner: str, token: Token) -> "SolanaBalanceFetcher":
        """Build a fetcher with its own RPC client pointed at ``settings.solana_rpc_url``."""
        return cls(AsyncClient(settings.solana_rpc_url), owner, token)

    async def close(self) -> None:
        await self._client.close()

    async def __call__(self) -> Decimal:
        if self._token.is_native:
            resp = await self._client.get_balance(self._owner)
            return from_base_units(resp.value, self._token.decimals)

        resp = await self._client.get_token_accounts_by_owner_json_parsed(
            self._owner,
            TokenAccountOpts(mint=Pubkey.from_string(self._token.mint)),
        )
        if not resp.value:
            return Decimal(0)
        info = resp.value[0].account.data.parsed["info"]
        ui_amount = info["tokenAmount"].get("uiAmountString") or info["tokenAmount"]["uiAmount"]
        return Decimal(str(ui_amount or 0))


class BalancePoller:
    """Calls ``fetch`` every ``interval`` seconds until stopped.

    The most recent balance is kept in ``latest``. A failed fetch is logged
    and the previous value is kept.
    """

    def __init__(
        self,
        fetch: BalanceFetch,
        interval: float = DEFAULT_BALANCE_POLL_SECONDS,
        on_update: BalanceListener | None = None,
    ):
        self._fetch = fetch
        self._interval = interval
        self._on_update = on_update
        self._task: asyncio.Task | None = None
        self.latest: Decimal | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        fetch: BalanceFetch,
        on_update: BalanceListener | None = None,
    ) -> "BalancePoller":
        return cls(fetch, interval=settings.balance_poll_seconds, on_update=on_update)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def refresh(self) -> Decimal | None:
        """Fetch once now. Returns the new balance, or None if the fetch failed."""
        try:
            balance = await self._fetch()
        except Exception as exc:
            logger.warning("Balance fetch failed: %s", exc)
            return None

        self.latest = balance
        if self._on_update is not None:
            result = self._on_update(balance)
            if inspect.isawaitable(result):
                await result
        return balance

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._interval)

    async def __aenter__(self) -> "BalancePoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
