"""Tests for paying a payment link."""

import asyncio

import pytest

from shieldpay.constants import USDC_MINT
from shieldpay.exceptions import InvalidAmount, InvalidLinkId, LinkNotFound
from shieldpay.links.types import PaymentLink, PaymentTerms
from shieldpay.transfer import LinkTransferAdapter, OverallStatus, TransferOrchestrator

from conftest import FakePool, FakeSleep


def _adapter(links, pool):
    orchestrator = TransferOrchestrator(pool, address_validator=bool, sleep=FakeSleep())
    return LinkTransferAdapter(links, orchestrator)


class AsyncLinks:
    """Async link source, shaped like LinkClient."""

    def __init__(self, terms):
        self.terms = terms

    async def get(self, link_id):
        return PaymentLink(id=link_id, terms=self.terms, created_at=0)


class TestPayViaLink:
    """Test LinkTransferAdapter.pay_via_link."""

    def test_fixed_amount_link(self, link_store, session, wallet):
        """A link for 0.5 SOL to R1 pays 500,000,000 lamports to R1."""
        link_id = link_store.create(
            PaymentTerms(recipient="R1", token="SOL", amount="0.5", label="Coffee")
        )
        pool = FakePool()

        result = asyncio.run(_adapter(link_store, pool).pay_via_link(link_id, session, wallet))

        assert pool.calls == [
            ("deposit", None, 500_000_000, None),
            ("withdraw", None, 500_000_000, "R1"),
        ]
        assert result.overall_status is OverallStatus.COMPLETED
        assert result.recipients == ["R1"]

    def test_fixed_amount_overrides_caller(self, link_store, session, wallet):
        """The link's fixed amount wins over a caller-supplied one."""
        link_id = link_store.create(PaymentTerms(recipient="R1", token="SOL", amount="0.5"))
        pool = FakePool()

        asyncio.run(_adapter(link_store, pool).pay_via_link(link_id, session, wallet, "2"))

        assert pool.calls[0][2] == 500_000_000

    def test_open_amount_uses_caller_amount(self, session, wallet):
        """A link without an amount pays what the caller gives."""
        pool = FakePool()
        links = AsyncLinks(PaymentTerms(recipient="R1", token="USDC"))

        result = asyncio.run(_adapter(links, pool).pay_via_link("abc123", session, wallet, "7.5"))

        assert pool.calls[0] == ("deposit_token", USDC_MINT, 7_500_000, None)
        assert result.total_base_units == 7_500_000

    def test_open_amount_without_caller_amount(self, session, wallet):
        """A link without an amount needs one from the caller."""
        pool = FakePool()
        links = AsyncLinks(PaymentTerms(recipient="R1", token="USDC"))

        with pytest.raises(InvalidAmount):
            asyncio.run(_adapter(links, pool).pay_via_link("abc123", session, wallet))
        assert pool.calls == []

    def test_unknown_link(self, link_store, session, wallet):
        """Unknown links raise LinkNotFound before any pool call."""
        pool = FakePool()

        with pytest.raises(LinkNotFound):
            asyncio.run(_adapter(link_store, pool).pay_via_link("missing00000", session, wallet))
        assert pool.calls == []

    def test_malformed_link_id(self, link_store, session, wallet):
        """Malformed ids raise InvalidLinkId."""
        with pytest.raises(InvalidLinkId):
            asyncio.run(_adapter(link_store, FakePool()).pay_via_link("", session, wallet))
