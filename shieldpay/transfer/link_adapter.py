"""Pay a stored payment link through the orchestrator."""

import asyncio
import inspect
import logging
from decimal import Decimal
from typing import Any, Protocol

from ..exceptions import InvalidAmount
from ..links.types import PaymentLink
from ..session import KeySession
from ..wallet import WalletSigner
from .orchestrator import TransferOrchestrator
from .types import TransferRequest, TransferResult

logger = logging.getLogger(__name__)


class LinkSource(Protocol):
    """Anything that resolves a link id. LinkStore (sync) and LinkClient (async) both fit."""

    def get(self, link_id: str) -> Any: ...


class LinkTransferAdapter:
    """Resolves a payment link and runs a single-recipient transfer for it."""

    def __init__(self, links: LinkSource, orchestrator: TransferOrchestrator):
        self._links = links
        self._orchestrator = orchestrator

    async def resolve(self, link_id: str) -> PaymentLink:
        link = self._links.get(link_id)
        if inspect.isawaitable(link):
            link = await link
        return link

    async def pay_via_link(
        self,
        link_id: str,
        session: KeySession | None,
        wallet: WalletSigner,
        amount: str | Decimal | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TransferResult:
        """Pay the recipient named by ``link_id``.

        A link with a fixed amount always pays that amount. ``amount`` is only
        used when the link leaves the amount to the payer.

        Raises:
            InvalidLinkId: If ``link_id`` is malformed.
            LinkNotFound: If the link is missing or expired.
            InvalidAmount: If neither the link nor the caller gives an amount.
        """
        link = await self.resolve(link_id)
        terms = link.terms

        if terms.amount is not None:
            if amount is not None and str(amount) != terms.amount:
                logger.warning(
                    "Ignoring amount override %s for link %s with fixed amount %s",
                    amount,
                    link_id,
                    terms.amount,
                )
            total = terms.amount
        elif amount is not None:
            total = amount
        else:
            raise InvalidAmount(f"Payment link {link_id} has no amount; one must be provided")

        request = TransferRequest(
            token=terms.token,
            total_amount=total,
            recipients=[terms.recipient],
        )
        logger.info("Paying link %s: %s %s to %s", link_id, total, terms.token, terms.recipient)
        return await self._orchestrator.transfer(
            request, session, wallet, cancel_event=cancel_event
        )
