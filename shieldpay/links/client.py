"""Async HTTP client for the payment-link service.

Example:
    ```python
    async with LinkClient("https://pay.example.com") as links:
        link_id = await links.create(PaymentTerms(recipient=addr, token="SOL"))
        link = await links.get(link_id)
    ```
"""

import logging

import httpx

from ..exceptions import InvalidArgument, LinkNotFound, StorageError
from .store import validate_link_id
from .types import PaymentLink, PaymentTerms

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.text


class LinkClient:
    """Payer/payee side of the ``/links`` HTTP surface."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "LinkClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def create(self, terms: PaymentTerms) -> str:
        """Create a link and return its identifier."""
        terms.validate()
        try:
            response = await self._http.post("/links", json=terms.to_dict())
        except httpx.HTTPError as exc:
            raise StorageError(f"Link service unreachable: {exc}") from exc

        if response.status_code == 400:
            raise InvalidArgument(_error_message(response))
        if response.status_code != 200:
            raise StorageError(
                f"Link service error (status={response.status_code}): {_error_message(response)}"
            )
        return response.json()["id"]

    async def get(self, link_id: str) -> PaymentLink:
        """Fetch the terms of a link.

        Raises:
            InvalidLinkId: If the identifier is empty or malformed.
            LinkNotFound: If the link is unknown or expired.
            StorageError: If the service is unreachable or fails.
        """
        validate_link_id(link_id)
        try:
            response = await self._http.get("/links", params={"id": link_id})
        except httpx.HTTPError as exc:
            raise StorageError(f"Link service unreachable: {exc}") from exc

        if response.status_code == 404:
            raise LinkNotFound(f"Payment link not found or expired: {link_id}")
        if response.status_code == 400:
            raise InvalidArgument(_error_message(response))
        if response.status_code != 200:
            raise StorageError(
                f"Link service error (status={response.status_code}): {_error_message(response)}"
            )

        logger.debug("Fetched payment link id=%s", link_id)
        # The service does not expose the creation time
        return PaymentLink(id=link_id, terms=PaymentTerms.from_dict(response.json()), created_at=0)
