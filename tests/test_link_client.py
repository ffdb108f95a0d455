"""Tests for the async payment link client."""

import asyncio
import json

import httpx
import pytest

from shieldpay.exceptions import InvalidArgument, InvalidLinkId, LinkNotFound, StorageError
from shieldpay.links.client import LinkClient
from shieldpay.links.types import PaymentTerms

RECIPIENT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def _client(handler) -> LinkClient:
    http = httpx.AsyncClient(
        base_url="https://links.test", transport=httpx.MockTransport(handler)
    )
    return LinkClient("https://links.test", http_client=http)


class TestLinkClientCreate:
    """Test LinkClient.create."""

    def test_create_posts_terms(self):
        """create posts the terms and returns the id."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "aB3dE6gH9jK2"})

        terms = PaymentTerms(recipient=RECIPIENT, token="SOL", amount="0.5", label="Coffee")
        link_id = asyncio.run(_client(handler).create(terms))

        assert link_id == "aB3dE6gH9jK2"
        assert seen["method"] == "POST"
        assert seen["path"] == "/links"
        assert seen["body"]["recipient"] == RECIPIENT
        assert seen["body"]["amount"] == "0.5"

    def test_create_400_raises_invalid_argument(self):
        """Server-side validation errors surface as InvalidArgument."""

        def handler(request):
            return httpx.Response(400, json={"error": "Missing required fields: token"})

        with pytest.raises(InvalidArgument, match="token"):
            asyncio.run(_client(handler).create(PaymentTerms(recipient=RECIPIENT, token="SOL")))

    def test_create_500_raises_storage_error(self):
        """Server failures surface as StorageError."""

        def handler(request):
            return httpx.Response(500, json={"error": "Failed to create payment link"})

        with pytest.raises(StorageError, match="500"):
            asyncio.run(_client(handler).create(PaymentTerms(recipient=RECIPIENT, token="SOL")))


class TestLinkClientGet:
    """Test LinkClient.get."""

    def test_get_returns_terms(self):
        """get parses the returned terms."""

        def handler(request):
            assert request.url.params["id"] == "aB3dE6gH9jK2"
            return httpx.Response(
                200,
                json={"recipient": RECIPIENT, "token": "USDC", "amount": None, "label": "Tips"},
            )

        link = asyncio.run(_client(handler).get("aB3dE6gH9jK2"))

        assert link.id == "aB3dE6gH9jK2"
        assert link.terms == PaymentTerms(recipient=RECIPIENT, token="USDC", label="Tips")

    def test_get_404_raises_not_found(self):
        """A 404 is LinkNotFound."""

        def handler(request):
            return httpx.Response(404, json={"error": "Payment link not found or expired"})

        with pytest.raises(LinkNotFound):
            asyncio.run(_client(handler).get("aB3dE6gH9jK2"))

    def test_get_rejects_malformed_id_locally(self):
        """Malformed ids never reach the network."""

        def handler(request):
            raise AssertionError("should not be called")

        with pytest.raises(InvalidLinkId):
            asyncio.run(_client(handler).get(""))

    def test_transport_error_raises_storage_error(self):
        """Connection failures surface as StorageError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StorageError, match="unreachable"):
            asyncio.run(_client(handler).get("aB3dE6gH9jK2"))
