"""HTTP surface for payment links.

Routes:
    POST /links        create a link, returns {"id": ...}
    GET  /links?id=... read the terms of a link
    GET  /health       liveness check

Run with ``python -m shieldpay.links.server`` (reads settings from the
environment, see ``shieldpay.config``).
"""

import json
import logging
from typing import Any

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.endpoints import HTTPEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..config import load_settings
from ..exceptions import InvalidArgument, LinkNotFound, StorageError
from ..utils import build_share_url
from .schemas import (
    CreateLinkRequest,
    CreateLinkResponse,
    PaymentTermsResponse,
    describe_validation_error,
)
from .store import LinkStore

logger = logging.getLogger(__name__)

__all__ = ["create_app", "main"]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


class LinksEndpoint(HTTPEndpoint):
    async def post(self, request: Request) -> JSONResponse:
        store: LinkStore = request.app.state.link_store

        try:
            body: Any = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, "Invalid JSON body")
        if not isinstance(body, dict):
            return _error(400, "Request body must be a JSON object")

        try:
            payload = CreateLinkRequest.model_validate(body)
        except ValidationError as exc:
            return _error(400, describe_validation_error(exc))

        try:
            link_id = await run_in_threadpool(store.create, payload.to_terms())
        except InvalidArgument as exc:
            return _error(400, str(exc))
        except StorageError:
            logger.exception("Error creating payment link")
            return _error(500, "Failed to create payment link")

        origin = request.app.state.public_origin
        response = CreateLinkResponse(
            id=link_id,
            url=build_share_url(origin, link_id) if origin else None,
        )
        return JSONResponse(response.model_dump(exclude_none=True))

    async def get(self, request: Request) -> JSONResponse:
        store: LinkStore = request.app.state.link_store

        link_id = request.query_params.get("id")
        if not link_id:
            return _error(400, "Missing ID")

        try:
            link = await run_in_threadpool(store.get, link_id)
        except InvalidArgument as exc:
            return _error(400, str(exc))
        except LinkNotFound:
            return _error(404, "Payment link not found or expired")
        except StorageError:
            logger.exception("Error fetching payment link id=%s", link_id)
            return _error(500, "Failed to fetch payment link")

        return JSONResponse(PaymentTermsResponse.from_terms(link.terms).model_dump())


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


def create_app(store: LinkStore, public_origin: str | None = None) -> Starlette:
    """Build the ASGI app serving the payment-link routes."""
    app = Starlette(
        routes=[
            Route("/links", LinksEndpoint),
            Route("/health", health, methods=["GET"]),
        ],
    )
    app.state.link_store = store
    app.state.public_origin = public_origin
    return app


def main() -> None:
    """Start the payment-link server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    store = LinkStore.from_url(settings.redis_url, ttl_seconds=settings.link_ttl_seconds)
    app = create_app(store, public_origin=settings.public_origin)

    logger.info("Payment link server listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    main()
