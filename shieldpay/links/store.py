"""Redis-backed ephemeral store for payment links.

Records expire through the Redis key TTL. There is no update or delete
path, so a link's terms never change between creation and expiry.
"""

import json
import logging
import re
import secrets
import time
from collections.abc import Callable

import redis

from ..constants import (
    LINK_CREATE_MAX_ATTEMPTS,
    LINK_ID_ALPHABET,
    LINK_ID_LENGTH,
    LINK_KEY_PREFIX,
    LINK_TTL_SECONDS,
)
from ..exceptions import InvalidLinkId, LinkNotFound, StorageError
from .types import PaymentLink, PaymentTerms

logger = logging.getLogger(__name__)

_LINK_ID_REGEX = re.compile(r"^[A-Za-z0-9]+$")


def generate_link_id(length: int = LINK_ID_LENGTH) -> str:
    """Generate a URL-safe identifier drawn uniformly from [a-zA-Z0-9]."""
    return "".join(secrets.choice(LINK_ID_ALPHABET) for _ in range(length))


def validate_link_id(link_id: str) -> None:
    if not isinstance(link_id, str) or not link_id:
        raise InvalidLinkId("Missing link id")
    if not _LINK_ID_REGEX.match(link_id):
        raise InvalidLinkId(f"Malformed link id: {link_id!r}")


class LinkStore:
    """Payment-link store with a fixed time-to-live."""

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = LINK_TTL_SECONDS,
        key_prefix: str = LINK_KEY_PREFIX,
        id_factory: Callable[[], str] = generate_link_id,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._id_factory = id_factory
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "LinkStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def _key(self, link_id: str) -> str:
        return f"{self._key_prefix}{link_id}"

    def create(self, terms: PaymentTerms) -> str:
        """Store ``terms`` under a fresh identifier and return the identifier.

        Raises:
            InvalidArgument: If the terms are incomplete.
            StorageError: If the backend is unavailable.
        """
        terms.validate()
        created_at = int(self._clock() * 1000)

        for _ in range(LINK_CREATE_MAX_ATTEMPTS):
            link_id = self._id_factory()
            record = PaymentLink(id=link_id, terms=terms, created_at=created_at).to_record()
            try:
                created = self._client.set(
                    self._key(link_id),
                    json.dumps(record),
                    ex=self._ttl_seconds,
                    nx=True,
                )
            except redis.RedisError as exc:
                raise StorageError(f"Failed to store payment link: {exc}") from exc

            if created:
                logger.info(
                    "Created payment link id=%s token=%s fixed_amount=%s ttl=%ss",
                    link_id,
                    terms.token,
                    terms.amount is not None,
                    self._ttl_seconds,
                )
                return link_id

            logger.warning("Payment link id collision id=%s, regenerating", link_id)

        raise StorageError(
            f"Could not allocate a unique link id after {LINK_CREATE_MAX_ATTEMPTS} attempts"
        )

    def get(self, link_id: str) -> PaymentLink:
        """Read a payment link.

        Raises:
            InvalidLinkId: If the identifier is empty or malformed.
            LinkNotFound: If the link is unknown or expired.
            StorageError: If the backend is unavailable.
        """
        validate_link_id(link_id)
        try:
            raw = self._client.get(self._key(link_id))
        except redis.RedisError as exc:
            raise StorageError(f"Failed to read payment link: {exc}") from exc

        if raw is None:
            raise LinkNotFound(f"Payment link not found or expired: {link_id}")

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt payment link record: {link_id}") from exc
        return PaymentLink.from_record(link_id, record)
