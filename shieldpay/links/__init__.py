"""Ephemeral payment links.

A payee stores payment terms under an opaque identifier that expires after
a fixed TTL. The shareable URL carries only the identifier.
"""

from shieldpay.links.client import LinkClient
from shieldpay.links.server import create_app
from shieldpay.links.store import LinkStore, generate_link_id, validate_link_id
from shieldpay.links.types import PaymentLink, PaymentTerms

__all__ = [
    # Types
    "PaymentLink",
    "PaymentTerms",
    # Store
    "LinkStore",
    "generate_link_id",
    "validate_link_id",
    # HTTP
    "LinkClient",
    "create_app",
]
