"""Utility functions for shieldpay."""

import re

from solders.pubkey import Pubkey  # type: ignore

from .constants import PAY_PATH

# Base58, 32-44 chars
SVM_ADDRESS_REGEX = r"^[1-9A-HJ-NP-Za-km-z]{32,44}$"


def validate_svm_address(address: str) -> bool:
    """Validate a Solana address (base58-encoded 32-byte public key)."""
    if not isinstance(address, str) or not re.match(SVM_ADDRESS_REGEX, address):
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def build_share_url(origin: str, link_id: str) -> str:
    """Build the shareable payment URL ``<origin>/pay/<id>``."""
    return f"{origin.rstrip('/')}{PAY_PATH}/{link_id}"
