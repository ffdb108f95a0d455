"""Runtime settings, read from the environment and an optional `.env` file."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    DEFAULT_BALANCE_POLL_SECONDS,
    DEFAULT_REDIS_URL,
    DEFAULT_RPC_URL,
    DEFAULT_TOKEN_SETTLE_DELAY_SECONDS,
    LINK_TTL_SECONDS,
)


@dataclass
class Settings:
    redis_url: str = DEFAULT_REDIS_URL
    link_ttl_seconds: int = LINK_TTL_SECONDS
    public_origin: str | None = None
    host: str = "0.0.0.0"
    port: int = 4021
    solana_rpc_url: str = DEFAULT_RPC_URL
    token_settle_delay_seconds: float = DEFAULT_TOKEN_SETTLE_DELAY_SECONDS
    balance_poll_seconds: float = DEFAULT_BALANCE_POLL_SECONDS


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, after reading a ``.env`` file if present."""
    load_dotenv(env_file)

    return Settings(
        redis_url=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
        link_ttl_seconds=int(os.getenv("LINK_TTL_SECONDS", str(LINK_TTL_SECONDS))),
        public_origin=os.getenv("PUBLIC_ORIGIN") or None,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "4021")),
        solana_rpc_url=os.getenv("SOLANA_RPC_URL", DEFAULT_RPC_URL),
        token_settle_delay_seconds=float(
            os.getenv("TOKEN_SETTLE_DELAY_SECONDS", str(DEFAULT_TOKEN_SETTLE_DELAY_SECONDS))
        ),
        balance_poll_seconds=float(
            os.getenv("BALANCE_POLL_SECONDS", str(DEFAULT_BALANCE_POLL_SECONDS))
        ),
    )
