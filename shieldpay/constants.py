"""Constants for shieldpay."""

# Native asset
SOL_DECIMALS = 9

# SPL token mints (mainnet)
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

# Payment links
LINK_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
LINK_ID_LENGTH = 12
LINK_KEY_PREFIX = "paylink:"
LINK_TTL_SECONDS = 60 * 60 * 24 * 7  # 7 days
LINK_MAX_LABEL_LENGTH = 50
LINK_CREATE_MAX_ATTEMPTS = 3
PAY_PATH = "/pay"

# Key session
SIGN_IN_MESSAGE = b"Privacy Money account sign in"
SIGNATURE_LENGTH = 64

# Transfers
MIN_RECIPIENTS = 1
MAX_RECIPIENTS = 5
DEFAULT_TOKEN_SETTLE_DELAY_SECONDS = 2.0

# Balance polling
DEFAULT_BALANCE_POLL_SECONDS = 5.0

# Defaults
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
