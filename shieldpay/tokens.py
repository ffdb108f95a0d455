"""Token registry and base-unit conversion."""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, Overflow, localcontext

from .constants import SOL_DECIMALS, USDC_MINT, USDT_MINT
from .exceptions import InvalidAmount, UnknownToken


@dataclass(frozen=True)
class Token:
    """A supported asset."""

    symbol: str
    name: str
    decimals: int
    mint: str | None = None
    is_native: bool = False


SUPPORTED_TOKENS: dict[str, Token] = {
    "SOL": Token(symbol="SOL", name="SOL", decimals=SOL_DECIMALS, is_native=True),
    "USDC": Token(symbol="USDC", name="USDC", decimals=6, mint=USDC_MINT),
    "USDT": Token(symbol="USDT", name="Tether USD", decimals=6, mint=USDT_MINT),
}


def get_token_by_symbol(symbol: str) -> Token | None:
    return SUPPORTED_TOKENS.get(symbol)


def require_token(symbol: str) -> Token:
    """Look up a token, raising UnknownToken if it is not registered."""
    token = get_token_by_symbol(symbol)
    if token is None:
        raise UnknownToken(f"Unsupported token: {symbol!r}")
    return token


def parse_amount(amount: str | int | float | Decimal) -> Decimal:
    """Parse a human-readable amount into a finite Decimal.

    Floats go through ``str`` first so ``0.3`` stays ``0.3``.

    Raises:
        InvalidAmount: If the value is not a finite number.
    """
    if isinstance(amount, bool):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    return value


def to_base_units(amount: str | int | float | Decimal, decimals: int) -> int:
    """Convert a human-readable amount to base units: floor(amount * 10^decimals).

    Raises:
        InvalidAmount: If the value is not a finite number or is out of range.
    """
    value = parse_amount(amount)
    with localcontext() as ctx:
        # Exact for any input length, so the floor is never preceded by rounding
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + decimals)
        try:
            scaled = value.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN)
        except Overflow:
            raise InvalidAmount(f"Amount out of range: {amount!r}") from None
    return int(scaled)


def from_base_units(amount: int, decimals: int) -> Decimal:
    return Decimal(amount) / (Decimal(10) ** decimals)


def format_token_amount(amount: int, decimals: int, display_decimals: int = 2) -> str:
    """Format a base-unit amount for display, truncated to ``display_decimals``."""
    quantum = Decimal(1).scaleb(-display_decimals)
    return str(from_base_units(amount, decimals).quantize(quantum, rounding=ROUND_DOWN))
