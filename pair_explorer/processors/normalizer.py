"""
Fixed-point value normalization.

On-chain balances are integers scaled by ``10 ** decimals``. These helpers
convert them to exact decimal strings and back using integer arithmetic
only, so no significant digit is ever rounded away.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from ..models import NOT_AVAILABLE, ReserveRecord, TokenRecord

LP_TOKEN_DECIMALS = 18
MAX_DECIMALS = 255
PRICE_PLACES = 6


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise TypeError(f"decimals must be an int, got {type(decimals).__name__}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")
    return decimals


def format_units(value: int, decimals: int) -> str:
    """
    Format a raw integer as a decimal string.

    Trailing zeros of the fraction are trimmed but one fraction digit is
    always kept, e.g. ``format_units(1_500_000, 6) == "1.5"`` and
    ``format_units(10**18, 18) == "1.0"``.

    Args:
        value: Raw on-chain integer
        decimals: Token precision (0-255)

    Returns:
        Decimal string representation
    """
    _check_decimals(decimals)
    value = int(value)

    sign = "-" if value < 0 else ""
    integer, fraction = divmod(abs(value), 10 ** decimals)

    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{sign}{integer}.{fraction_text or '0'}"


def parse_units(text: str, decimals: int) -> int:
    """
    Parse a decimal string back into a raw integer.

    Raises:
        ValueError: If the text is not a plain decimal number or carries
            more fractional digits than ``decimals`` allows
    """
    _check_decimals(decimals)
    text = str(text).strip()

    negative = text.startswith("-")
    if negative:
        text = text[1:]

    integer, _, fraction = text.partition(".")
    if not integer and not fraction:
        raise ValueError(f"Invalid decimal string: {text!r}")
    if not integer:
        integer = "0"
    if not integer.isdigit() or (fraction and not fraction.isdigit()):
        raise ValueError(f"Invalid decimal string: {text!r}")

    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise ValueError(
            f"Too many decimal places for {decimals} decimals: {text!r}"
        )

    raw = int(integer) * 10 ** decimals + int(fraction.ljust(decimals, "0") or "0")
    return -raw if negative else raw


def price_ratio(
    formatted_reserve0: str, formatted_reserve1: str, places: int = PRICE_PLACES
) -> str:
    """
    Price of token0 in units of token1.

    Returns "N/A" when reserve0 is zero, since the ratio is undefined.
    """
    try:
        reserve0 = Decimal(formatted_reserve0)
        reserve1 = Decimal(formatted_reserve1)
    except InvalidOperation:
        return NOT_AVAILABLE

    if reserve0 == 0:
        return NOT_AVAILABLE

    # Integer digits of the quotient grow with the decimals gap between the tokens
    with localcontext() as ctx:
        ctx.prec = max(160, reserve1.adjusted() - reserve0.adjusted() + places + 3)
        quantum = Decimal(1).scaleb(-places)
        return str((reserve1 / reserve0).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize_reserves(
    reserve0: int, reserve1: int, token0: TokenRecord, token1: TokenRecord
) -> ReserveRecord:
    """Build the reserve record from raw reserves and each token's decimals."""
    return ReserveRecord(
        reserve0=str(int(reserve0)),
        reserve1=str(int(reserve1)),
        formatted_reserve0=format_units(reserve0, token0.decimals),
        formatted_reserve1=format_units(reserve1, token1.decimals),
    )


def normalize_total_supply(total_supply: int) -> str:
    """LP tokens are assumed to use 18 decimals."""
    return format_units(total_supply, LP_TOKEN_DECIMALS)
