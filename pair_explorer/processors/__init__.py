from .normalizer import (
    LP_TOKEN_DECIMALS,
    format_units,
    normalize_reserves,
    normalize_total_supply,
    parse_units,
    price_ratio,
)

__all__ = [
    "LP_TOKEN_DECIMALS",
    "format_units",
    "parse_units",
    "price_ratio",
    "normalize_reserves",
    "normalize_total_supply",
]
