from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

DEFAULT_CURRENCY = "USDC"

CRYPTO_CURRENCIES = frozenset({"BTC", "ETH", "USDC", "USDT", "XRP", "SOL", "ADA", "AVAX"})

TWO_PLACES = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_amount(value: Number) -> Decimal:
    """Coerce a price-like value into a two decimal place Decimal."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_total_price(price_per_guest: Number, guests: int) -> Decimal:
    if guests < 1:
        raise ValueError("A booking needs at least one guest.")
    return to_amount(to_amount(price_per_guest) * guests)


def is_crypto_currency(currency: str) -> bool:
    return (currency or "").upper() in CRYPTO_CURRENCIES


def format_amount(amount: Number, currency: str) -> str:
    """
    Render an amount the way checkout screens show it, e.g. ``"299.00 USDC"``.
    """
    return f"{to_amount(amount)} {currency.upper()}"
