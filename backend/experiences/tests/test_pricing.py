from decimal import Decimal

import pytest

from experiences.pricing import calculate_total_price, format_amount, is_crypto_currency, to_amount


def test_total_price_is_price_times_guests():
    assert calculate_total_price(Decimal("299"), 2) == Decimal("598.00")
    assert calculate_total_price("120.50", 3) == Decimal("361.50")


def test_total_price_requires_a_guest():
    with pytest.raises(ValueError):
        calculate_total_price(Decimal("100"), 0)


def test_to_amount_rounds_half_up():
    assert to_amount(0.125) == Decimal("0.13")
    assert to_amount("10") == Decimal("10.00")


def test_crypto_currency_detection():
    assert is_crypto_currency("usdc")
    assert is_crypto_currency("AVAX")
    assert not is_crypto_currency("USD")
    assert not is_crypto_currency("")


def test_format_amount():
    assert format_amount(Decimal("299"), "usdc") == "299.00 USDC"
