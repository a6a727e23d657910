"""Tests for discount price calculation."""

from decimal import Decimal

import pytest

from storefront.services.discounts.pricing import (
    calculate_discount,
    format_price,
    parse_price,
)


@pytest.mark.parametrize(
    ("price", "value", "expected"),
    [
        ("100.00", 20, "80.00"),
        ("19.99", 15, "16.99"),
        ("49.95", 33.3, "33.32"),
        ("10.00", 150, "0.00"),
    ],
)
def test_percentage_rounds_to_cents_and_clamps(price, value, expected):
    change = calculate_discount(Decimal(price), "percentage", value)

    assert format_price(change.discounted) == expected
    assert change.discounted + change.amount == Decimal(price)


def test_fixed_discount_never_goes_negative():
    change = calculate_discount(Decimal("100.00"), "fixed", 150)

    assert format_price(change.discounted) == "0.00"
    assert format_price(change.amount) == "100.00"


def test_fixed_discount_subtracts_exactly():
    change = calculate_discount(Decimal("59.99"), "fixed", 10)

    assert change.discounted == Decimal("49.99")
    assert format_price(change.amount) == "10.00"


def test_buy_x_get_y_leaves_price_unchanged():
    change = calculate_discount(Decimal("42.00"), "buy_x_get_y", 1)

    assert change.discounted == Decimal("42.00")
    assert change.amount == 0


def test_unknown_type_returns_none():
    assert calculate_discount(Decimal("42.00"), "bogo_deluxe", 10) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12.50", Decimal("12.50")), (" 7 ", Decimal("7")), ("", Decimal("0")),
     ("n/a", Decimal("0")), (None, Decimal("0")), (15, Decimal("15")), ("NaN", Decimal("0"))],
)
def test_parse_price(raw, expected):
    assert parse_price(raw) == expected
