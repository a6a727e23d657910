"""Sale price calculation per discount type."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from storefront.models.discount import DiscountType

CENTS = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceChange:
    original: Decimal
    discounted: Decimal
    amount: Decimal


def parse_price(value: object) -> Decimal:
    """Parse a stored price; anything unparseable counts as 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        return ZERO
    return price if price.is_finite() else ZERO


def format_price(value: Decimal) -> str:
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def calculate_discount(
    price: Decimal, discount_type: str, value: float | int | str
) -> PriceChange | None:
    """Return the price change for one product, or ``None`` for unknown types.

    ``buy_x_get_y`` leaves the price untouched; the storefront handles it.
    """
    rate = parse_price(value)
    if discount_type == DiscountType.PERCENTAGE.value:
        discounted = (price - price * rate / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
    elif discount_type == DiscountType.FIXED.value:
        discounted = price - min(rate, price)
    elif discount_type == DiscountType.BUY_X_GET_Y.value:
        discounted = price
    else:
        return None

    discounted = max(discounted, ZERO)
    return PriceChange(original=price, discounted=discounted, amount=price - discounted)
