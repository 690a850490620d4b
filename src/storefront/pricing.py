"""Sale price computation.

A product's sale price is its list price reduced by its discount percent.
The discount is clamped to [0, MAX_DISCOUNT_PERCENT] wherever it is read, so a
bad value stored by hand can never produce a price below 10% of list.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .config import MAX_DISCOUNT_PERCENT
from .models import Product

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _parse_decimal(value: Any) -> Decimal | None:
    """Parse a numeric value. None/empty count as zero, garbage as None."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed


def clamp_discount(discount_percent: Any) -> Decimal:
    """Clamp a discount percent into [0, MAX_DISCOUNT_PERCENT].

    Non-numeric input clamps to 0.
    """
    parsed = _parse_decimal(discount_percent)
    if parsed is None:
        return ZERO
    return min(max(parsed, ZERO), MAX_DISCOUNT_PERCENT)


def compute_sale_price(price: Any, discount_percent: Any = 0) -> Decimal:
    """
    Compute the sale price of a list price after discount.

    The discount is clamped to [0, 90]. The result is rounded half-up to
    cents and floored at zero. Returns 0 if either input is not a number.

    Examples:
        compute_sale_price(100, 20) -> Decimal("80.00")
        compute_sale_price(100, 200) -> Decimal("10.00")
    """
    base = _parse_decimal(price)
    discount = _parse_decimal(discount_percent)
    if base is None or discount is None:
        return ZERO.quantize(CENT)

    safe_discount = min(max(discount, ZERO), MAX_DISCOUNT_PERCENT)
    raw = base * (1 - safe_discount / 100)
    sale = raw.quantize(CENT, rounding=ROUND_HALF_UP)
    return max(ZERO.quantize(CENT), sale)


@dataclass(frozen=True)
class PricedProduct:
    """A product decorated with its current sale price."""

    product: Product
    sale_price: Decimal
    discount_percent: Decimal

    @property
    def on_sale(self) -> bool:
        return self.sale_price < self.product.price

    def to_dict(self) -> dict[str, Any]:
        data = self.product.to_dict()
        data["discount_percent"] = str(self.discount_percent)
        data["sale_price"] = str(self.sale_price)
        data["image_url"] = self.product.image_url
        return data


def with_pricing(product: Product | None) -> PricedProduct | None:
    """Attach the sale price to a product without touching the product."""
    if product is None:
        return None
    return PricedProduct(
        product=product,
        sale_price=compute_sale_price(product.price, product.discount_percent),
        discount_percent=clamp_discount(product.discount_percent),
    )
