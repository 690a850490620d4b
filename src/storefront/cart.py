"""Cart totals and session cart operations.

Cart lines are references, not price locks: every totals pass re-reads the
product and recomputes its sale price. Lines whose product has been deleted
are pruned silently. The number pruned is reported on CartTotals.dropped
for diagnostics, but nothing fails because of it.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable

from .config import FREE_SHIPPING_THRESHOLD, SHIPPING_FEE
from .errors import ProductUnavailableError
from .models import CartItem, CartLine, CartTotals, Product
from .pricing import clamp_discount, compute_sale_price
from .protocols import ProductLookup, SessionCartStore

logger = logging.getLogger(__name__)


def _line_quantity(raw: Any) -> int:
    """Quantity used for pricing: at least 1, non-numeric counts as 1."""
    try:
        qty = int(raw)
    except (TypeError, ValueError):
        return 1
    return max(1, qty)


def shipping_for(total_amount: Decimal) -> Decimal:
    """Flat shipping fee, waived at or above the free-shipping threshold."""
    if total_amount >= FREE_SHIPPING_THRESHOLD:
        return Decimal("0.00")
    return SHIPPING_FEE


def _resolve_line(line: CartLine, product: Product) -> CartItem:
    unit_price = compute_sale_price(product.price, product.discount_percent)
    return CartItem(
        product_id=product.id,
        name=product.name,
        quantity=_line_quantity(line.quantity),
        unit_price=unit_price,
        original_price=product.price or unit_price,
        discount_percent=clamp_discount(product.discount_percent),
        thumbnail=product.image_url,
    )


def compute_cart_totals(
    cart_lines: Iterable[CartLine], product_lookup: ProductLookup
) -> CartTotals:
    """
    Price a cart against the current catalog.

    Args:
        cart_lines: Session cart lines, in display order.
        product_lookup: Source of current product data.

    Returns:
        CartTotals whose items follow the input order, minus pruned lines.
    """
    items: list[CartItem] = []
    dropped = 0
    total_amount = Decimal("0.00")

    for line in cart_lines:
        product = product_lookup.get_product(line.product_id)
        if product is None:
            dropped += 1
            continue
        item = _resolve_line(line, product)
        items.append(item)
        total_amount += item.line_total

    if dropped:
        logger.debug("Pruned %d cart line(s) for deleted products", dropped)

    shipping = shipping_for(total_amount)
    return CartTotals(
        items=items,
        total_amount=total_amount,
        shipping=shipping,
        payable=total_amount + shipping,
        total_items=sum(item.quantity for item in items),
        dropped=dropped,
    )


def cart_item_count(cart_lines: Iterable[CartLine]) -> int:
    """Total quantity across lines, as shown on the cart badge."""
    return sum(_line_quantity(line.quantity) for line in cart_lines)


def _refresh_snapshot(line: CartLine, product: Product) -> None:
    unit_price = compute_sale_price(product.price, product.discount_percent)
    line.name = product.name
    line.unit_price = unit_price
    line.original_price = product.price or unit_price
    line.discount_percent = clamp_discount(product.discount_percent)
    line.thumbnail = product.image_url


def add_to_cart(
    store: SessionCartStore,
    product_lookup: ProductLookup,
    session_id: str,
    product_id: int,
) -> list[CartLine]:
    """
    Add one unit of a product to the session cart.

    An existing line is incremented and its snapshot refreshed; otherwise a
    new line with quantity 1 is appended.

    Returns:
        The updated cart.

    Raises:
        ProductUnavailableError: If the product is missing, out of stock, or
            has no price.
    """
    product = product_lookup.get_product(product_id)
    if product is None:
        raise ProductUnavailableError(product_id, "not found")
    if product.stock <= 0:
        raise ProductUnavailableError(product_id, "out of stock")
    if product.price <= 0:
        raise ProductUnavailableError(product_id, "not priced")

    lines = store.get_cart(session_id)
    existing = next((line for line in lines if line.product_id == product_id), None)
    if existing is not None:
        existing.quantity = _line_quantity(existing.quantity) + 1
        _refresh_snapshot(existing, product)
    else:
        line = CartLine(product_id=product.id, quantity=1)
        _refresh_snapshot(line, product)
        lines.append(line)

    store.save_cart(session_id, lines)
    return lines


def update_quantity(
    store: SessionCartStore, session_id: str, product_id: int, quantity: Any
) -> list[CartLine]:
    """
    Set the quantity of a cart line.

    Negative or non-numeric quantities count as 0, and 0 removes the line.
    Updating a product that isn't in the cart does nothing.
    """
    try:
        qty = max(0, int(quantity))
    except (TypeError, ValueError):
        qty = 0

    lines = store.get_cart(session_id)
    existing = next((line for line in lines if line.product_id == product_id), None)
    if existing is None:
        return lines

    if qty == 0:
        lines = [line for line in lines if line.product_id != product_id]
    else:
        existing.quantity = qty

    store.save_cart(session_id, lines)
    return lines


def remove_from_cart(
    store: SessionCartStore, session_id: str, product_id: int
) -> list[CartLine]:
    """Remove a product's line from the cart."""
    lines = [
        line for line in store.get_cart(session_id) if line.product_id != product_id
    ]
    store.save_cart(session_id, lines)
    return lines
