"""Tests for OrderStore."""

import json
from decimal import Decimal

import pytest

from storefront.errors import DuplicateOrderCodeError, OrderNotFoundError, OrderPersistenceError
from storefront.models import CartItem, Order
from storefront.order_store import OrderStore


def make_order(code="ORD-AAAA0001", payable="189.90"):
    return Order(
        code=code,
        customer_name="Ada Lovelace",
        customer_email="ada@example.com",
        total_amount=Decimal("160.00"),
        shipping_amount=Decimal("29.90"),
        payable_amount=Decimal(payable),
        items=[
            CartItem(
                product_id=1,
                name="Leather Case",
                quantity=2,
                unit_price=Decimal("80.00"),
                original_price=Decimal("100"),
                discount_percent=Decimal("20"),
            )
        ],
        card_brand="visa",
        card_last4="1111",
    )


class TestOrderStore:
    def test_create_assigns_ids(self, order_store):
        assert order_store.create_order(make_order("ORD-1")) == 1
        assert order_store.create_order(make_order("ORD-2")) == 2

    def test_round_trip(self, order_store):
        order_store.create_order(make_order())

        loaded = order_store.get_order("ORD-AAAA0001")

        assert loaded.id == 1
        assert loaded.payable_amount == Decimal("189.90")
        assert loaded.items[0].unit_price == Decimal("80.00")
        assert loaded.items[0].quantity == 2
        assert loaded.masked_card == "VISA •••• 1111"
        assert loaded.status == "paid"

    def test_duplicate_code_rejected(self, order_store):
        order_store.create_order(make_order("ORD-SAME"))

        with pytest.raises(DuplicateOrderCodeError):
            order_store.create_order(make_order("ORD-SAME"))

        assert len(order_store.list_orders()) == 1

    def test_duplicate_is_a_persistence_error(self):
        assert issubclass(DuplicateOrderCodeError, OrderPersistenceError)

    def test_get_missing(self, order_store):
        with pytest.raises(OrderNotFoundError):
            order_store.get_order("ORD-NOPE")

    def test_list_newest_first_with_limit(self, order_store):
        for i in range(3):
            order_store.create_order(make_order(f"ORD-{i}"))

        assert [o.code for o in order_store.list_orders()] == ["ORD-2", "ORD-1", "ORD-0"]
        assert [o.code for o in order_store.list_orders(limit=2)] == ["ORD-2", "ORD-1"]

    def test_code_exists(self, order_store):
        order_store.create_order(make_order("ORD-X"))

        assert order_store.code_exists("ORD-X")
        assert not order_store.code_exists("ORD-Y")

    def test_no_card_number_on_disk(self, order_store):
        order_store.create_order(make_order())

        text = order_store.path.read_text()
        assert "1111" in text
        data = json.loads(text)
        assert set(data["orders"][0]) == {
            "id", "code", "customer_name", "customer_email", "total_amount",
            "shipping_amount", "payable_amount", "items", "card_brand",
            "card_last4", "status", "created_at",
        }

    def test_unreadable_file_raises_persistence_error(self, temp_dir):
        store = OrderStore(temp_dir)
        store.path.write_text("{ not json")

        with pytest.raises(OrderPersistenceError) as exc_info:
            store.create_order(make_order())

        assert exc_info.value.code == "ORD-AAAA0001"

    def test_unwritable_directory_raises_persistence_error(self, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("a file, not a directory")
        store = OrderStore(blocker / "data")

        with pytest.raises(OrderPersistenceError):
            store.create_order(make_order())
