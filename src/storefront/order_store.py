"""Order storage for storefront."""

import dataclasses
import logging
from typing import Any

from .errors import DuplicateOrderCodeError, OrderNotFoundError, OrderPersistenceError
from .json_store import SCHEMA_VERSION, JsonFileStore
from .models import Order

logger = logging.getLogger(__name__)


class OrderStore(JsonFileStore):
    """Append-only record of completed checkouts.

    Order codes are unique; create_order refuses a code that is already
    stored. Orders are never modified once written.
    """

    FILENAME = "orders.json"

    def empty_document(self) -> dict[str, Any]:
        return {"schema_version": SCHEMA_VERSION, "next_order_id": 1, "orders": []}

    def create_order(self, order: Order) -> int:
        """
        Persist an order.

        Returns:
            The numeric ID assigned to the order.

        Raises:
            DuplicateOrderCodeError: If the code already exists.
            OrderPersistenceError: If the order file can't be read or written.
        """
        try:
            with self.transaction() as data:
                if any(o["code"] == order.code for o in data.get("orders", [])):
                    raise DuplicateOrderCodeError(order.code)
                order_id = self._next_id(data, "next_order_id")
                stored = dataclasses.replace(order, id=order_id)
                data["orders"].append(stored.to_dict())
        except (OSError, ValueError) as e:
            raise OrderPersistenceError(order.code, str(e)) from e

        logger.info("Stored order %s as #%s", order.code, order_id)
        return order_id

    def list_orders(self, limit: int | None = None) -> list[Order]:
        """
        List orders, newest first.

        Args:
            limit: Maximum number of orders to return.
        """
        data = self._load_data()
        orders = [Order.from_dict(o) for o in data.get("orders", [])]
        orders.sort(key=lambda o: o.id or 0, reverse=True)
        if limit:
            orders = orders[:limit]
        return orders

    def get_order(self, code: str) -> Order:
        """
        Get an order by code.

        Raises:
            OrderNotFoundError: If no order has that code.
        """
        data = self._load_data()
        for o in data.get("orders", []):
            if o["code"] == code:
                return Order.from_dict(o)
        raise OrderNotFoundError(code)

    def code_exists(self, code: str) -> bool:
        data = self._load_data()
        return any(o["code"] == code for o in data.get("orders", []))
