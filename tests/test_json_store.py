"""Tests for the JSON document store base class and the session cart store."""

import json
import threading

import pytest

from storefront.json_store import JsonFileStore
from storefront.models import CartLine
from storefront.session_store import InMemoryCartStore


class CounterStore(JsonFileStore):
    FILENAME = "counter.json"

    def empty_document(self):
        return {"schema_version": 1, "next_id": 1, "items": []}


class TestJsonFileStore:
    def test_missing_file_reads_empty_document(self, temp_dir):
        store = CounterStore(temp_dir)

        assert store._load_data() == {"schema_version": 1, "next_id": 1, "items": []}
        assert not store.exists()

    def test_transaction_saves(self, temp_dir):
        store = CounterStore(temp_dir)

        with store.transaction() as data:
            data["items"].append(store._next_id(data, "next_id"))

        assert json.loads(store.path.read_text()) == {
            "schema_version": 1, "next_id": 2, "items": [1],
        }

    def test_transaction_discarded_on_error(self, temp_dir):
        store = CounterStore(temp_dir)

        with pytest.raises(RuntimeError):
            with store.transaction() as data:
                data["items"].append("lost")
                raise RuntimeError("boom")

        assert not store.exists()

    def test_creates_data_dir(self, temp_dir):
        store = CounterStore(temp_dir / "nested" / "dir")

        with store.transaction():
            pass

        assert store.exists()

    def test_concurrent_transactions_do_not_lose_updates(self, temp_dir):
        def worker():
            store = CounterStore(temp_dir)
            for _ in range(10):
                with store.transaction() as data:
                    data["items"].append(store._next_id(data, "next_id"))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        data = json.loads(CounterStore(temp_dir).path.read_text())
        assert sorted(data["items"]) == list(range(1, 41))


class TestInMemoryCartStore:
    def test_empty_session(self):
        assert InMemoryCartStore().get_cart("nobody") == []

    def test_save_and_clear(self):
        store = InMemoryCartStore()
        store.save_cart("s", [CartLine(product_id=1, quantity=2)])

        assert store.session_count() == 1
        assert store.get_cart("s")[0].quantity == 2

        store.clear_cart("s")
        assert store.get_cart("s") == []
        assert store.session_count() == 0

    def test_saving_empty_cart_drops_session(self):
        store = InMemoryCartStore()
        store.save_cart("s", [CartLine(product_id=1)])
        store.save_cart("s", [])

        assert store.session_count() == 0
