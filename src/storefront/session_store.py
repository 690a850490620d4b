"""In-memory session cart storage for storefront."""

import threading

from .models import CartLine


class InMemoryCartStore:
    """Keeps each session's cart in process memory.

    Lines are stored as dicts and rebuilt on every read, so callers can mutate
    what they get back without touching the stored cart.
    """

    def __init__(self):
        self._carts: dict[str, list[dict]] = {}
        self._lock = threading.Lock()

    def get_cart(self, session_id: str) -> list[CartLine]:
        with self._lock:
            stored = self._carts.get(session_id, [])
            return [CartLine.from_dict(line) for line in stored]

    def save_cart(self, session_id: str, lines: list[CartLine]) -> None:
        with self._lock:
            if lines:
                self._carts[session_id] = [line.to_dict() for line in lines]
            else:
                self._carts.pop(session_id, None)

    def clear_cart(self, session_id: str) -> None:
        with self._lock:
            self._carts.pop(session_id, None)

    def session_count(self) -> int:
        """Number of sessions holding a non-empty cart."""
        with self._lock:
            return len(self._carts)
