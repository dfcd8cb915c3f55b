"""In-memory stock store — process-local stock levels for development and tests."""

import threading

import structlog

from rentals.order.errors import InsufficientStock
from rentals.stock.port import StockStorePort

logger = structlog.get_logger(__name__)


class InMemoryStockStore(StockStorePort):
    """Stock levels held in a dict, guarded by a single lock."""

    def __init__(self, levels: dict[str, int] | None = None):
        self._levels: dict[str, int] = dict(levels or {})
        self._lock = threading.RLock()

    def set_level(self, product_id: str, quantity: int) -> None:
        with self._lock:
            self._levels[product_id] = quantity

    def available(self, product_id: str) -> int:
        with self._lock:
            return self._levels.get(product_id, 0)

    def decrement(self, product_id: str, quantity: int) -> None:
        with self._lock:
            on_hand = self._levels.get(product_id, 0)
            if quantity > on_hand:
                raise InsufficientStock(product_id, requested=quantity, available=on_hand)
            self._levels[product_id] = on_hand - quantity

    def restock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            self._levels[product_id] = self._levels.get(product_id, 0) + quantity

    def decrement_all(self, lines: list[tuple[str, int]]) -> None:
        # Hold the lock across all lines so no other order can interleave.
        with self._lock:
            super().decrement_all(lines)
        logger.debug("Stock decremented", lines=lines)

    def reset(self, levels: dict[str, int] | None = None) -> None:
        with self._lock:
            self._levels = dict(levels or {})
