"""Stock store port — abstract interface for the product stock collaborator.

The rentals domain only ever takes stock when an order is placed. Restocking
is exposed so that a partially applied decrement can be rolled back.
"""

from abc import ABC, abstractmethod


class StockStorePort(ABC):
    """Abstract interface for stock store adapters."""

    @abstractmethod
    def available(self, product_id: str) -> int:
        """Return units currently on hand for ``product_id`` (0 if unknown)."""
        ...

    @abstractmethod
    def decrement(self, product_id: str, quantity: int) -> None:
        """Take ``quantity`` units.

        Raises:
            InsufficientStock: when fewer than ``quantity`` units are on hand.
        """
        ...

    @abstractmethod
    def restock(self, product_id: str, quantity: int) -> None:
        """Put ``quantity`` units back."""
        ...

    def decrement_all(self, lines: list[tuple[str, int]]) -> None:
        """Take stock for every line, or for none of them.

        Lines already taken are restocked when a later line fails.
        """
        taken: list[tuple[str, int]] = []
        try:
            for product_id, quantity in lines:
                self.decrement(product_id, quantity)
                taken.append((product_id, quantity))
        except Exception:
            for product_id, quantity in reversed(taken):
                self.restock(product_id, quantity)
            raise
